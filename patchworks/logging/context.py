"""Scoped logging context backed by contextvars.

Fields pushed here (``run_id``, ``package`` ...) are merged into every log
record emitted while the scope is active, see ``ContextualFilter``.
"""

from contextvars import ContextVar, Token
from typing import Any, Dict, Optional

LogContextVar: ContextVar[Dict[str, Any]] = ContextVar("patchworks_log_context", default={})


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the fields currently in scope."""
    return dict(LogContextVar.get())


def push_log_context(**fields) -> Token:
    """Merge ``fields`` into the active context.

    Returns:
        Token to hand back to ``pop_log_context``
    """
    return LogContextVar.set({**LogContextVar.get(), **fields})


def pop_log_context(token: Token) -> None:
    """Restore the context that was active before ``push_log_context``."""
    LogContextVar.reset(token)


def clear_log_context() -> None:
    """Drop every context field (used by tests)."""
    LogContextVar.set({})


class log_context:
    """Context manager that adds fields for the duration of a block.

    Example:
        >>> with log_context(run_id="3f2a", package="requests"):
        ...     logger.info("Fetching release notes")
    """

    def __init__(self, **fields):
        self.fields = fields
        self.token: Optional[Token] = None

    def __enter__(self):
        self.token = push_log_context(**self.fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.token is not None:
            pop_log_context(self.token)
            self.token = None
        return False
