"""Structured logging helpers shared by every Patchworks component."""

import logging
from typing import Optional


class ComponentLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter that tags records with a component name.

    Fields passed through ``extra`` on an individual call win over the
    adapter defaults, so a call can still override ``component``.
    """

    def process(self, msg, kwargs):
        call_extra = kwargs.get("extra") or {}
        kwargs["extra"] = {**self.extra, **call_extra}
        return msg, kwargs


def get_logger(name: str, component: Optional[str] = None):
    """Return a module logger, optionally bound to a component label.

    Args:
        name: Logger name (normally ``__name__``)
        component: Component label added to every record (``fetcher``,
            ``pipeline``, ``categorization`` ...)

    Returns:
        A plain ``logging.Logger`` or a ``ComponentLoggerAdapter``

    Example:
        >>> logger = get_logger(__name__, component="fetcher")
        >>> logger.info("Release notes fetched", extra={"event": "fetch.release_notes.found"})
    """
    logger = logging.getLogger(name)
    if component:
        return ComponentLoggerAdapter(logger, {"component": component})
    return logger
