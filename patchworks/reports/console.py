"""Terminal and filesystem collaborators used by the CLI."""

import sys
from pathlib import Path
from typing import Callable, Optional, TextIO

from patchworks.logging import get_logger
from patchworks.pipeline.collaborators import ConfirmationPrompt, ReportDirectoryProvider

logger = get_logger(__name__, component="reports")

_YES = {"y", "yes"}
_NO = {"", "n", "no"}


class ConsoleConfirmation(ConfirmationPrompt):
    """
    Prints the fetch summary to stdout and asks a yes/no question.

    With ``auto_confirm`` the question is answered yes without reading
    input. End of input counts as no.
    """

    def __init__(
        self,
        auto_confirm: bool = False,
        input_func: Callable[[str], str] = input,
        stream: Optional[TextIO] = None,
    ):
        self.auto_confirm = auto_confirm
        self.input_func = input_func
        self.stream = stream

    def confirm(self, summary: str, question: str) -> bool:
        out = self.stream or sys.stdout
        out.write(f"Results:\n{summary}\n\n")
        out.flush()

        if self.auto_confirm:
            logger.debug(
                "Confirmation answered automatically",
                extra={"event": "confirm.auto"},
            )
            return True

        while True:
            try:
                answer = self.input_func(f"{question} [y/N] ").strip().lower()
            except EOFError:
                return False
            if answer in _YES:
                return True
            if answer in _NO:
                return False
            out.write("Please answer 'y' or 'n'.\n")


class ReportDirectory(ReportDirectoryProvider):
    """Creates the report directory on demand."""

    def __init__(self, path):
        self.path = Path(path)

    def prepare(self) -> Path:
        self.path.mkdir(parents=True, exist_ok=True)
        logger.debug(
            f"Report directory ready: {self.path}",
            extra={"event": "report.directory.prepared", "path": str(self.path)},
        )
        return self.path
