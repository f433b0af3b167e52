"""Exceptions raised while loading configuration and input files."""

from typing import List, Optional


class ConfigurationError(Exception):
    """Invalid configuration, environment or candidate input.

    Carries the individual validation problems and hints for fixing them;
    ``str()`` renders all three as a block suitable for the terminal.
    """

    def __init__(
        self,
        message: str,
        errors: Optional[List[str]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.message = message
        self.errors = list(errors or [])
        self.suggestions = list(suggestions or [])
        super().__init__(self.render())

    def render(self) -> str:
        lines = [self.message]
        if self.errors:
            lines.append("\nValidation Errors:")
            lines.extend(f"  {index}. {error}" for index, error in enumerate(self.errors, 1))
        if self.suggestions:
            lines.append("\nSuggestions:")
            lines.extend(f"  - {suggestion}" for suggestion in self.suggestions)
        return "\n".join(lines)
