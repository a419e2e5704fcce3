"""Configuration errors."""

from typing import Iterable, Optional


class ConfigurationError(Exception):
    """
    Raised when the config file or the environment cannot be used.

    ``source`` names where the problem was found: a config file path, or
    ``"environment"`` for environment variables. Every problem found in one
    pass is kept in ``errors`` so they can all be fixed at once.
    """

    def __init__(
        self,
        message: str,
        errors: Optional[Iterable[str]] = None,
        suggestions: Optional[Iterable[str]] = None,
        source: Optional[str] = None,
    ):
        self.message = message
        self.errors = list(errors or ())
        self.suggestions = list(suggestions or ())
        self.source = source
        super().__init__(self.render())

    def render(self) -> str:
        """Multi-line report listing the errors, then the suggestions."""
        header = f"{self.message} ({self.source})" if self.source else self.message
        lines = [header]
        if self.errors:
            lines += ["", "Validation Errors:"]
            lines += [f"  {n}. {error}" for n, error in enumerate(self.errors, 1)]
        if self.suggestions:
            lines += ["", "Suggestions:"]
            lines += [f"  - {hint}" for hint in self.suggestions]
        return "\n".join(lines)
