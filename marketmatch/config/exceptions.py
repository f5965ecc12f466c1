"""Custom exceptions for matching configuration management."""

from pathlib import Path
from typing import List, Optional, Union


class ConfigurationError(Exception):
    """
    Exception raised when a configuration resource or variable is invalid.

    Stores the offending location (if any), individual problems, and
    suggestions so the message can be logged as a single readable block.
    """

    def __init__(
        self,
        message: str,
        errors: Optional[List[str]] = None,
        suggestions: Optional[List[str]] = None,
        location: Optional[Union[str, Path]] = None,
    ):
        """
        Initialize ConfigurationError.

        Args:
            message: Primary error message
            errors: List of specific problems found
            suggestions: List of hints to fix the problems
            location: Configuration resource the error refers to
        """
        self.message = message
        self.errors = errors or []
        self.suggestions = suggestions or []
        self.location = str(location) if location is not None else None
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with location, errors and suggestions."""
        parts = [self.message]

        if self.location:
            parts.append(f"Location: {self.location}")

        if self.errors:
            parts.append("Errors:")
            parts.extend(f"  {i}. {error}" for i, error in enumerate(self.errors, 1))

        if self.suggestions:
            parts.append("Suggestions:")
            parts.extend(f"  - {suggestion}" for suggestion in self.suggestions)

        return "\n".join(parts)
