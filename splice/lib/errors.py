"""
Exceptions raised by the splice engine and its resolvers.

Malformed placeholders are never errors: they pass through as literal text.
What does raise:
- ResolverError: a resolver refused a filename
- ReplacementError: the collaborator failed while supplying content
- StreamHaltedError: an engine was used after it halted or ended
"""

from typing import Any, Optional


class SpliceError(Exception):
    """Base exception for all splice errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            details: Optional dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ResolverError(SpliceError):
    """A resolver could not or would not supply content for a filename."""

    def __init__(self, message: str, filename: str) -> None:
        super().__init__(message, {"filename": filename})
        self.filename = filename


class ReplacementError(SpliceError):
    """The collaborator failed while resolving or streaming a replacement.

    The original exception is kept as ``cause`` and chained via ``from``.
    """

    def __init__(self, filename: str, cause: BaseException) -> None:
        super().__init__(
            f"Replacement for '{filename}' failed: {cause}", {"filename": filename}
        )
        self.filename = filename
        self.cause = cause


class StreamHaltedError(SpliceError):
    """Input was offered to an engine that has halted or ended."""

    pass
