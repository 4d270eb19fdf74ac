"""Custom exceptions for bfmemo.

All exceptions inherit from BFMemoError. Only ConfigError and
InitializationError ever reach callers of the memoizer; the MemoError
family describes caching failures, which are absorbed and logged.

Usage:
    try:
        memoizer.set_id(path)
    except InitializationError as e:
        logger.error("Could not open %s: %s", path, e.cause)
"""

from typing import Any, Dict, Optional


class BFMemoError(Exception):
    """Base exception for all bfmemo errors.

    Attributes:
        message: Human-readable error message
        details: Optional dictionary with additional context
        cause: Optional original exception that caused this error
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        self.message = message
        self.details = details or {}
        self.cause = cause
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with details."""
        msg = self.message
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            msg = f"{msg} ({detail_str})"
        if self.cause:
            msg = f"{msg} [caused by: {type(self.cause).__name__}: {self.cause}]"
        return msg


class ConfigError(BFMemoError):
    """Configuration error.

    Raised when:
    - Config file not found or not a mapping
    - Invalid config value (negative threshold, bad env override)
    """

    pass


class InitializationError(BFMemoError):
    """The wrapped reader failed to initialize a source.

    This is the only failure the memoizer surfaces to its callers.
    """

    pass


class MemoError(BFMemoError):
    """Caching-specific failure. Never escapes the memoizer."""

    pass


class EnvelopeError(MemoError):
    """Memo file is truncated, foreign, or its payload cannot be decoded."""

    pass


class IncompatibleVersionError(MemoError):
    """Memo file was written by a different cache-format version."""

    pass


class PersistError(MemoError):
    """Writing or renaming the memo file failed."""

    pass
