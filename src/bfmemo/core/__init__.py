"""Core infrastructure for bfmemo.

This module provides foundational components:
- Exceptions: Custom exception hierarchy
- Logging: Structured logging configuration
- Protocols: Reader and serializer interfaces
- Constants: Memo naming, format version and outcome enums
"""

from bfmemo.core.constants import (
    DEFAULT_MINIMUM_ELAPSED_MS,
    MEMO_EXTENSION,
    MEMO_VERSION,
    LoadOutcome,
    MemoizerState,
    MemoStatus,
    SaveOutcome,
)
from bfmemo.core.exceptions import (
    BFMemoError,
    ConfigError,
    EnvelopeError,
    IncompatibleVersionError,
    InitializationError,
    MemoError,
    PersistError,
)
from bfmemo.core.logging import configure_logging, get_logger
from bfmemo.core.protocols import MemoizableReader, Serializer
from bfmemo.core.types import Fingerprint, MemoHeader

__all__ = [
    # Exceptions
    "BFMemoError",
    "ConfigError",
    "InitializationError",
    "MemoError",
    "EnvelopeError",
    "IncompatibleVersionError",
    "PersistError",
    # Logging
    "get_logger",
    "configure_logging",
    # Protocols
    "MemoizableReader",
    "Serializer",
    # Types
    "Fingerprint",
    "MemoHeader",
    # Constants
    "MEMO_EXTENSION",
    "MEMO_VERSION",
    "DEFAULT_MINIMUM_ELAPSED_MS",
    "MemoStatus",
    "LoadOutcome",
    "SaveOutcome",
    "MemoizerState",
]
