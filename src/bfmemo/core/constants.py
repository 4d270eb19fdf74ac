"""Constants and enums for bfmemo.

Centralizes the memo-file naming, format version and outcome enums.
"""

from enum import Enum

# Memo files are named ".<source-name>.<MEMO_EXTENSION>"
MEMO_EXTENSION = "bfmemo"

# Bump whenever the envelope or the payload layout changes
MEMO_VERSION = 1

# Initializations faster than this are not worth persisting
DEFAULT_MINIMUM_ELAPSED_MS = 100.0

# Environment variables
CACHE_DIR_ENV = "BFMEMO_DIR"
IN_PLACE_ENV = "BFMEMO_IN_PLACE"
MIN_ELAPSED_ENV = "BFMEMO_MIN_ELAPSED_MS"


class MemoStatus(str, Enum):
    """Result of inspecting a memo file before trusting it."""

    DISABLED = "disabled"  # no location resolves for the source
    ABSENT = "absent"
    VALID = "valid"
    STALE = "stale"  # source changed since the memo was written
    INCOMPATIBLE = "incompatible"  # different cache-format version
    CORRUPT = "corrupt"
    UNREADABLE = "unreadable"

    @property
    def is_hit(self) -> bool:
        return self is MemoStatus.VALID

    @property
    def should_delete(self) -> bool:
        """Whether the memo on disk is garbage and may be removed."""
        return self in (MemoStatus.STALE, MemoStatus.INCOMPATIBLE, MemoStatus.CORRUPT)


class LoadOutcome(str, Enum):
    """How the reader state was obtained on the last open."""

    DISABLED = "disabled"
    HIT = "hit"
    MISS = "miss"


class SaveOutcome(str, Enum):
    """What happened to the memo file after a miss."""

    NOT_ATTEMPTED = "not_attempted"
    SAVED = "saved"
    SKIPPED_FAST = "skipped_fast"
    SKIPPED_CHANGED = "skipped_changed"
    FAILED = "failed"


class MemoizerState(str, Enum):
    """Lifecycle of a Memoizer."""

    UNINITIALIZED = "uninitialized"
    OPENING = "opening"
    OPENED = "opened"
    CLOSED = "closed"
