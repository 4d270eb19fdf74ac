"""Decide whether a memo file can be trusted.

Only the fixed-size header is read here; the payload is never touched
until the memo has been judged valid.
"""

from pathlib import Path
from typing import Optional

from bfmemo.cache.envelope import read_header
from bfmemo.cache.paths import SourceId, canonical_source
from bfmemo.core.constants import MEMO_VERSION, MemoStatus
from bfmemo.core.exceptions import EnvelopeError
from bfmemo.core.logging import get_logger
from bfmemo.core.types import Fingerprint

logger = get_logger(__name__)


def check_memo(memo_path: Optional[Path], source_id: SourceId) -> MemoStatus:
    """Classify the memo file for ``source_id``.

    Args:
        memo_path: Resolved memo location, or None when caching is disabled
        source_id: Source the memo should describe

    Returns:
        ``MemoStatus.VALID`` only if the file exists, carries the current
        format version and matches the source's current fingerprint.
    """
    if memo_path is None:
        return MemoStatus.DISABLED

    try:
        with open(memo_path, "rb") as f:
            header = read_header(f)
    except FileNotFoundError:
        return MemoStatus.ABSENT
    except EnvelopeError:
        logger.debug("Memo %s has a truncated header", memo_path)
        return MemoStatus.CORRUPT
    except OSError as e:
        logger.debug("Memo %s is unreadable: %s", memo_path, e)
        return MemoStatus.UNREADABLE

    if header.version != MEMO_VERSION:
        logger.debug(
            "Memo %s has version %d, expected %d", memo_path, header.version, MEMO_VERSION
        )
        return MemoStatus.INCOMPATIBLE

    current = Fingerprint.of(str(canonical_source(source_id)))
    if current is None or current != header.fingerprint:
        logger.debug(
            "Memo %s is stale (stored=%s, current=%s)", memo_path, header.fingerprint, current
        )
        return MemoStatus.STALE

    return MemoStatus.VALID


def is_valid(memo_path: Optional[Path], source_id: SourceId) -> bool:
    return check_memo(memo_path, source_id) is MemoStatus.VALID
