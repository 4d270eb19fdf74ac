"""Core data types shared by the cache modules."""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Fingerprint:
    """Lightweight signature of a source file's content.

    Attributes:
        size: File size in bytes
        mtime_ns: Last-modified time in nanoseconds since the epoch
    """

    size: int
    mtime_ns: int

    @classmethod
    def of(cls, path: str) -> Optional["Fingerprint"]:
        """Fingerprint a file, or None if it cannot be stat'ed."""
        try:
            st = os.stat(path)
        except OSError:
            return None
        return cls(size=st.st_size, mtime_ns=max(st.st_mtime_ns, 0))


@dataclass(frozen=True)
class MemoHeader:
    """Decoded header of a memo file."""

    version: int
    fingerprint: Fingerprint
