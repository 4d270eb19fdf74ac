"""Memoization layer for expensive reader initialization.

The cache package wraps any reader with a persistent memo of its
initialized state, invisible to code that uses the reader.

Architecture:
    - paths: where a source's memo file lives (or None when disabled)
    - validity: whether a memo file can be trusted (version + fingerprint)
    - envelope: the on-disk format and the atomic writer
    - memoizer: the wrapper tying the three together

Usage:
    from bfmemo.cache import Memoizer
    from bfmemo.config import MemoConfig

    memo = Memoizer(reader, MemoConfig(directory="/var/cache/bfmemo"))
    memo.set_id(path)        # hit: restored; miss: initialized, maybe saved
    memo.close()
"""

from bfmemo.cache.envelope import PickleSerializer, read_payload, write_memo
from bfmemo.cache.memoizer import Memoizer
from bfmemo.cache.paths import canonical_source, memo_filename, resolve_memo_path
from bfmemo.cache.validity import check_memo, is_valid

__all__ = [
    "Memoizer",
    "PickleSerializer",
    "resolve_memo_path",
    "memo_filename",
    "canonical_source",
    "check_memo",
    "is_valid",
    "read_payload",
    "write_memo",
]
