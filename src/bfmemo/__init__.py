"""bfmemo - persistent memoization of expensive reader initialization.

Opening a large multi-file dataset can take seconds to minutes, mostly
spent discovering files and parsing metadata. bfmemo captures the reader's
initialized state in a hidden memo file the first time and restores it
on later opens, as long as the source is unchanged.

Quick start:
    from bfmemo import FakeReader, MemoConfig, Memoizer

    config = MemoConfig(directory="/tmp/memos", minimum_elapsed_ms=0)
    with Memoizer(FakeReader(), config) as reader:
        reader.set_id("img&sizeX=64&sizeY=64.fake")
        plane = reader.open_bytes(0)
"""

__version__ = "0.1.0"

from bfmemo.cache import Memoizer, check_memo, resolve_memo_path
from bfmemo.config import MemoConfig, load_config
from bfmemo.core import (
    BFMemoError,
    ConfigError,
    InitializationError,
    LoadOutcome,
    MemoStatus,
    SaveOutcome,
)
from bfmemo.readers import FakeReader, FormatReader, ReaderRegistry

__all__ = [
    "__version__",
    "Memoizer",
    "MemoConfig",
    "load_config",
    "resolve_memo_path",
    "check_memo",
    "FormatReader",
    "FakeReader",
    "ReaderRegistry",
    "BFMemoError",
    "ConfigError",
    "InitializationError",
    "MemoStatus",
    "LoadOutcome",
    "SaveOutcome",
]
