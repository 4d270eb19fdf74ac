"""Memo-file placement.

A memo file is always named ``.<source-name>.bfmemo``. Where it lives
depends on the policy in :class:`~bfmemo.config.MemoConfig`:

- disabled: nowhere, ``resolve_memo_path`` returns None
- explicit directory: ``<directory>/<source-dir-without-anchor>/.<name>.bfmemo``.
  Mirroring the source directory keeps same-named sources apart.
- in place: ``<source-dir>/.<name>.bfmemo``

Resolution only looks at the filesystem (does the cache root exist?); it
never creates anything.
"""

import os
from pathlib import Path
from typing import Optional, Union

from bfmemo.config.schemas import MemoConfig
from bfmemo.core.constants import MEMO_EXTENSION

SourceId = Union[str, "os.PathLike[str]"]


def canonical_source(source_id: SourceId) -> Path:
    """Absolute form of a source identifier, without resolving symlinks."""
    return Path(os.path.abspath(os.fspath(source_id)))


def memo_filename(source_id: SourceId) -> str:
    """Hidden memo filename for a source, e.g. ``.a.fake.bfmemo``."""
    return f".{canonical_source(source_id).name}.{MEMO_EXTENSION}"


def mirrored_subpath(source_id: SourceId) -> Path:
    """Source directory with its drive/root stripped.

    ``/data/run1/a.fake`` gives ``data/run1``.
    """
    parent = canonical_source(source_id).parent
    return parent.relative_to(parent.anchor)


def resolve_memo_path(source_id: SourceId, config: Optional[MemoConfig]) -> Optional[Path]:
    """Return the memo path for ``source_id`` under ``config``, or None.

    None means no valid location: caching is disabled, the configured
    directory does not exist, or the identifier has no file name.
    """
    if config is None or not config.enabled:
        return None

    source = canonical_source(source_id)
    if not source.name:
        return None
    name = memo_filename(source)

    if config.is_in_place:
        return source.parent / name

    directory = Path(os.path.abspath(config.directory))
    if not directory.is_dir():
        return None

    return directory / mirrored_subpath(source) / name
