"""Configuration schema for the memoizer.

The cache policy is an explicit value handed to each Memoizer, so several
memoizers with different policies can coexist in one process.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bfmemo.core.constants import DEFAULT_MINIMUM_ELAPSED_MS


class MemoConfig(BaseModel):
    """Where memo files go and when they are worth writing.

    Three policies are expressible:

    - no ``directory`` and ``in_place=False``: caching disabled
    - ``directory`` set: memo files mirror the source tree under it
    - ``in_place=True`` (or ``directory`` set to a filesystem root): memo
      files sit next to their source, hidden

    Memo files are unpickled when read, so the cache root must be trusted:
    a directory other users cannot write to.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    directory: Optional[Path] = Field(default=None, description="Cache root directory")
    minimum_elapsed_ms: float = Field(
        default=DEFAULT_MINIMUM_ELAPSED_MS,
        description="Initializations faster than this are not persisted",
    )
    in_place: bool = Field(default=False, description="Store memo files beside their source")

    @field_validator("minimum_elapsed_ms")
    @classmethod
    def validate_minimum_elapsed(cls, v: float) -> float:
        if v < 0:
            raise ValueError("minimum_elapsed_ms must be >= 0")
        return v

    @field_validator("directory", mode="before")
    @classmethod
    def validate_directory(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return Path(v).expanduser()

    @classmethod
    def disabled(cls) -> "MemoConfig":
        """No directory and no in-place flag: every open runs the reader."""
        return cls()

    @classmethod
    def co_located(cls, minimum_elapsed_ms: float = DEFAULT_MINIMUM_ELAPSED_MS) -> "MemoConfig":
        """In-place caching with only a threshold given."""
        return cls(minimum_elapsed_ms=minimum_elapsed_ms, in_place=True)

    @property
    def is_in_place(self) -> bool:
        if self.in_place:
            return True
        # A filesystem root as cache directory means "next to the source"
        return self.directory is not None and _is_filesystem_root(self.directory)

    @property
    def enabled(self) -> bool:
        return self.in_place or self.directory is not None


def _is_filesystem_root(path: Path) -> bool:
    path = Path(path)
    return path.is_absolute() and path == Path(path.anchor)
