"""Base reader for data sources whose initialization is worth memoizing.

A reader's ``set_id`` does the expensive work (scanning files, parsing
metadata) and leaves everything it learned in a :class:`ReaderState`.
That state is all a memoizer needs to persist: ``save_state`` hands it
out and ``restore_state`` adopts it, reopening any file handles.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

PIXEL_TYPES: Dict[str, np.dtype] = {
    "int8": np.dtype(np.int8),
    "uint8": np.dtype(np.uint8),
    "int16": np.dtype(np.int16),
    "uint16": np.dtype(np.uint16),
    "int32": np.dtype(np.int32),
    "uint32": np.dtype(np.uint32),
    "float": np.dtype(np.float32),
    "double": np.dtype(np.float64),
}

DIMENSION_ORDERS = ("XYZCT", "XYZTC", "XYCZT", "XYCTZ", "XYTZC", "XYTCZ")


@dataclass
class CoreMetadata:
    """Dimensions and pixel layout of one image series."""

    size_x: int
    size_y: int
    size_z: int = 1
    size_c: int = 1
    size_t: int = 1
    pixel_type: str = "uint8"
    dimension_order: str = "XYZCT"
    little_endian: bool = True

    def __post_init__(self) -> None:
        for name in ("size_x", "size_y", "size_z", "size_c", "size_t"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1, got {getattr(self, name)}")
        if self.pixel_type not in PIXEL_TYPES:
            raise ValueError(f"Unknown pixel type: {self.pixel_type}")
        if self.dimension_order not in DIMENSION_ORDERS:
            raise ValueError(f"Unknown dimension order: {self.dimension_order}")

    @property
    def image_count(self) -> int:
        return self.size_z * self.size_c * self.size_t

    @property
    def dtype(self) -> np.dtype:
        dtype = PIXEL_TYPES[self.pixel_type]
        return dtype.newbyteorder("<" if self.little_endian else ">")


@dataclass
class ReaderState:
    """Everything a reader knows after initializing a source.

    Attributes:
        source_id: Identifier the reader was initialized with
        series: Core metadata, one entry per series
        metadata: Global key/value metadata
        files: Files that make up the dataset
    """

    source_id: str
    series: List[CoreMetadata]
    metadata: Dict[str, Any] = field(default_factory=dict)
    files: List[str] = field(default_factory=list)


class FormatReader(ABC):
    """Base class for readers usable behind a Memoizer.

    Subclasses implement :meth:`_init_file` (expensive) and
    :meth:`_open_plane`; they may override :meth:`_reopen` and
    :meth:`_close_handles` when they keep files open.
    """

    format_name: str = "Unknown"
    suffixes: Tuple[str, ...] = ()

    def __init__(self) -> None:
        self._state: Optional[ReaderState] = None
        self._series = 0

    # -- Type detection ---------------------------------------------------

    @classmethod
    def is_this_type(cls, source_id: str) -> bool:
        name = os.path.basename(os.fspath(source_id)).lower()
        return any(name.endswith(suffix) for suffix in cls.suffixes)

    # -- Lifecycle --------------------------------------------------------

    def set_id(self, source_id: str) -> None:
        """Initialize the reader for ``source_id``."""
        source_id = os.fspath(source_id)
        if self._state is not None and self._state.source_id == source_id:
            return
        self.close()
        self._state = self._init_file(source_id)
        self._series = 0

    def close(self) -> None:
        self._close_handles()
        self._state = None
        self._series = 0

    def save_state(self) -> ReaderState:
        return self._require_state()

    def restore_state(self, state: Any) -> None:
        if not isinstance(state, ReaderState):
            raise TypeError(f"Expected ReaderState, got {type(state).__name__}")
        self.close()
        self._state = state
        self._reopen()

    @property
    def is_open(self) -> bool:
        return self._state is not None

    # -- Metadata ---------------------------------------------------------

    @property
    def source_id(self) -> str:
        return self._require_state().source_id

    @property
    def series_count(self) -> int:
        return len(self._require_state().series)

    @property
    def series(self) -> int:
        return self._series

    def set_series(self, series: int) -> None:
        if not 0 <= series < self.series_count:
            raise IndexError(f"Series {series} out of range [0, {self.series_count})")
        self._series = series

    @property
    def core(self) -> CoreMetadata:
        return self._require_state().series[self._series]

    @property
    def size_x(self) -> int:
        return self.core.size_x

    @property
    def size_y(self) -> int:
        return self.core.size_y

    @property
    def size_z(self) -> int:
        return self.core.size_z

    @property
    def size_c(self) -> int:
        return self.core.size_c

    @property
    def size_t(self) -> int:
        return self.core.size_t

    @property
    def pixel_type(self) -> str:
        return self.core.pixel_type

    @property
    def image_count(self) -> int:
        return self.core.image_count

    @property
    def metadata(self) -> Dict[str, Any]:
        return self._require_state().metadata

    def get_metadata_value(self, key: str, default: Any = None) -> Any:
        return self.metadata.get(key, default)

    # -- Pixels -----------------------------------------------------------

    def open_bytes(self, no: int) -> np.ndarray:
        """Return plane ``no`` of the current series as a (size_y, size_x) array."""
        count = self.image_count
        if not 0 <= no < count:
            raise IndexError(f"Plane {no} out of range [0, {count})")
        return self._open_plane(no)

    # -- Subclass hooks ---------------------------------------------------

    @abstractmethod
    def _init_file(self, source_id: str) -> ReaderState:
        ...

    @abstractmethod
    def _open_plane(self, no: int) -> np.ndarray:
        ...

    def _reopen(self) -> None:
        """Reacquire file handles after a restored state is adopted."""

    def _close_handles(self) -> None:
        """Release file handles held by the reader."""

    def _require_state(self) -> ReaderState:
        if self._state is None:
            raise RuntimeError(f"{type(self).__name__} has not been initialized; call set_id() first")
        return self._state
