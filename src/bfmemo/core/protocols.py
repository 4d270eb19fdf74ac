"""Protocol definitions for bfmemo.

The memoizer depends only on these capabilities, never on concrete reader
types, so any data source that can be initialized, snapshotted and restored
can sit behind it.

Usage:
    from bfmemo.core.protocols import MemoizableReader

    if not isinstance(reader, MemoizableReader):
        raise TypeError("Reader cannot be memoized")
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class MemoizableReader(Protocol):
    """A reader whose expensive initialization can be captured and replayed.

    Implemented by: FormatReader, FakeReader
    """

    def set_id(self, source_id: str) -> None:
        """Run the expensive initialization for a source."""
        ...

    def close(self) -> None:
        """Release the initialized state and any open handles."""
        ...

    def save_state(self) -> Any:
        """Return the opaque, serializable result of initialization."""
        ...

    def restore_state(self, state: Any) -> None:
        """Adopt a state previously returned by save_state()."""
        ...


@runtime_checkable
class Serializer(Protocol):
    """Turns opaque reader state into bytes and back.

    Implemented by: PickleSerializer
    """

    def dumps(self, obj: Any) -> bytes:
        ...

    def loads(self, data: bytes) -> Any:
        ...
