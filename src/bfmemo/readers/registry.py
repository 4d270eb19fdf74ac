"""Reader registry.

Maps source identifiers to reader classes by file suffix, so the CLI (and
other callers) can open a source without naming its format.

Example:
    >>> from bfmemo.readers.registry import ReaderRegistry
    >>> from bfmemo.readers.base import FormatReader
    >>>
    >>> @ReaderRegistry.register("tiles")
    >>> class TileReader(FormatReader):
    ...     suffixes = (".tiles",)
"""

from typing import Callable, Dict, List, Type

from bfmemo.core.logging import get_logger
from bfmemo.readers.base import FormatReader

logger = get_logger(__name__)


class ReaderRegistry:
    """Registry of reader classes, consulted in registration order."""

    _readers: Dict[str, Type[FormatReader]] = {}

    @classmethod
    def register(cls, name: str) -> Callable:
        """Decorator to register a reader class under ``name``."""

        def decorator(reader_class: Type[FormatReader]) -> Type[FormatReader]:
            if name in cls._readers:
                logger.warning("Overwriting existing reader registration: %s", name)
            cls._readers[name] = reader_class
            return reader_class

        return decorator

    @classmethod
    def get(cls, name: str) -> Type[FormatReader]:
        """Get a registered reader class by name.

        Raises:
            ValueError: If no reader is registered under ``name``
        """
        if name not in cls._readers:
            available = ", ".join(sorted(cls._readers.keys()))
            raise ValueError(f"Reader '{name}' not found. Available readers: {available}")
        return cls._readers[name]

    @classmethod
    def for_source(cls, source_id: str) -> Type[FormatReader]:
        """Get the first reader class that claims ``source_id``.

        Raises:
            ValueError: If no registered reader handles the source
        """
        for reader_class in cls._readers.values():
            if reader_class.is_this_type(source_id):
                return reader_class
        raise ValueError(f"No reader found for {source_id}")

    @classmethod
    def list_readers(cls) -> List[str]:
        return list(cls._readers.keys())

    @classmethod
    def unregister(cls, name: str) -> None:
        cls._readers.pop(name, None)
