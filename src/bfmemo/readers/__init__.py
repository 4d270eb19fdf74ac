"""Readers that can be wrapped by the memoizer."""

from bfmemo.readers.base import PIXEL_TYPES, CoreMetadata, FormatReader, ReaderState
from bfmemo.readers.fake import FakeReader, parse_fake_id
from bfmemo.readers.registry import ReaderRegistry

ReaderRegistry.register("fake")(FakeReader)

__all__ = [
    "FormatReader",
    "CoreMetadata",
    "ReaderState",
    "PIXEL_TYPES",
    "FakeReader",
    "parse_fake_id",
    "ReaderRegistry",
]
