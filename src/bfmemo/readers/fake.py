"""Synthetic reader whose dataset is described entirely by its file name.

Identifiers look like::

    test&pixelType=int8&sizeX=20&sizeY=20&sizeC=1&sizeZ=1&sizeT=1.fake

The part before the first ``&`` is the image name; the rest are
``key=value`` pairs. Recognized keys:

=================  =========  ======================================
key                default    meaning
=================  =========  ======================================
sizeX, sizeY       512        plane width and height
sizeZ, sizeC,      1          focal planes, channels, time points
sizeT
pixelType          uint8      one of ``PIXEL_TYPES``
dimOrder           XYZCT      plane ordering
little             true       byte order of the planes
series             1          number of identical series
sleepInitFile      0          milliseconds to sleep while initializing
=================  =========  ======================================

Unrecognized keys are kept as global metadata. The file itself does not
need to exist.
"""

from __future__ import annotations

import os
import time
from typing import Any, Dict

import numpy as np

from bfmemo.readers.base import CoreMetadata, FormatReader, ReaderState

_INT_KEYS = {
    "sizeX": "size_x",
    "sizeY": "size_y",
    "sizeZ": "size_z",
    "sizeC": "size_c",
    "sizeT": "size_t",
}

_DEFAULT_SIZE = 512


def parse_fake_id(source_id: str) -> Dict[str, str]:
    """Split a fake identifier into its name and ``key=value`` tokens."""
    base = os.path.basename(os.fspath(source_id))
    if base.lower().endswith(".fake"):
        base = base[: -len(".fake")]
    name, _, rest = base.partition("&")
    tokens: Dict[str, str] = {"name": name}
    for token in rest.split("&"):
        if not token:
            continue
        key, sep, value = token.partition("=")
        if not sep:
            raise ValueError(f"Malformed token {token!r} in {source_id!r}")
        tokens[key] = value
    return tokens


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("true", "1", "yes"):
        return True
    if lowered in ("false", "0", "no"):
        return False
    raise ValueError(f"Not a boolean: {value!r}")


class FakeReader(FormatReader):
    """Reader for ``.fake`` identifiers, used for tests and demos."""

    format_name = "Simulated data"
    suffixes = (".fake",)

    def _init_file(self, source_id: str) -> ReaderState:
        tokens = parse_fake_id(source_id)

        sleep_ms = float(tokens.pop("sleepInitFile", 0))
        if sleep_ms > 0:
            time.sleep(sleep_ms / 1000.0)

        sizes: Dict[str, Any] = {}
        for key, attr in _INT_KEYS.items():
            sizes[attr] = int(tokens.pop(key, _DEFAULT_SIZE if attr in ("size_x", "size_y") else 1))

        core = CoreMetadata(
            pixel_type=tokens.pop("pixelType", "uint8"),
            dimension_order=tokens.pop("dimOrder", "XYZCT").upper(),
            little_endian=_parse_bool(tokens.pop("little", "true")),
            **sizes,
        )

        series_count = int(tokens.pop("series", 1))
        if series_count < 1:
            raise ValueError(f"series must be >= 1, got {series_count}")

        name = tokens.pop("name")
        return ReaderState(
            source_id=source_id,
            series=[CoreMetadata(**vars(core)) for _ in range(series_count)],
            metadata={"name": name, **tokens},
            files=[source_id],
        )

    def _open_plane(self, no: int) -> np.ndarray:
        core = self.core
        # Diagonal gradient offset by plane number, wrapped to the pixel type
        ramp = np.add.outer(np.arange(core.size_y), np.arange(core.size_x)) + no
        if np.issubdtype(core.dtype, np.integer):
            info = np.iinfo(core.dtype)
            ramp = ramp % (int(info.max) - int(info.min) + 1) + int(info.min)
        return ramp.astype(core.dtype)
