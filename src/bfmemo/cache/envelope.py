"""On-disk memo envelope.

Layout::

    +---------+-------------+--------------+-----------------+
    | version | source size | source mtime | payload ...     |
    | uint32  | uint64      | uint64 (ns)  | serializer bytes|
    +---------+-------------+--------------+-----------------+

All header integers are big-endian. The payload is the serializer's
encoding of a small record holding the reader class, the source id and
the reader's opaque state (see :func:`make_record`).

Writes go to a temporary file in the target directory which is then
renamed over the memo path, so a memo file is either complete or absent.
"""

from __future__ import annotations

import os
import pickle
import struct
import tempfile
from pathlib import Path
from typing import Any, BinaryIO

from bfmemo.core.constants import MEMO_VERSION
from bfmemo.core.exceptions import EnvelopeError, IncompatibleVersionError, PersistError
from bfmemo.core.types import Fingerprint, MemoHeader

HEADER = struct.Struct(">IQQ")

_RECORD_KEYS = ("reader", "source", "state")


class PickleSerializer:
    """Default serializer: pickle at the highest available protocol.

    Loading runs arbitrary pickled code, so the cache root must be trusted
    (not shared with or writable by other users).
    """

    def __init__(self, protocol: int = pickle.HIGHEST_PROTOCOL) -> None:
        self.protocol = protocol

    def dumps(self, obj: Any) -> bytes:
        return pickle.dumps(obj, protocol=self.protocol)

    def loads(self, data: bytes) -> Any:
        return pickle.loads(data)


def reader_class_name(reader: Any) -> str:
    cls = type(reader)
    return f"{cls.__module__}.{cls.__qualname__}"


# ----------------------------------------------------------------------
# Header
# ----------------------------------------------------------------------


def encode_header(fingerprint: Fingerprint, version: int = MEMO_VERSION) -> bytes:
    return HEADER.pack(version, fingerprint.size, fingerprint.mtime_ns)


def decode_header(data: bytes) -> MemoHeader:
    """Decode the fixed-size header at the start of ``data``.

    Raises:
        EnvelopeError: If fewer than ``HEADER.size`` bytes are available
    """
    if len(data) < HEADER.size:
        raise EnvelopeError(
            "Memo file too short for header",
            details={"got": len(data), "need": HEADER.size},
        )
    version, size, mtime_ns = HEADER.unpack_from(data)
    return MemoHeader(version=version, fingerprint=Fingerprint(size=size, mtime_ns=mtime_ns))


def read_header(f: BinaryIO) -> MemoHeader:
    return decode_header(f.read(HEADER.size))


# ----------------------------------------------------------------------
# Payload record
# ----------------------------------------------------------------------


def make_record(reader: Any, source: str, state: Any) -> dict:
    return {"reader": reader_class_name(reader), "source": source, "state": state}


def unpack_record(record: Any, reader: Any, source: str) -> Any:
    """Return the state held by ``record`` if it belongs to this reader and source.

    Raises:
        EnvelopeError: If the record is malformed or was produced for another
            reader class or another source
    """
    if not isinstance(record, dict) or any(k not in record for k in _RECORD_KEYS):
        raise EnvelopeError("Memo payload is not a memo record")
    expected_reader = reader_class_name(reader)
    if record["reader"] != expected_reader:
        raise EnvelopeError(
            "Memo was written by another reader",
            details={"found": record["reader"], "expected": expected_reader},
        )
    if record["source"] != source:
        raise EnvelopeError(
            "Memo was written for another source",
            details={"found": record["source"], "expected": source},
        )
    return record["state"]


# ----------------------------------------------------------------------
# File I/O
# ----------------------------------------------------------------------


def read_payload(path: Path, expected: Fingerprint) -> bytes:
    """Read a memo file and return its payload bytes.

    The header is checked again here because the file may have been
    replaced since it was first validated.

    Raises:
        OSError: If the file cannot be read
        EnvelopeError: If the header is truncated or the fingerprint differs
        IncompatibleVersionError: If the version tag differs
    """
    with open(path, "rb") as f:
        data = f.read()

    header = decode_header(data)
    if header.version != MEMO_VERSION:
        raise IncompatibleVersionError(
            "Memo version mismatch",
            details={"found": header.version, "expected": MEMO_VERSION},
        )
    if header.fingerprint != expected:
        raise EnvelopeError("Memo fingerprint changed during read", details={"path": path})
    return data[HEADER.size :]


def write_memo(path: Path, fingerprint: Fingerprint, payload: bytes) -> None:
    """Atomically write a memo file.

    Missing directories below an existing cache root are created. The
    temporary file is removed if anything fails before the rename.

    Raises:
        PersistError: If the file could not be written or renamed
    """
    path = Path(path)
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=path.name + ".", suffix=".tmp", dir=path.parent)
        with os.fdopen(fd, "wb") as f:
            f.write(encode_header(fingerprint))
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as e:
        raise PersistError("Could not write memo file", details={"path": path}, cause=e) from e
    finally:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
