"""Tests for the memo envelope: header codec, payload record, atomic writes."""

import os
import struct

import pytest

from bfmemo.cache.envelope import (
    HEADER,
    PickleSerializer,
    decode_header,
    encode_header,
    make_record,
    read_payload,
    reader_class_name,
    unpack_record,
    write_memo,
)
from bfmemo.core.constants import MEMO_VERSION
from bfmemo.core.exceptions import EnvelopeError, IncompatibleVersionError, PersistError
from bfmemo.core.types import Fingerprint
from bfmemo.readers import FakeReader

from memo_helpers import CountingFakeReader, leftover_tmp_files

FP = Fingerprint(size=1234, mtime_ns=1_700_000_000_123_456_789)


class TestHeader:
    def test_layout_is_big_endian_uint32_uint64_uint64(self):
        data = encode_header(FP)
        assert len(data) == 4 + 8 + 8
        assert data == struct.pack(">IQQ", MEMO_VERSION, 1234, 1_700_000_000_123_456_789)

    def test_decode(self):
        header = decode_header(encode_header(FP, version=7) + b"payload")
        assert header.version == 7
        assert header.fingerprint == FP

    def test_truncated_header(self):
        with pytest.raises(EnvelopeError):
            decode_header(b"\x00\x00\x00\x01")


class TestRecord:
    def test_unpack_returns_state(self):
        reader = FakeReader()
        record = make_record(reader, "/a/b.fake", {"k": 1})
        assert record["reader"] == "bfmemo.readers.fake.FakeReader"
        assert unpack_record(record, reader, "/a/b.fake") == {"k": 1}

    def test_other_reader_class_rejected(self):
        record = make_record(FakeReader(), "/a/b.fake", None)
        with pytest.raises(EnvelopeError, match="another reader"):
            unpack_record(record, CountingFakeReader(), "/a/b.fake")

    def test_other_source_rejected(self):
        reader = FakeReader()
        record = make_record(reader, "/a/b.fake", None)
        with pytest.raises(EnvelopeError, match="another source"):
            unpack_record(record, reader, "/a/c.fake")

    @pytest.mark.parametrize("record", [None, [], {"reader": "x"}, "state"])
    def test_malformed_record(self, record):
        with pytest.raises(EnvelopeError):
            unpack_record(record, FakeReader(), "/a/b.fake")

    def test_reader_class_name_is_qualified(self):
        assert reader_class_name(CountingFakeReader()).endswith(".CountingFakeReader")


class TestWriteAndRead:
    def test_write_then_read_payload(self, tmp_path):
        path = tmp_path / "nested" / "dirs" / ".x.fake.bfmemo"
        write_memo(path, FP, b"opaque")
        assert path.read_bytes()[: HEADER.size] == encode_header(FP)
        assert read_payload(path, FP) == b"opaque"
        assert leftover_tmp_files(tmp_path) == []

    def test_overwrite_replaces_whole_file(self, tmp_path):
        path = tmp_path / ".x.bfmemo"
        write_memo(path, FP, b"a much longer first payload")
        write_memo(path, FP, b"short")
        assert read_payload(path, FP) == b"short"

    def test_read_payload_fingerprint_mismatch(self, tmp_path):
        path = tmp_path / ".x.bfmemo"
        write_memo(path, FP, b"data")
        with pytest.raises(EnvelopeError):
            read_payload(path, Fingerprint(size=1, mtime_ns=FP.mtime_ns))

    def test_read_payload_version_mismatch(self, tmp_path):
        path = tmp_path / ".x.bfmemo"
        path.write_bytes(encode_header(FP, version=MEMO_VERSION + 1) + b"data")
        with pytest.raises(IncompatibleVersionError):
            read_payload(path, FP)

    def test_read_payload_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            read_payload(tmp_path / "missing", FP)

    def test_failed_rename_leaves_no_temp_and_keeps_old_memo(self, tmp_path, monkeypatch):
        path = tmp_path / ".x.bfmemo"
        write_memo(path, FP, b"old")

        def boom(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", boom)
        with pytest.raises(PersistError) as exc_info:
            write_memo(path, FP, b"new")

        assert isinstance(exc_info.value.cause, OSError)
        assert leftover_tmp_files(tmp_path) == []
        monkeypatch.undo()
        assert read_payload(path, FP) == b"old"

    def test_interrupted_write_removes_temp(self, tmp_path, monkeypatch):
        path = tmp_path / ".x.bfmemo"

        def interrupted(fd):
            raise KeyboardInterrupt

        monkeypatch.setattr(os, "fsync", interrupted)
        with pytest.raises(KeyboardInterrupt):
            write_memo(path, FP, b"data")

        monkeypatch.undo()
        assert not path.exists()
        assert leftover_tmp_files(tmp_path) == []


class TestPickleSerializer:
    def test_round_trip_of_nested_state(self):
        serializer = PickleSerializer()
        state = {"series": [1, 2, 3], "meta": {"a": (1.5, None)}}
        assert serializer.loads(serializer.dumps(state)) == state
