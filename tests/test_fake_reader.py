"""Tests for FakeReader and the reader registry."""

import numpy as np
import pytest

from bfmemo.readers import FakeReader, FormatReader, ReaderRegistry, ReaderState, parse_fake_id

from memo_helpers import TEST_FILE


class TestParseFakeId:
    def test_tokens(self):
        tokens = parse_fake_id("/data/" + TEST_FILE)
        assert tokens["name"] == "test"
        assert tokens["sizeX"] == "20"
        assert tokens["pixelType"] == "int8"

    def test_plain_name(self):
        assert parse_fake_id("image.fake") == {"name": "image"}

    def test_malformed_token(self):
        with pytest.raises(ValueError):
            parse_fake_id("img&sizeX.fake")


class TestFakeReader:
    def test_core_metadata(self):
        reader = FakeReader()
        reader.set_id(TEST_FILE)
        assert (reader.size_x, reader.size_y) == (20, 20)
        assert (reader.size_z, reader.size_c, reader.size_t) == (1, 1, 1)
        assert reader.pixel_type == "int8"
        assert reader.image_count == 1
        assert reader.get_metadata_value("name") == "test"

    def test_defaults(self):
        reader = FakeReader()
        reader.set_id("plain.fake")
        assert reader.size_x == 512 and reader.size_y == 512
        assert reader.pixel_type == "uint8"

    def test_extra_keys_become_metadata(self):
        reader = FakeReader()
        reader.set_id("img&sizeX=4&sizeY=4&instrument=confocal.fake")
        assert reader.metadata["instrument"] == "confocal"

    def test_series(self):
        reader = FakeReader()
        reader.set_id("img&sizeX=4&sizeY=4&series=3.fake")
        assert reader.series_count == 3
        reader.set_series(2)
        assert reader.series == 2
        with pytest.raises(IndexError):
            reader.set_series(3)

    def test_planes(self):
        reader = FakeReader()
        reader.set_id("img&sizeX=6&sizeY=4&sizeZ=2&pixelType=uint16.fake")
        plane0 = reader.open_bytes(0)
        plane1 = reader.open_bytes(1)
        assert plane0.shape == (4, 6)
        assert plane0.dtype == np.uint16
        assert plane1[0, 0] == plane0[0, 0] + 1
        with pytest.raises(IndexError):
            reader.open_bytes(2)

    def test_int8_values_wrap_into_range(self):
        reader = FakeReader()
        reader.set_id("img&sizeX=300&sizeY=2&pixelType=int8.fake")
        plane = reader.open_bytes(0)
        assert plane.min() >= -128 and plane.max() <= 127

    def test_float_planes(self):
        reader = FakeReader()
        reader.set_id("img&sizeX=3&sizeY=3&pixelType=double.fake")
        assert reader.open_bytes(0).dtype == np.float64

    @pytest.mark.parametrize(
        "source_id",
        [
            "img&sizeX=0.fake",
            "img&pixelType=complex.fake",
            "img&dimOrder=ZZZ.fake",
            "img&series=0.fake",
            "img&little=perhaps.fake",
        ],
    )
    def test_invalid_identifiers(self, source_id):
        with pytest.raises(ValueError):
            FakeReader().set_id(source_id)

    def test_use_before_set_id(self):
        with pytest.raises(RuntimeError):
            FakeReader().size_x

    def test_save_and_restore_state(self):
        reader = FakeReader()
        reader.set_id(TEST_FILE)
        state = reader.save_state()
        assert isinstance(state, ReaderState)

        other = FakeReader()
        other.restore_state(state)
        assert other.size_x == 20
        assert other.source_id == TEST_FILE

    def test_restore_rejects_foreign_state(self):
        with pytest.raises(TypeError):
            FakeReader().restore_state({"not": "a state"})

    def test_close_releases_state(self):
        reader = FakeReader()
        reader.set_id(TEST_FILE)
        reader.close()
        assert not reader.is_open
        reader.close()


class TestReaderRegistry:
    def test_fake_registered(self):
        assert ReaderRegistry.get("fake") is FakeReader
        assert ReaderRegistry.for_source("/x/" + TEST_FILE) is FakeReader

    def test_unknown_source(self):
        with pytest.raises(ValueError):
            ReaderRegistry.for_source("image.tiff")

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Available readers"):
            ReaderRegistry.get("nope")

    def test_register_custom_reader(self):
        @ReaderRegistry.register("tiles-test")
        class TileReader(FormatReader):
            suffixes = (".tiles",)

            def _init_file(self, source_id):
                raise NotImplementedError

            def _open_plane(self, no):
                raise NotImplementedError

        try:
            assert "tiles-test" in ReaderRegistry.list_readers()
            assert ReaderRegistry.for_source("a.TILES") is TileReader
        finally:
            ReaderRegistry.unregister("tiles-test")
