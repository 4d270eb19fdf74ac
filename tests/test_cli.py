"""Tests for the bfmemo command line interface."""

from pathlib import Path

import pytest

from bfmemo.cli.main import create_parser, main

from memo_helpers import TEST_FILE


class TestParser:
    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out.lower()

    def test_directory_and_in_place_are_exclusive(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["path", "x.fake", "--directory", "/tmp", "--in-place"])


class TestPath:
    def test_disabled_prints_none(self, source, capsys):
        assert main(["path", source]) == 0
        assert capsys.readouterr().out.strip() == "none"

    def test_in_place(self, source, source_dir, capsys):
        assert main(["path", source, "--in-place"]) == 0
        out = capsys.readouterr().out.strip()
        assert out == str(source_dir / f".{TEST_FILE}.bfmemo")

    def test_directory_from_config_file(self, source, cache_dir, tmp_path, capsys):
        config = tmp_path / "bfmemo.yaml"
        config.write_text(f"memo:\n  directory: {cache_dir}\n")
        assert main(["--config", str(config), "path", source]) == 0
        assert capsys.readouterr().out.strip().startswith(str(cache_dir))

    def test_missing_config_file(self, source, tmp_path, capsys):
        assert main(["--config", str(tmp_path / "nope.yaml"), "path", source]) == 1
        assert "Config file not found" in capsys.readouterr().out


class TestOpenAndInspect:
    def test_open_twice_hits(self, source, cache_dir, capsys):
        args = ["open", source, "--directory", str(cache_dir), "--min-elapsed", "0"]

        assert main(args) == 0
        first = capsys.readouterr().out
        assert "load:    miss" in first
        assert "save:    saved" in first
        assert "X=20 Y=20" in first

        assert main(args) == 0
        second = capsys.readouterr().out
        assert "load:    hit" in second

    def test_inspect(self, source, cache_dir, capsys):
        base = ["--directory", str(cache_dir)]
        assert main(["inspect", source, *base]) == 1
        assert "status: absent" in capsys.readouterr().out

        main(["open", source, *base, "--min-elapsed", "0"])
        capsys.readouterr()
        assert main(["inspect", source, *base]) == 0
        assert "status: valid" in capsys.readouterr().out

    def test_open_unknown_format(self, tmp_path, capsys):
        path = tmp_path / "image.tiff"
        path.touch()
        assert main(["open", str(path)]) == 1
        assert "No reader found" in capsys.readouterr().out

    def test_open_initialization_error(self, source_dir, capsys):
        path = source_dir / "bad&sizeX=abc.fake"
        path.touch()
        assert main(["open", str(path)]) == 1
        assert "Error:" in capsys.readouterr().out


class TestClear:
    def _populate(self, source, cache_dir):
        main(["open", source, "--directory", str(cache_dir), "--min-elapsed", "0"])

    def test_clear_removes_memos(self, source, cache_dir, capsys):
        self._populate(source, cache_dir)
        capsys.readouterr()
        assert main(["clear", str(cache_dir)]) == 0
        assert "Removed 1 memo file(s)" in capsys.readouterr().out
        assert list(Path(cache_dir).rglob("*.bfmemo")) == []

    def test_dry_run_keeps_memos(self, source, cache_dir, capsys):
        self._populate(source, cache_dir)
        capsys.readouterr()
        assert main(["clear", str(cache_dir), "--dry-run"]) == 0
        assert "Would remove 1" in capsys.readouterr().out
        assert len(list(Path(cache_dir).rglob("*.bfmemo"))) == 1

    def test_not_a_directory(self, tmp_path, capsys):
        assert main(["clear", str(tmp_path / "missing")]) == 1
