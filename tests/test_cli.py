"""Tests for the command line interface."""

import argparse

import numpy as np
import pytest
from PIL import Image

from linevec.cli import main, non_negative_int, parse_size


@pytest.fixture
def photo(tmp_path):
    """40x40 white PNG with a black square."""
    gray = np.full((40, 40), 255, dtype=np.uint8)
    gray[10:30, 10:30] = 0
    path = tmp_path / "photo.png"
    Image.fromarray(gray).save(path)
    return path


class TestMain:
    """Test cases for main()."""

    def test_lines_with_svg(self, photo):
        assert main([str(photo), "--svg"]) == 0

        png = photo.with_name("photo_lines.png")
        svg = photo.with_name("photo_lines.svg")
        assert png.exists()
        assert svg.read_text(encoding="utf-8").startswith("<svg")
        with Image.open(png) as img:
            assert img.size == (40, 40)

    def test_binarize_to_output(self, photo, tmp_path):
        output = tmp_path / "out" / "bw.png"
        output.parent.mkdir()

        assert main([str(photo), "-m", "binarize", "-o", str(output), "--invert"]) == 0

        with Image.open(output) as img:
            values = np.array(img)
        assert values[20, 20] == 255
        assert values[0, 0] == 0

    def test_edges_mode(self, photo):
        assert main([str(photo), "--mode", "edges", "--svg", "--tracer", "marching"]) == 0

        assert photo.with_name("photo_edges.svg").exists()

    def test_max_size(self, photo, capsys):
        assert main([str(photo), "--max-size", "20x20"]) == 0

        assert "Resized to 20x20" in capsys.readouterr().out

    def test_missing_input(self, tmp_path):
        assert main([str(tmp_path / "missing.png")]) == 1

    def test_bad_threshold(self, photo, capsys):
        assert main([str(photo), "-t", "300"]) == 1

        assert "threshold" in capsys.readouterr().err


class TestParseSize:
    """Test cases for parse_size."""

    def test_valid(self):
        assert parse_size("640x480") == (640, 480)
        assert parse_size("64X48") == (64, 48)

    @pytest.mark.parametrize("value", ["640", "ax480", "0x10", "10x-1"])
    def test_invalid(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_size(value)


class TestNonNegativeInt:
    """Test cases for the --max-iterations type."""

    def test_valid(self):
        assert non_negative_int("0") == 0
        assert non_negative_int("7") == 7

    @pytest.mark.parametrize("value", ["-1", "two", "1.5"])
    def test_invalid(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            non_negative_int(value)

    def test_negative_rejected_by_parser(self, photo):
        """argparse exits with usage status 2 instead of disabling linking."""
        with pytest.raises(SystemExit) as excinfo:
            main([str(photo), "--max-iterations", "-3"])

        assert excinfo.value.code == 2
