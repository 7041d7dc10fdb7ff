"""Tests for raster image loading, saving and resizing."""

import numpy as np
import pytest
from PIL import Image

from linevec.raster_ingest import fit_within, load_buffer, resize_buffer, save_png
from linevec.types import LineArtError, PixelBuffer


class TestLoadBuffer:
    """Test cases for load_buffer."""

    def test_rgb_gets_opaque_alpha(self, tmp_path):
        path = tmp_path / "rgb.png"
        Image.new("RGB", (6, 4), (10, 20, 30)).save(path)

        buffer = load_buffer(path)

        assert (buffer.width, buffer.height) == (6, 4)
        assert buffer.data.size == 6 * 4 * 4
        np.testing.assert_array_equal(buffer.rgba[0, 0], [10, 20, 30, 255])

    def test_grayscale_expanded(self, tmp_path):
        path = tmp_path / "gray.png"
        Image.new("L", (3, 3), 90).save(path)

        buffer = load_buffer(str(path))

        np.testing.assert_array_equal(buffer.rgba[1, 1], [90, 90, 90, 255])

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_buffer(tmp_path / "nope.png")

    def test_not_an_image(self, tmp_path):
        path = tmp_path / "fake.png"
        path.write_bytes(b"definitely not a png")

        with pytest.raises(LineArtError):
            load_buffer(path)

    def test_directory(self, tmp_path):
        with pytest.raises(LineArtError):
            load_buffer(tmp_path)


class TestSavePng:
    """Test cases for save_png."""

    def test_mask_round_trip(self, tmp_path, background_mask):
        mask = background_mask(5, 7)
        mask[2, 3] = 0
        path = tmp_path / "mask.png"

        save_png(mask, path)
        buffer = load_buffer(path)

        np.testing.assert_array_equal(buffer.rgba[..., 0], mask)

    def test_buffer_round_trip(self, tmp_path, square_buffer):
        path = tmp_path / "square.png"

        save_png(square_buffer, path)

        np.testing.assert_array_equal(load_buffer(path).rgba, square_buffer.rgba)


class TestResize:
    """Test cases for fitting and resizing."""

    def test_fit_wide(self):
        assert fit_within(200, 100, 50, 50) == (50, 25)

    def test_fit_tall(self):
        """Height is fitted after width and shrinks the width too."""
        assert fit_within(100, 400, 50, 50) == (12, 50)

    def test_fit_never_zero(self):
        assert fit_within(1000, 1, 10, 10) == (10, 1)

    def test_resize_buffer(self):
        buffer = PixelBuffer.blank(200, 100, value=0)

        resized = resize_buffer(buffer, 50, 50)

        assert (resized.width, resized.height) == (50, 25)
        assert np.all(resized.rgba[..., :3] == 0)
        assert np.all(resized.rgba[..., 3] == 255)

    def test_small_buffer_unchanged(self):
        buffer = PixelBuffer.blank(10, 10)

        assert resize_buffer(buffer, 50, 50) is buffer
