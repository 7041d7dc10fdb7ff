"""Pytest configuration and fixtures."""

import numpy as np
import pytest

from linevec.types import PixelBuffer


def gray_to_buffer(values) -> PixelBuffer:
    """Opaque RGBA buffer whose R, G and B all equal the given luminance."""
    gray = np.asarray(values, dtype=np.uint8)
    rgba = np.stack([gray, gray, gray, np.full_like(gray, 255)], axis=-1)
    return PixelBuffer.from_array(rgba)


@pytest.fixture
def make_buffer():
    """Factory turning an (H, W) luminance array into a PixelBuffer."""
    return gray_to_buffer


@pytest.fixture
def step_buffer():
    """20x20 vertical step: columns 0-9 black, 10-19 white."""
    gray = np.zeros((20, 20), dtype=np.uint8)
    gray[:, 10:] = 255
    return gray_to_buffer(gray)


@pytest.fixture
def square_buffer():
    """40x40 white image with a black 20x20 square in the middle."""
    gray = np.full((40, 40), 255, dtype=np.uint8)
    gray[10:30, 10:30] = 0
    return gray_to_buffer(gray)


@pytest.fixture
def background_mask():
    """Factory for an all-background mask."""
    def _make(height: int, width: int) -> np.ndarray:
        return np.full((height, width), 255, dtype=np.uint8)
    return _make
