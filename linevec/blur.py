"""Separable Gaussian blur over a luminance field."""
import math

import numpy as np
from scipy import ndimage

from linevec.grayscale import round_half_up
from linevec.types import Luminance


def gaussian_kernel(sigma: float) -> np.ndarray:
    """
    Normalized 1-D Gaussian kernel.

    Radius is max(1, ceil(3 * sigma)), so the kernel has 2 * radius + 1
    taps. A non-positive sigma yields the identity kernel [1.0].

    Args:
        sigma: Standard deviation in pixels

    Returns:
        Kernel weights summing to 1
    """
    if sigma <= 0:
        return np.ones(1, dtype=np.float64)

    radius = max(1, math.ceil(3 * sigma))
    x = np.arange(-radius, radius + 1, dtype=np.float64)
    kernel = np.exp(-(x * x) / (2 * sigma * sigma))
    return kernel / kernel.sum()


def separable_blur(luma: Luminance, sigma: float = 1.4) -> Luminance:
    """
    Blur horizontally, then vertically, with edge-replicated borders.

    Each pass is rounded back to bytes before the next one runs.

    Args:
        luma: (H, W) uint8 luminance
        sigma: Gaussian sigma

    Returns:
        New (H, W) uint8 field
    """
    kernel = gaussian_kernel(sigma)
    if kernel.size == 1:
        return luma.copy()

    # mode="nearest" clamps out-of-range indices to the edge sample
    horizontal = ndimage.correlate1d(
        luma.astype(np.float64), kernel, axis=1, mode="nearest"
    )
    horizontal = round_half_up(horizontal)

    vertical = ndimage.correlate1d(
        horizontal.astype(np.float64), kernel, axis=0, mode="nearest"
    )
    return round_half_up(vertical)
