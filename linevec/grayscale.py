"""RGBA to single-channel luminance conversion."""
from typing import Optional

import numpy as np

from linevec.progress import StageProgress
from linevec.types import PixelBuffer, Luminance

# ITU-R BT.601 luma weights
LUMA_WEIGHTS = (0.299, 0.587, 0.114)


def round_half_up(values: np.ndarray) -> np.ndarray:
    """Round to nearest integer with .5 going up, clipped to the byte range."""
    return np.clip(np.floor(values + 0.5), 0, 255).astype(np.uint8)


def to_luminance(
    buffer: PixelBuffer,
    progress: Optional[StageProgress] = None
) -> Luminance:
    """
    Reduce an RGBA buffer to luminance.

    luminance = round(0.299 R + 0.587 G + 0.114 B); alpha is ignored.

    Args:
        buffer: Validated pixel buffer
        progress: Optional stage reporter, advanced every row band

    Returns:
        (H, W) uint8 luminance field
    """
    progress = progress or StageProgress.silent()
    rgba = buffer.rgba
    luma = np.empty((buffer.height, buffer.width), dtype=np.uint8)
    wr, wg, wb = LUMA_WEIGHTS

    for y0, y1 in progress.bands(0, buffer.height):
        band = rgba[y0:y1].astype(np.float64)
        luma[y0:y1] = round_half_up(
            wr * band[..., 0] + wg * band[..., 1] + wb * band[..., 2]
        )

    return luma
