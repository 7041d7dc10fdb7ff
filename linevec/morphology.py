"""Binary mask cleanup: median filter, erosion, dilation and isolated-pixel removal.

All operations take a {0, 255} mask and return a new one; the input is never
modified so every pass reads a consistent neighbourhood.

Erosion and dilation act on the background (255) region, matching the
white-foreground convention of the binarized output: erosion shrinks the
background (ink spreads into any background pixel touching it) and dilation
grows it back. Out-of-bounds neighbours are ignored.
"""
from typing import Optional

import numpy as np
from scipy import ndimage

from linevec.progress import StageProgress
from linevec.types import Mask, INK, BACKGROUND

_EIGHT_CONNECTED = np.ones((3, 3), dtype=bool)
_NEIGHBOR_KERNEL = np.array([[1, 1, 1], [1, 0, 1], [1, 1, 1]], dtype=np.int32)


def median_filter(mask: Mask, kernel_size: int = 5) -> Mask:
    """
    k x k median with edge-clamped sampling.

    Args:
        mask: Binary mask
        kernel_size: Window side length

    Returns:
        Filtered mask
    """
    if kernel_size <= 1:
        return mask.copy()
    return ndimage.median_filter(mask, size=kernel_size, mode="nearest")


def _spread(region: np.ndarray, iterations: int) -> np.ndarray:
    # border_value=0: pixels outside the image never count as neighbours
    return ndimage.binary_dilation(
        region, structure=_EIGHT_CONNECTED, iterations=iterations, border_value=0
    )


def erode(mask: Mask, iterations: int = 1) -> Mask:
    """
    Erode the background: a background pixel with any ink 8-neighbour
    becomes ink. Ink pixels stay ink.

    Args:
        mask: Binary mask
        iterations: Number of passes, each reading the previous output

    Returns:
        New mask
    """
    if iterations <= 0:
        return mask.copy()
    ink = _spread(mask == INK, iterations)
    return np.where(ink, INK, BACKGROUND).astype(np.uint8)


def dilate(mask: Mask, iterations: int = 1) -> Mask:
    """
    Dilate the background: an ink pixel with any background 8-neighbour
    becomes background. Background pixels stay background.

    Args:
        mask: Binary mask
        iterations: Number of passes, each reading the previous output

    Returns:
        New mask
    """
    if iterations <= 0:
        return mask.copy()
    background = _spread(mask == BACKGROUND, iterations)
    return np.where(background, BACKGROUND, INK).astype(np.uint8)


def remove_isolated_pixels(mask: Mask) -> Mask:
    """
    Flip interior pixels with fewer than two same-coloured 8-neighbours.

    Border pixels are copied unchanged.

    Args:
        mask: Binary mask

    Returns:
        New mask
    """
    result = mask.copy()
    height, width = mask.shape
    if height < 3 or width < 3:
        return result

    ink_neighbors = ndimage.convolve((mask == INK).astype(np.int32), _NEIGHBOR_KERNEL, mode="constant")
    bg_neighbors = ndimage.convolve((mask == BACKGROUND).astype(np.int32), _NEIGHBOR_KERNEL, mode="constant")

    interior = (slice(1, -1), slice(1, -1))
    is_ink = mask[interior] == INK
    lonely_ink = is_ink & (ink_neighbors[interior] < 2)
    lonely_bg = ~is_ink & (bg_neighbors[interior] < 2)

    inner = result[interior]
    inner[lonely_ink] = BACKGROUND
    inner[lonely_bg] = INK
    return result


def clean_binary(
    mask: Mask,
    median_kernel: int = 5,
    iterations: int = 2,
    progress: Optional[StageProgress] = None
) -> Mask:
    """
    Canonical cleanup: median -> erode -> dilate -> isolated-pixel removal.

    Args:
        mask: Binary mask
        median_kernel: Median window side length
        iterations: Erosion and dilation passes
        progress: Optional stage reporter, advanced after each of the four steps

    Returns:
        New mask
    """
    progress = progress or StageProgress.silent()

    cleaned = median_filter(mask, median_kernel)
    progress.fraction(1, 4)
    cleaned = erode(cleaned, iterations)
    progress.fraction(2, 4)
    cleaned = dilate(cleaned, iterations)
    progress.fraction(3, 4)
    cleaned = remove_isolated_pixels(cleaned)
    progress.fraction(4, 4)
    return cleaned
