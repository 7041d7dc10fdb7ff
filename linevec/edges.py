"""Gradient, non-maximum suppression and hysteresis linking for line extraction."""
import logging
from typing import Optional, Tuple

import cv2
import numpy as np

from linevec.progress import StageProgress
from linevec.types import GradientField, Luminance, Mask, INK, BACKGROUND

logger = logging.getLogger(__name__)

# Default cap on hysteresis passes. This bounds how far weak edges can be
# linked from a strong seed; pass None to link until nothing changes.
HYSTERESIS_MAX_ITERATIONS = 5

# (dy, dx) of the two neighbours compared against for each direction bucket
_BUCKET_NEIGHBORS = {
    0: ((0, -1), (0, 1)),
    45: ((-1, 1), (1, -1)),
    90: ((-1, 0), (1, 0)),
    135: ((-1, -1), (1, 1)),
}


def sobel(luma: Luminance) -> Tuple[np.ndarray, np.ndarray]:
    """
    Horizontal and vertical 3x3 Sobel responses.

    Returns:
        (gx, gy) float64 arrays; the 1-pixel border is zero
    """
    height, width = luma.shape
    gx = np.zeros((height, width), dtype=np.float64)
    gy = np.zeros((height, width), dtype=np.float64)
    if height < 3 or width < 3:
        return gx, gy

    src = np.ascontiguousarray(luma)
    gx[1:-1, 1:-1] = cv2.Sobel(src, cv2.CV_64F, 1, 0, ksize=3)[1:-1, 1:-1]
    gy[1:-1, 1:-1] = cv2.Sobel(src, cv2.CV_64F, 0, 1, ksize=3)[1:-1, 1:-1]
    return gx, gy


def gradient_field(
    luma: Luminance,
    progress: Optional[StageProgress] = None
) -> GradientField:
    """
    Compute gradient magnitude and direction for interior pixels.

    Args:
        luma: Blurred (H, W) uint8 luminance
        progress: Optional stage reporter

    Returns:
        GradientField with the magnitude clamped to [0, 255] and the
        unclamped strength kept alongside it
    """
    progress = progress or StageProgress.silent()
    height, width = luma.shape
    gx, gy = sobel(luma)

    strength = np.zeros((height, width), dtype=np.float64)
    direction = np.zeros((height, width), dtype=np.float64)
    for y0, y1 in progress.bands(1, max(1, height - 1)):
        strength[y0:y1] = np.sqrt(gx[y0:y1] ** 2 + gy[y0:y1] ** 2)
        direction[y0:y1] = np.arctan2(gy[y0:y1], gx[y0:y1])

    magnitude = np.minimum(strength, 255).astype(np.uint8)
    return GradientField(magnitude=magnitude, direction=direction, strength=strength)


def direction_buckets(direction: np.ndarray) -> np.ndarray:
    """
    Quantize gradient angles to 0, 45, 90 or 135 degrees.

    Angles are folded into [0, 180] and assigned with 22.5 degree
    half-width windows; 157.5 and above wraps to 0.
    """
    angle = np.degrees(direction)
    angle = np.where(angle < 0, angle + 180, angle)

    buckets = np.zeros(direction.shape, dtype=np.int16)
    buckets[(angle >= 22.5) & (angle < 67.5)] = 45
    buckets[(angle >= 67.5) & (angle < 112.5)] = 90
    buckets[(angle >= 112.5) & (angle < 157.5)] = 135
    return buckets


def _neighbor(values: np.ndarray, dy: int, dx: int, y0: int, y1: int) -> np.ndarray:
    width = values.shape[1]
    return values[y0 + dy:y1 + dy, 1 + dx:width - 1 + dx]


def non_max_suppression(
    field: GradientField,
    threshold: int,
    progress: Optional[StageProgress] = None
) -> np.ndarray:
    """
    Thin gradient ridges to single-pixel width.

    A pixel is kept when its magnitude reaches the threshold and its
    strength exceeds the first neighbour along the gradient and is not
    below the second. The asymmetric comparison keeps exactly one pixel of
    a ridge whose two crest pixels are equal (e.g. a step between columns).
    Pixels below the threshold are dropped without comparison.

    Args:
        field: Gradient field
        threshold: Gate T in [0, 255]
        progress: Optional stage reporter

    Returns:
        (H, W) uint8 thinned magnitude
    """
    progress = progress or StageProgress.silent()
    height, width = field.shape
    thinned = np.zeros((height, width), dtype=np.uint8)
    if height < 3 or width < 3:
        return thinned

    buckets = direction_buckets(field.direction)
    strength = field.strength

    for y0, y1 in progress.bands(1, height - 1):
        mag = field.magnitude[y0:y1, 1:-1]
        center = strength[y0:y1, 1:-1]
        bucket = buckets[y0:y1, 1:-1]

        before = np.zeros_like(center)
        after = np.zeros_like(center)
        for angle, ((ay, ax), (by, bx)) in _BUCKET_NEIGHBORS.items():
            selected = bucket == angle
            before[selected] = _neighbor(strength, ay, ax, y0, y1)[selected]
            after[selected] = _neighbor(strength, by, bx, y0, y1)[selected]

        keep = (mag >= threshold) & (center > before) & (center >= after)
        thinned[y0:y1, 1:-1] = np.where(keep, mag, 0)

    return thinned


def hysteresis(
    thinned: np.ndarray,
    high: float,
    low: Optional[float] = None,
    max_iterations: Optional[int] = HYSTERESIS_MAX_ITERATIONS,
    progress: Optional[StageProgress] = None
) -> np.ndarray:
    """
    Link weak edges to strong ones.

    Strong pixels (>= high) seed the result. Each pass scans the interior
    weak pixels (low <= value < high) in raster order and promotes those
    with an 8-neighbour already in the result; promotions made earlier in a
    pass are visible later in the same pass. Passes repeat until one
    promotes nothing or max_iterations passes have run.

    The iteration cap is a bounded-effort approximation: weak chains far
    from any strong seed may stay unlinked. max_iterations=None runs to a
    fixed point, which links every weak pixel connected to a strong one.

    Args:
        thinned: (H, W) thinned magnitude
        high: Strong threshold
        low: Weak threshold (default high / 2)
        max_iterations: Pass cap, or None for no cap
        progress: Optional stage reporter, advanced once per pass

    Returns:
        (H, W) bool array, True for edge pixels
    """
    progress = progress or StageProgress.silent()
    if low is None:
        low = high * 0.5

    strong = thinned >= high
    weak = (thinned >= low) & ~strong
    edges = strong.copy()

    weak[0, :] = weak[-1, :] = False
    weak[:, 0] = weak[:, -1] = False
    pending = [(int(y), int(x)) for y, x in zip(*np.nonzero(weak))]

    iterations = 0
    changed = True
    while changed and pending and (max_iterations is None or iterations < max_iterations):
        changed = False
        iterations += 1
        remaining = []
        for y, x in pending:
            if edges[y - 1:y + 2, x - 1:x + 2].any():
                edges[y, x] = True
                changed = True
            else:
                remaining.append((y, x))
        pending = remaining

        if max_iterations is not None:
            progress.fraction(iterations, max_iterations)

    logger.debug(
        f"Hysteresis: {int(strong.sum())} strong, {int(edges.sum() - strong.sum())} "
        f"weak linked in {iterations} passes, {len(pending)} left unlinked"
    )
    return edges


def edges_to_mask(edges: np.ndarray, invert: bool = False) -> Mask:
    """Encode an edge map as a binary mask (ink = 0 unless inverted)."""
    mask = np.where(edges, INK, BACKGROUND).astype(np.uint8)
    if invert:
        mask = BACKGROUND - mask
    return mask


def sobel_edges(luma: Luminance, threshold: float = 20, invert: bool = False) -> np.ndarray:
    """
    Single-threshold Sobel edge map without blur or thinning.

    Edges are 255 on a 0 background (swapped by invert). The 1-pixel border
    is always 0.

    Args:
        luma: (H, W) uint8 luminance
        threshold: Edge when magnitude > threshold
        invert: Swap edge/background values

    Returns:
        (H, W) uint8 array
    """
    gx, gy = sobel(luma)
    magnitude = np.sqrt(gx ** 2 + gy ** 2)
    values = np.where(magnitude > threshold, 255, 0).astype(np.uint8)
    if invert:
        values = 255 - values

    out = np.zeros_like(values)
    out[1:-1, 1:-1] = values[1:-1, 1:-1]
    return out
