"""Otsu global thresholding."""
import logging
import warnings
from typing import Optional, Sequence, Union

import numpy as np

from linevec.progress import StageProgress
from linevec.types import DegenerateHistogram, Luminance, Mask, INK, BACKGROUND

logger = logging.getLogger(__name__)


def build_histogram(luma: Luminance) -> np.ndarray:
    """
    Count how often each luminance value occurs.

    Args:
        luma: uint8 luminance field of any shape

    Returns:
        int64 array of 256 buckets summing to luma.size
    """
    return np.bincount(np.asarray(luma, dtype=np.uint8).reshape(-1), minlength=256).astype(np.int64)


def between_class_variances(hist: Union[Sequence[int], np.ndarray]) -> np.ndarray:
    """
    Otsu objective for every split of the histogram.

    Entry t scores background [0, t] against foreground [t + 1, 255] as
    wB * wF * (meanB - meanF)^2; splits leaving a class empty score 0.

    Args:
        hist: 256 bucket counts

    Returns:
        float64 array of 256 variances
    """
    hist = np.asarray(hist, dtype=np.float64)
    levels = np.arange(hist.size, dtype=np.float64)

    w_b = np.cumsum(hist)
    sum_b = np.cumsum(levels * hist)
    w_f = w_b[-1] - w_b
    valid = (w_b > 0) & (w_f > 0)

    variances = np.zeros(hist.size, dtype=np.float64)
    mean_b = sum_b[valid] / w_b[valid]
    mean_f = (sum_b[-1] - sum_b[valid]) / w_f[valid]
    variances[valid] = w_b[valid] * w_f[valid] * (mean_b - mean_f) ** 2
    return variances


def otsu_threshold(hist: Union[Sequence[int], np.ndarray]) -> int:
    """
    Pick a global threshold that maximizes between-class variance.

    Candidates t = 0..255 split the histogram into background [0, t] and
    foreground [t + 1, 255]; candidates with an empty class are skipped and
    the first maximum wins. When the maximum is shared by a run of
    consecutive candidates (the histogram is empty between the classes) the
    middle of that run is returned, so the threshold lands strictly between
    the two populations.

    An all-zero histogram emits DegenerateHistogram and returns 0; a
    single-valued histogram also returns 0.

    Args:
        hist: 256 bucket counts

    Returns:
        Threshold in [0, 255]
    """
    hist = np.asarray(hist, dtype=np.int64)
    if hist.sum() == 0:
        warnings.warn("Empty histogram passed to Otsu; using threshold 0", DegenerateHistogram)
        return 0

    variances = between_class_variances(hist)
    max_variance = variances.max()
    if max_variance <= 0:
        return 0

    best = int(np.argmax(variances))
    run_end = best
    while run_end + 1 < variances.size and variances[run_end + 1] == max_variance:
        run_end += 1
    return (best + run_end + 1) // 2


def apply_threshold(
    luma: Luminance,
    threshold: int,
    progress: Optional[StageProgress] = None
) -> Mask:
    """
    Binarize: ink where luminance < threshold, background elsewhere.

    Args:
        luma: (H, W) uint8 luminance
        threshold: Otsu threshold
        progress: Optional stage reporter

    Returns:
        (H, W) uint8 mask with values {0, 255}
    """
    progress = progress or StageProgress.silent()
    mask = np.empty(luma.shape, dtype=np.uint8)
    for y0, y1 in progress.bands(0, luma.shape[0]):
        mask[y0:y1] = np.where(luma[y0:y1] < threshold, INK, BACKGROUND)
    return mask
