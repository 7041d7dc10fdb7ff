"""Line-extraction, binarization and vectorization pipelines."""
import asyncio
import logging
from typing import Optional, Union

import numpy as np

from linevec.blur import separable_blur
from linevec.contour import ContourTracer, get_tracer
from linevec.edges import gradient_field, non_max_suppression, hysteresis, edges_to_mask, sobel_edges
from linevec.grayscale import to_luminance
from linevec.morphology import clean_binary
from linevec.progress import ProgressReporter
from linevec.simplify import simplify_paths
from linevec.svg_export import build_document
from linevec.threshold import build_histogram, otsu_threshold, apply_threshold
from linevec.types import (
    BufferOrMask,
    LineArtConfig,
    Mask,
    PathDocument,
    PixelBuffer,
    ProgressCallback,
    InvalidDimensions,
    UnsupportedMaskValue,
    INK,
    BACKGROUND,
)

logger = logging.getLogger(__name__)


def as_buffer(image: Union[PixelBuffer, np.ndarray]) -> PixelBuffer:
    """
    Accept a PixelBuffer or an (H, W, 3|4) uint8 array and validate it.

    Raises:
        InvalidDimensions: If the buffer is malformed
    """
    if isinstance(image, np.ndarray):
        image = PixelBuffer.from_array(image)
    image.validate()
    return image


def validate_mask(mask: np.ndarray) -> Mask:
    """
    Check that a mask is 2-D and holds only 0 and 255.

    Raises:
        InvalidDimensions: If the mask is not 2-D or is empty
        UnsupportedMaskValue: If any other value is present
    """
    mask = np.asarray(mask)
    if mask.ndim != 2 or mask.size == 0:
        raise InvalidDimensions(f"Expected non-empty (H, W) mask, got shape {mask.shape}")
    bad = (mask != INK) & (mask != BACKGROUND)
    if bad.any():
        values = np.unique(mask[bad])[:5].tolist()
        raise UnsupportedMaskValue(f"Mask values must be 0 or 255, found {values}")
    return mask.astype(np.uint8, copy=False)


def mask_to_buffer(mask: Mask) -> PixelBuffer:
    """Encode a mask as an opaque grayscale RGBA buffer."""
    height, width = mask.shape
    rgba = np.empty((height, width, 4), dtype=np.uint8)
    rgba[..., :3] = mask[..., None]
    rgba[..., 3] = 255
    return PixelBuffer(width, height, rgba.reshape(-1))


def buffer_to_mask(buffer: PixelBuffer) -> np.ndarray:
    """Read the red channel of an RGBA buffer as a mask."""
    buffer.validate()
    return buffer.rgba[..., 0].copy()


def _check_threshold(threshold: float) -> None:
    if not 0 <= threshold <= 255:
        raise ValueError(f"threshold must be in [0, 255], got {threshold}")


def extract_lines(
    buffer: Union[PixelBuffer, np.ndarray],
    threshold: int = 20,
    invert: bool = False,
    on_progress: Optional[ProgressCallback] = None,
    config: Optional[LineArtConfig] = None
) -> Mask:
    """
    Extract a thin line drawing from a photograph.

    Grayscale -> Gaussian blur -> Sobel gradient -> non-maximum suppression
    -> hysteresis linking. threshold gates suppression and is the strong
    hysteresis threshold; the weak threshold is half of it by default.

    Args:
        buffer: RGBA pixel buffer
        threshold: Edge threshold in [0, 255]
        invert: Swap ink and background values in the result
        on_progress: Optional observer receiving percentages 0-100
        config: Pipeline constants (defaults if None)

    Returns:
        (H, W) uint8 mask, ink = 0 (255 when inverted)

    Raises:
        InvalidDimensions: If the buffer is malformed
    """
    config = config or LineArtConfig()
    buffer = as_buffer(buffer)
    _check_threshold(threshold)
    progress = ProgressReporter(on_progress, config.progress_row_stride)

    logger.debug(f"Extracting lines from {buffer.width}x{buffer.height}, threshold={threshold}")

    luma = to_luminance(buffer, progress.stage(0, 20))
    blurred = separable_blur(luma, config.line_blur_sigma)
    progress.report(30)

    field = gradient_field(blurred, progress.stage(30, 50))
    stage = progress.stage(50, 70)
    thinned = non_max_suppression(field, threshold, stage)
    stage.done()

    stage = progress.stage(70, 90)
    edges = hysteresis(
        thinned,
        high=threshold,
        low=threshold * config.low_threshold_ratio,
        max_iterations=config.hysteresis_max_iterations,
        progress=stage
    )
    stage.done()

    mask = edges_to_mask(edges, invert)
    progress.finish()
    return mask


def binarize(
    buffer: Union[PixelBuffer, np.ndarray],
    invert: bool = False,
    on_progress: Optional[ProgressCallback] = None,
    config: Optional[LineArtConfig] = None
) -> Mask:
    """
    Binarize a photograph with Otsu's threshold and clean up noise.

    Grayscale -> Gaussian blur -> Otsu threshold on the blurred histogram
    -> median filter -> erosion -> dilation -> isolated-pixel removal.

    Args:
        buffer: RGBA pixel buffer
        invert: Swap ink and background values in the result
        on_progress: Optional observer receiving percentages 0-100
        config: Pipeline constants (defaults if None)

    Returns:
        (H, W) uint8 mask, ink = 0 (255 when inverted)

    Raises:
        InvalidDimensions: If the buffer is malformed
    """
    config = config or LineArtConfig()
    buffer = as_buffer(buffer)
    progress = ProgressReporter(on_progress, config.progress_row_stride)

    luma = to_luminance(buffer, progress.stage(0, 20))
    progress.report(20)

    blurred = separable_blur(luma, config.binarize_blur_sigma)
    progress.report(30)

    threshold = otsu_threshold(build_histogram(blurred))
    logger.debug(f"Otsu threshold for {buffer.width}x{buffer.height}: {threshold}")
    progress.report(40)

    binary = apply_threshold(blurred, threshold, progress.stage(40, 50))
    progress.report(50)

    cleaned = clean_binary(
        binary,
        median_kernel=config.median_kernel,
        iterations=config.morphology_iterations,
        progress=progress.stage(50, 90)
    )

    if invert:
        cleaned = BACKGROUND - cleaned
    progress.finish()
    return cleaned


def detect_edges(
    buffer: Union[PixelBuffer, np.ndarray],
    threshold: int = 20,
    invert: bool = False
) -> np.ndarray:
    """
    Quick single-threshold Sobel edge map (no blur, thinning or linking).

    Edges are 255 on a 0 background, swapped when inverted; the 1-pixel
    border is left at 0.
    """
    buffer = as_buffer(buffer)
    _check_threshold(threshold)
    return sobel_edges(to_luminance(buffer), threshold, invert)


def _mask_from_input(image: BufferOrMask) -> Mask:
    if isinstance(image, PixelBuffer):
        return validate_mask(buffer_to_mask(image))
    return validate_mask(image)


def vectorize_document(
    image: BufferOrMask,
    simplify_tolerance: float = 1.0,
    config: Optional[LineArtConfig] = None,
    tracer: Optional[ContourTracer] = None
) -> PathDocument:
    """
    Trace, simplify and collect ink paths into a PathDocument.

    Args:
        image: (H, W) mask or RGBA buffer whose red channel is the mask
        simplify_tolerance: Douglas-Peucker tolerance
        config: Pipeline constants (defaults if None)
        tracer: Tracing strategy (config.tracer if None)

    Returns:
        PathDocument

    Raises:
        InvalidDimensions: If the input is malformed
        UnsupportedMaskValue: If the mask holds values other than 0/255
    """
    config = config or LineArtConfig()
    mask = _mask_from_input(image)
    height, width = mask.shape
    tracer = tracer or get_tracer(config.tracer, config.min_path_length)

    paths = tracer.trace(mask)
    simplified = simplify_paths(paths, simplify_tolerance)
    logger.debug(
        f"Vectorized {len(paths)} paths: {sum(len(p) for p in paths)} points -> "
        f"{sum(len(p) for p in simplified)} after simplification"
    )
    return build_document(simplified, width, height, config.stroke, config.stroke_width)


def vectorize(
    image: BufferOrMask,
    simplify_tolerance: float = 1.0,
    config: Optional[LineArtConfig] = None,
    tracer: Optional[ContourTracer] = None
) -> str:
    """
    Convert a binary mask to SVG text.

    See vectorize_document for arguments.
    """
    return vectorize_document(image, simplify_tolerance, config, tracer).to_svg()


async def extract_lines_async(
    buffer: Union[PixelBuffer, np.ndarray],
    threshold: int = 20,
    invert: bool = False,
    on_progress: Optional[ProgressCallback] = None,
    config: Optional[LineArtConfig] = None
) -> Mask:
    """
    extract_lines that yields to the event loop once before computing.

    The single yield lets a host render its initial state; the run then
    completes without further suspension.
    """
    buffer = as_buffer(buffer)
    await asyncio.sleep(0)
    return extract_lines(buffer, threshold, invert, on_progress, config)


async def binarize_async(
    buffer: Union[PixelBuffer, np.ndarray],
    invert: bool = False,
    on_progress: Optional[ProgressCallback] = None,
    config: Optional[LineArtConfig] = None
) -> Mask:
    """binarize that yields to the event loop once before computing."""
    buffer = as_buffer(buffer)
    await asyncio.sleep(0)
    return binarize(buffer, invert, on_progress, config)
