"""linevec: photographs to line art and SVG paths.

Two raster pipelines produce a {0, 255} ink mask (Canny-style line
extraction, or Otsu binarization with morphological cleanup); the
vectorization pipeline traces the mask into simplified closed paths.
"""
from linevec.types import (
    PixelBuffer,
    GradientField,
    PathDocument,
    LineArtConfig,
    LineArtError,
    InvalidDimensions,
    UnsupportedMaskValue,
    DegenerateHistogram,
    INK,
    BACKGROUND,
)
from linevec.pipeline import (
    extract_lines,
    extract_lines_async,
    binarize,
    binarize_async,
    detect_edges,
    vectorize,
    vectorize_document,
    mask_to_buffer,
    buffer_to_mask,
)
from linevec.session import EditSession

__version__ = "0.1.0"

__all__ = [
    "PixelBuffer",
    "GradientField",
    "PathDocument",
    "LineArtConfig",
    "LineArtError",
    "InvalidDimensions",
    "UnsupportedMaskValue",
    "DegenerateHistogram",
    "INK",
    "BACKGROUND",
    "extract_lines",
    "extract_lines_async",
    "binarize",
    "binarize_async",
    "detect_edges",
    "vectorize",
    "vectorize_document",
    "mask_to_buffer",
    "buffer_to_mask",
    "EditSession",
]
