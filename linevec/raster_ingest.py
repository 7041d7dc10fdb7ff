"""Raster image decoding, encoding and resizing at the pipeline boundary."""
import logging
from pathlib import Path
from typing import Tuple, Union

import numpy as np
from PIL import Image
from PIL import ImageOps

from linevec.types import BufferOrMask, LineArtError, PixelBuffer

logger = logging.getLogger(__name__)


def buffer_from_image(img: Image.Image) -> PixelBuffer:
    """
    Convert a PIL image to an RGBA PixelBuffer.

    Args:
        img: Any PIL image

    Returns:
        PixelBuffer with the image's pixels; opaque alpha when the source
        has none
    """
    if img.mode != 'RGBA':
        img = img.convert('RGBA')
    return PixelBuffer.from_array(np.array(img, dtype=np.uint8))


def load_buffer(path: Union[str, Path]) -> PixelBuffer:
    """
    Decode an image file into a PixelBuffer.

    Args:
        path: Path to image file

    Returns:
        PixelBuffer

    Raises:
        FileNotFoundError: If file doesn't exist
        LineArtError: If file cannot be decoded
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    if not path.is_file():
        raise LineArtError(f"Path is not a file: {path}")

    try:
        with Image.open(path) as img:
            # Apply EXIF orientation transformation to handle rotation
            img = ImageOps.exif_transpose(img)
            buffer = buffer_from_image(img)
    except (IOError, OSError) as e:
        raise LineArtError(f"Failed to load image {path}: {e}") from e

    logger.debug(f"Loaded {path.name}: {buffer.width}x{buffer.height}")
    return buffer


def to_image(image: BufferOrMask) -> Image.Image:
    """PIL image for a PixelBuffer (RGBA) or a 2-D mask (L)."""
    if isinstance(image, PixelBuffer):
        image.validate()
        return Image.fromarray(image.rgba)
    return Image.fromarray(np.asarray(image, dtype=np.uint8))


def save_png(image: BufferOrMask, output_path: Union[str, Path]) -> None:
    """
    Encode a buffer or mask as PNG.

    Args:
        image: PixelBuffer or (H, W) mask
        output_path: Output file path
    """
    to_image(image).save(str(output_path), format='PNG')


def fit_within(width: int, height: int, max_width: int, max_height: int) -> Tuple[int, int]:
    """
    Largest size with the same aspect ratio that fits the bounds.

    Width is fitted first, then height; results are floored and never
    smaller than 1 pixel.
    """
    new_width, new_height = width, height

    if new_width > max_width:
        new_height = int(new_height * (max_width / new_width))
        new_width = max_width

    if new_height > max_height:
        new_width = int(new_width * (max_height / new_height))
        new_height = max_height

    return max(1, new_width), max(1, new_height)


def resize_buffer(buffer: PixelBuffer, max_width: int, max_height: int) -> PixelBuffer:
    """
    Downscale a buffer to fit max_width x max_height, keeping aspect ratio.

    Buffers already within the bounds are returned unchanged.
    """
    buffer.validate()
    if buffer.width <= max_width and buffer.height <= max_height:
        return buffer

    size = fit_within(buffer.width, buffer.height, max_width, max_height)
    logger.debug(f"Resizing {buffer.width}x{buffer.height} -> {size[0]}x{size[1]}")
    resized = to_image(buffer).resize(size, Image.BILINEAR)
    return buffer_from_image(resized)
