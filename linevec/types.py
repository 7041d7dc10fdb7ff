"""Core types for the line-art pipeline."""
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple, Union

import numpy as np

# Type aliases
Luminance = np.ndarray  # (H, W) uint8
Mask = np.ndarray  # (H, W) uint8, values in {INK, BACKGROUND}
Point = Tuple[int, int]  # (x, y)
Polyline = List[Point]
ProgressCallback = Callable[[int], None]

INK = 0
BACKGROUND = 255


@dataclass
class PixelBuffer:
    """RGBA pixel buffer with a flat byte layout (R, G, B, A per pixel)."""
    width: int
    height: int
    data: np.ndarray

    def __post_init__(self):
        if not isinstance(self.data, np.ndarray):
            self.data = np.frombuffer(bytes(self.data), dtype=np.uint8).copy()
        elif self.data.dtype != np.uint8:
            self.data = self.data.astype(np.uint8)

    def validate(self) -> None:
        """
        Check the buffer length against the declared dimensions.

        Raises:
            InvalidDimensions: If width/height are not positive or the data
                length is not width * height * 4
        """
        if self.width <= 0 or self.height <= 0:
            raise InvalidDimensions(
                f"Dimensions must be positive, got {self.width}x{self.height}"
            )
        expected = self.width * self.height * 4
        if self.data.ndim != 1 or self.data.size != expected:
            raise InvalidDimensions(
                f"Expected {expected} bytes for {self.width}x{self.height} RGBA, "
                f"got {self.data.size}"
            )

    @property
    def rgba(self) -> np.ndarray:
        """(H, W, 4) view of the pixel data."""
        return self.data.reshape(self.height, self.width, 4)

    @classmethod
    def from_array(cls, image: np.ndarray) -> "PixelBuffer":
        """
        Build a buffer from an (H, W, 3) or (H, W, 4) array.

        RGB input gets an opaque alpha channel.
        """
        if image.ndim != 3 or image.shape[2] not in (3, 4):
            raise InvalidDimensions(
                f"Expected (H, W, 3) or (H, W, 4) array, got shape {image.shape}"
            )
        height, width = image.shape[:2]
        if image.shape[2] == 3:
            alpha = np.full((height, width, 1), 255, dtype=np.uint8)
            image = np.concatenate([image.astype(np.uint8), alpha], axis=2)
        return cls(width, height, np.ascontiguousarray(image, dtype=np.uint8).reshape(-1))

    @classmethod
    def blank(cls, width: int, height: int, value: int = 255) -> "PixelBuffer":
        """Opaque buffer with R, G, B all set to value."""
        data = np.full((height, width, 4), value, dtype=np.uint8)
        data[..., 3] = 255
        return cls(width, height, data.reshape(-1))


@dataclass
class GradientField:
    """Per-pixel first-derivative response."""
    magnitude: np.ndarray  # uint8, clamped to 255
    direction: np.ndarray  # float radians, atan2(gy, gx)
    strength: np.ndarray  # float, unclamped magnitude

    @property
    def shape(self) -> Tuple[int, int]:
        return self.magnitude.shape


@dataclass(frozen=True)
class PathDocument:
    """Canvas size plus ordered polylines; rendered once to SVG text."""
    width: int
    height: int
    polylines: Tuple[Tuple[Tuple[float, float], ...], ...] = ()
    stroke: str = "black"
    stroke_width: float = 1.0

    def to_svg(self) -> str:
        from linevec.svg_export import render_document
        return render_document(self)

    def __str__(self) -> str:
        return self.to_svg()


@dataclass
class LineArtConfig:
    """Configuration for the line-art pipelines."""
    # Line extraction
    threshold: int = 20
    invert: bool = False
    line_blur_sigma: float = 1.4
    low_threshold_ratio: float = 0.5
    hysteresis_max_iterations: Optional[int] = 5  # None = link until stable

    # Binarization
    binarize_blur_sigma: float = 1.5
    median_kernel: int = 5
    morphology_iterations: int = 2

    # Vectorization
    min_path_length: int = 10  # paths with this many points or fewer are dropped
    simplify_tolerance: float = 1.0
    tracer: str = "greedy"
    stroke: str = "black"
    stroke_width: float = 1.0

    # Progress reporting
    progress_row_stride: int = 10


@dataclass
class SessionState:
    """Snapshot of an edit session (see linevec.session)."""
    original: Optional[PixelBuffer] = None
    processed: Optional[PixelBuffer] = None
    filename: str = ""
    processing: bool = False
    error: Optional[str] = None
    last_mode: Optional[str] = None
    last_params: dict = field(default_factory=dict)


class LineArtError(Exception):
    """Base exception for line-art processing errors."""
    pass


class InvalidDimensions(LineArtError, ValueError):
    """Buffer length is inconsistent with its declared width/height."""
    pass


class UnsupportedMaskValue(LineArtError, ValueError):
    """A binary mask contains a value outside {0, 255}."""
    pass


class DegenerateHistogram(UserWarning):
    """Otsu step received an empty histogram; threshold falls back to 0."""
    pass


BufferOrMask = Union[PixelBuffer, np.ndarray]
