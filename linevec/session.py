"""Explicit edit session holding the current image and last parameters."""
import logging
from typing import Optional

from linevec.pipeline import as_buffer, binarize, extract_lines, mask_to_buffer, vectorize
from linevec.types import (
    LineArtConfig,
    LineArtError,
    PixelBuffer,
    ProgressCallback,
    SessionState,
)

logger = logging.getLogger(__name__)

MODE_LINES = "lines"
MODE_BINARIZE = "binarize"


class EditSession:
    """
    Holds the original image, the processed result and the parameters used.

    A host UI keeps one session per open image and re-invokes the pipelines
    through it when the user changes the threshold or invert flag. Nothing
    is shared between sessions.
    """

    def __init__(self, config: Optional[LineArtConfig] = None):
        self.config = config or LineArtConfig()
        self.state = SessionState()

    @property
    def original(self) -> Optional[PixelBuffer]:
        return self.state.original

    @property
    def processed(self) -> Optional[PixelBuffer]:
        return self.state.processed

    @property
    def processing(self) -> bool:
        return self.state.processing

    @property
    def error(self) -> Optional[str]:
        return self.state.error

    def load(self, buffer: PixelBuffer, filename: str = "") -> None:
        """Set a new original image, clearing the previous error."""
        self.state.original = as_buffer(buffer)
        self.state.processed = None
        self.state.filename = filename
        self.state.error = None

    def _require_original(self) -> PixelBuffer:
        if self.state.original is None:
            raise LineArtError("No image loaded")
        return self.state.original

    def _run(self, mode: str, params: dict, on_progress: Optional[ProgressCallback]) -> PixelBuffer:
        original = self._require_original()
        self.state.processing = True
        self.state.error = None
        try:
            if mode == MODE_LINES:
                mask = extract_lines(original, on_progress=on_progress, config=self.config, **params)
            else:
                mask = binarize(original, on_progress=on_progress, config=self.config, **params)
        except (LineArtError, ValueError) as e:
            self.state.error = str(e)
            raise
        finally:
            self.state.processing = False

        self.state.processed = mask_to_buffer(mask)
        self.state.last_mode = mode
        self.state.last_params = dict(params)
        logger.debug(f"Session {self.state.filename or '<unnamed>'}: {mode} {params}")
        return self.state.processed

    def extract_lines(
        self,
        threshold: int = 20,
        invert: bool = False,
        on_progress: Optional[ProgressCallback] = None
    ) -> PixelBuffer:
        """Run line extraction on the original image."""
        return self._run(MODE_LINES, {"threshold": threshold, "invert": invert}, on_progress)

    def binarize(self, invert: bool = False, on_progress: Optional[ProgressCallback] = None) -> PixelBuffer:
        """Run Otsu binarization on the original image."""
        return self._run(MODE_BINARIZE, {"invert": invert}, on_progress)

    def reprocess(self, on_progress: Optional[ProgressCallback] = None, **overrides) -> PixelBuffer:
        """
        Re-run the last pipeline, optionally changing some parameters.

        Raises:
            LineArtError: If nothing has been processed yet
        """
        if self.state.last_mode is None:
            raise LineArtError("Nothing to reprocess")
        params = dict(self.state.last_params)
        params.update(overrides)
        return self._run(self.state.last_mode, params, on_progress)

    def to_svg(self, simplify_tolerance: Optional[float] = None) -> str:
        """Vectorize the processed image."""
        if self.state.processed is None:
            raise LineArtError("No processed image to vectorize")
        if simplify_tolerance is None:
            simplify_tolerance = self.config.simplify_tolerance
        return vectorize(self.state.processed, simplify_tolerance, self.config)

    def reset(self) -> None:
        """Forget everything."""
        self.state = SessionState()
