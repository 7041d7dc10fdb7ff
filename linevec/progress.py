"""Synchronous progress notifications for the pipelines."""
import logging
from typing import Iterator, Optional, Tuple

from linevec.types import ProgressCallback

logger = logging.getLogger(__name__)

DEFAULT_ROW_STRIDE = 10


class ProgressReporter:
    """
    Forward percentages to an observer callback.

    Values are clamped to [0, 100] and never decrease within one run, so a
    host UI can render them directly.
    """

    def __init__(self, callback: Optional[ProgressCallback] = None, row_stride: int = DEFAULT_ROW_STRIDE):
        self.callback = callback
        self.row_stride = max(1, row_stride)
        self.last = 0

    def report(self, percent: int) -> None:
        if self.callback is None:
            return
        percent = max(self.last, min(100, int(percent)))
        self.last = percent
        self.callback(percent)

    def stage(self, start: int, end: int) -> "StageProgress":
        """Sub-range of the overall run assigned to one pipeline stage."""
        return StageProgress(self, start, end)

    def finish(self) -> None:
        self.report(100)


class StageProgress:
    """Progress within one stage, reported at fixed row strides."""

    def __init__(self, reporter: Optional[ProgressReporter], start: int, end: int):
        self.reporter = reporter
        self.start = start
        self.end = end

    @classmethod
    def silent(cls) -> "StageProgress":
        return cls(None, 0, 0)

    @property
    def row_stride(self) -> int:
        if self.reporter is None:
            return DEFAULT_ROW_STRIDE
        return self.reporter.row_stride

    def fraction(self, done: float, total: float) -> None:
        """Report start + floor(span * done / total)."""
        if self.reporter is None or total <= 0:
            return
        self.reporter.report(self.start + int((self.end - self.start) * done // total))

    def bands(self, first_row: int, stop_row: int) -> Iterator[Tuple[int, int]]:
        """
        Split rows [first_row, stop_row) into bands of row_stride rows.

        Progress is reported after each band for the row the band started at.
        """
        stride = self.row_stride
        total = stop_row - first_row
        for y0 in range(first_row, stop_row, stride):
            y1 = min(y0 + stride, stop_row)
            yield y0, y1
            self.fraction(y0 - first_row, total)

    def done(self) -> None:
        if self.reporter is not None:
            self.reporter.report(self.end)
