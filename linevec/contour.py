"""Boundary tracing over binary masks."""
import logging
from typing import List, Tuple

import numpy as np
from skimage.measure import find_contours

from linevec.types import Mask, Polyline, INK

logger = logging.getLogger(__name__)

MIN_PATH_LENGTH = 10

# Neighbour scan order: row above left to right, then same row, then row below
_NEIGHBOR_OFFSETS = [
    (dx, dy)
    for dy in (-1, 0, 1)
    for dx in (-1, 0, 1)
    if not (dx == 0 and dy == 0)
]


class ContourTracer:
    """Turns an ink mask into ordered point sequences."""

    name = "base"

    def __init__(self, min_length: int = MIN_PATH_LENGTH):
        """
        Args:
            min_length: Paths with this many points or fewer are discarded
        """
        self.min_length = min_length

    def trace(self, mask: Mask) -> List[Polyline]:
        raise NotImplementedError


class GreedyTracer(ContourTracer):
    """
    Visited-marking greedy walk over 8-connected ink pixels.

    Pixels are scanned in raster order. Each unvisited ink pixel starts a
    walk that appends the current pixel, marks it visited and steps to the
    first unvisited ink neighbour in a fixed scan order. The walk ends when
    no such neighbour exists or it gets back to its start. There is no
    backtracking, so branching or thin structures split into several paths
    and contours are not guaranteed to be closed.
    """

    name = "greedy"

    def trace(self, mask: Mask) -> List[Polyline]:
        height, width = mask.shape
        ink = mask == INK
        visited = np.zeros((height, width), dtype=bool)
        paths = []

        for sy, sx in zip(*np.nonzero(ink)):
            if visited[sy, sx]:
                continue
            start = (int(sx), int(sy))
            path = self._walk(ink, visited, start)
            if len(path) > self.min_length:
                paths.append(path)

        logger.debug(f"Greedy tracer kept {len(paths)} paths")
        return paths

    def _walk(self, ink: np.ndarray, visited: np.ndarray, start: Tuple[int, int]) -> Polyline:
        height, width = ink.shape
        x, y = start
        path = []

        while True:
            path.append((x, y))
            visited[y, x] = True

            for dx, dy in _NEIGHBOR_OFFSETS:
                nx, ny = x + dx, y + dy
                if 0 <= nx < width and 0 <= ny < height and ink[ny, nx] and not visited[ny, nx]:
                    x, y = nx, ny
                    break
            else:
                break

            if (x, y) == start:
                break

        return path


class MarchingSquaresTracer(ContourTracer):
    """
    Sub-pixel boundaries of ink regions via marching squares.

    Produces closed, topologically consistent outlines at the 0.5 iso-level
    between ink and background, with float coordinates.
    """

    name = "marching"

    def trace(self, mask: Mask) -> List[Polyline]:
        ink = (mask == INK).astype(float)
        # Pad so regions touching the border still close
        padded = np.pad(ink, 1, mode="constant", constant_values=0.0)
        paths = []
        for contour in find_contours(padded, level=0.5):
            if len(contour) <= self.min_length:
                continue
            # (row, col) in padded space -> (x, y) in image space
            paths.append([(float(c) - 1.0, float(r) - 1.0) for r, c in contour])

        logger.debug(f"Marching squares tracer kept {len(paths)} paths")
        return paths


TRACERS = {
    GreedyTracer.name: GreedyTracer,
    MarchingSquaresTracer.name: MarchingSquaresTracer,
}


def get_tracer(name: str = "greedy", min_length: int = MIN_PATH_LENGTH) -> ContourTracer:
    """Look up a tracer strategy by name."""
    try:
        return TRACERS[name](min_length=min_length)
    except KeyError:
        raise ValueError(f"Unknown tracer '{name}', expected one of {sorted(TRACERS)}") from None
