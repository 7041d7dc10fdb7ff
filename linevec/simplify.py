"""Polyline simplification using the Douglas-Peucker algorithm."""
import math
from typing import List, Sequence, Tuple, Union

import numpy as np

from linevec.types import Polyline


def perpendicular_distance(
    point: Union[Tuple[float, float], np.ndarray],
    start: Tuple[float, float],
    end: Tuple[float, float]
) -> Union[float, np.ndarray]:
    """
    Distance from point(s) to the segment start-end.

    Projects each point onto the segment, clamping to the endpoints; a
    zero-length segment degenerates to the distance between two points.

    Args:
        point: One (x, y) point or an (N, 2) array of points
        start: Segment start
        end: Segment end

    Returns:
        float for a single point, (N,) array for an array of points
    """
    points = np.asarray(point, dtype=np.float64)
    sx, sy = float(start[0]), float(start[1])
    ex, ey = float(end[0]), float(end[1])
    px, py = points[..., 0], points[..., 1]
    dx = ex - sx
    dy = ey - sy

    to_start = np.hypot(px - sx, py - sy)
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        distances = to_start
    else:
        t = ((px - sx) * dx + (py - sy) * dy) / length_sq
        to_end = np.hypot(px - ex, py - ey)
        # Inside the segment: cross product over length, which stays exactly
        # 0 for collinear integer points
        to_line = np.abs(dx * (py - sy) - dy * (px - sx)) / math.sqrt(length_sq)
        distances = np.where(t <= 0, to_start, np.where(t >= 1, to_end, to_line))

    if distances.ndim == 0:
        return float(distances)
    return distances


def _segment_distances(points: np.ndarray, first: int, last: int) -> np.ndarray:
    """Distances of points[first + 1:last] to the chord points[first]-points[last]."""
    return perpendicular_distance(points[first + 1:last], points[first], points[last])


def simplify_path(path: Sequence[Tuple[float, float]], tolerance: float = 1.0) -> Polyline:
    """
    Reduce a polyline with Douglas-Peucker.

    The point farthest from the chord between the current endpoints is kept
    when its distance exceeds tolerance, and both halves are processed the
    same way; otherwise everything between the endpoints is dropped. Ties
    keep the earliest farthest point. Paths of two points or fewer are
    returned unchanged.

    Args:
        path: Ordered (x, y) points
        tolerance: Maximum allowed deviation

    Returns:
        Simplified list of points, always including both endpoints
    """
    path = [tuple(p) for p in path]
    if len(path) <= 2:
        return path

    tolerance = max(0.0, tolerance)
    points = np.asarray(path, dtype=np.float64)
    keep = np.zeros(len(path), dtype=bool)
    keep[0] = keep[-1] = True

    # Explicit stack instead of recursion so long traced paths cannot hit the
    # interpreter recursion limit; the kept set is the same.
    stack = [(0, len(path) - 1)]
    while stack:
        first, last = stack.pop()
        if last - first < 2:
            continue
        distances = _segment_distances(points, first, last)
        offset = int(np.argmax(distances))
        if distances[offset] > tolerance:
            split = first + 1 + offset
            keep[split] = True
            stack.append((first, split))
            stack.append((split, last))

    return [p for p, k in zip(path, keep) if k]


def simplify_paths(paths: List[Polyline], tolerance: float = 1.0) -> List[Polyline]:
    """Simplify each path independently."""
    return [simplify_path(p, tolerance) for p in paths]
