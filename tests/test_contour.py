"""Tests for boundary tracing."""

import numpy as np
import pytest

from linevec.contour import (
    GreedyTracer,
    MarchingSquaresTracer,
    get_tracer,
)
from linevec.simplify import simplify_path


class TestGreedyTracer:
    """Test cases for the greedy walk."""

    def test_straight_run(self, background_mask):
        """A horizontal run is walked left to right."""
        mask = background_mask(20, 20)
        mask[5, 3:15] = 0

        paths = GreedyTracer().trace(mask)

        assert len(paths) == 1
        assert paths[0] == [(x, 5) for x in range(3, 15)]

    def test_run_simplifies_to_endpoints(self, background_mask):
        """Tracing then simplifying a 12-pixel run leaves its two ends."""
        mask = background_mask(20, 20)
        mask[5, 3:15] = 0

        path = GreedyTracer().trace(mask)[0]

        assert simplify_path(path, 0.5) == [(3, 5), (14, 5)]

    def test_short_paths_discarded(self, background_mask):
        """Paths of ten points or fewer are noise."""
        mask = background_mask(10, 20)
        mask[2, 0:10] = 0
        mask[6, 0:11] = 0

        paths = GreedyTracer().trace(mask)

        assert len(paths) == 1
        assert len(paths[0]) == 11

    def test_vertical_run_top_down(self, background_mask):
        """Walks start at the first ink pixel in raster order."""
        mask = background_mask(20, 5)
        mask[2:16, 2] = 0

        paths = GreedyTracer().trace(mask)

        assert paths[0][0] == (2, 2)
        assert paths[0][-1] == (2, 15)

    def test_ring_cuts_corners(self, background_mask):
        """Diagonal steps are taken first, so a square ring loses two corners."""
        mask = background_mask(12, 12)
        mask[2, 2:9] = 0
        mask[8, 2:9] = 0
        mask[2:9, 2] = 0
        mask[2:9, 8] = 0

        paths = GreedyTracer().trace(mask)

        assert len(paths) == 1
        assert len(paths[0]) == 22
        assert len(set(paths[0])) == 22
        assert (8, 8) not in paths[0]
        assert (2, 8) not in paths[0]

    def test_empty_mask(self, background_mask):
        """No ink gives no paths."""
        assert GreedyTracer().trace(background_mask(8, 8)) == []

    def test_min_length_configurable(self, background_mask):
        """The discard length can be changed."""
        mask = background_mask(5, 10)
        mask[2, 2:6] = 0

        assert GreedyTracer(min_length=3).trace(mask) == [[(2, 2), (3, 2), (4, 2), (5, 2)]]


class TestMarchingSquaresTracer:
    """Test cases for the sub-pixel tracer."""

    def test_square_outline_is_closed(self, background_mask):
        """An ink square gives one closed outline around it."""
        mask = background_mask(30, 30)
        mask[10:20, 10:20] = 0

        paths = MarchingSquaresTracer().trace(mask)

        assert len(paths) == 1
        outline = np.array(paths[0])
        np.testing.assert_allclose(outline[0], outline[-1])
        assert outline[:, 0].min() == pytest.approx(9.5)
        assert outline[:, 0].max() == pytest.approx(19.5)

    def test_region_touching_border(self, background_mask):
        """Ink on the image edge still closes."""
        mask = background_mask(20, 20)
        mask[:, :8] = 0

        paths = MarchingSquaresTracer().trace(mask)

        assert len(paths) == 1
        np.testing.assert_allclose(paths[0][0], paths[0][-1])


class TestGetTracer:
    """Test cases for tracer lookup."""

    def test_known_names(self):
        """Both strategies are registered."""
        assert isinstance(get_tracer("greedy"), GreedyTracer)
        assert isinstance(get_tracer("marching"), MarchingSquaresTracer)

    def test_unknown_name(self):
        """Unknown strategies are rejected."""
        with pytest.raises(ValueError):
            get_tracer("moore")
