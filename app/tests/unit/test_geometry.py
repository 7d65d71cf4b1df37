"""Tests for models/geometry.py: integer rotation helpers and GridRect."""

import pytest
from models.geometry import ROTATIONS, GridRect, rotate_extents, rotate_point


class TestRotatePoint:
    @pytest.mark.parametrize(
        "rotation, expected",
        [(0, (2, 1)), (90, (-1, 2)), (180, (-2, -1)), (270, (1, -2))],
    )
    def test_clockwise(self, rotation, expected):
        assert rotate_point((2, 1), rotation) == expected

    def test_full_turn_wraps(self):
        assert rotate_point((2, 1), 360) == (2, 1)
        assert rotate_point((2, 1), -90) == rotate_point((2, 1), 270)

    @pytest.mark.parametrize("rotation", [45, 100, -10])
    def test_unsupported_rotation(self, rotation):
        with pytest.raises(ValueError, match="Unsupported rotation"):
            rotate_point((1, 0), rotation)

    def test_four_steps_are_identity(self):
        point = (3, -2)
        for _ in ROTATIONS:
            point = rotate_point(point, 90)
        assert point == (3, -2)


class TestRotateExtents:
    @pytest.mark.parametrize(
        "rotation, expected",
        [(0, (-1, 2, -3, 4)), (90, (-4, 3, -1, 2)), (180, (-2, 1, -4, 3)), (270, (-3, 4, -2, 1))],
    )
    def test_permutation(self, rotation, expected):
        assert rotate_extents((-1, 2, -3, 4), rotation) == expected

    def test_unsupported_rotation(self):
        with pytest.raises(ValueError):
            rotate_extents((0, 1, 0, 1), 30)


class TestGridRect:
    def test_edges_inclusive(self):
        rect = GridRect.from_edges(1, 2, 4, 6)
        assert (rect.width, rect.height) == (3, 4)
        assert rect.contains((4, 6))
        assert not rect.contains((5, 6))

    def test_touching_rectangles_intersect(self):
        assert GridRect(0, 0, 2, 2).intersects(GridRect(2, 2, 1, 1))
        assert not GridRect(0, 0, 2, 2).intersects(GridRect(3, 0, 1, 1))

    def test_scaled_and_inflated(self):
        assert GridRect(1, 1, 2, 0).scaled(40) == GridRect(40, 40, 80, 0)
        assert GridRect(1, 1, 2, 0).inflated(1) == GridRect(0, 0, 4, 2)
