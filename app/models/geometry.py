"""
Grid geometry helpers.

Grid points are plain (x, y) integer tuples. The y axis grows downwards, as
on the rendering surface, so a clockwise rotation maps (x, y) to (-y, x).
All rotations are done with integer arithmetic only.
"""

from dataclasses import dataclass

GridPoint = tuple[int, int]

# (left, right, top, bottom) relative to node 0
Extents = tuple[int, int, int, int]

ROTATIONS = (0, 90, 180, 270)


def rotate_point(point: GridPoint, rotation: int) -> GridPoint:
    """Rotate a grid offset clockwise by *rotation* degrees (a multiple of 90)."""
    x, y = point
    rotation %= 360
    if rotation not in ROTATIONS:
        raise ValueError(f"Unsupported rotation: {rotation}")
    if rotation == 0:
        return (x, y)
    if rotation == 90:
        return (-y, x)
    if rotation == 180:
        return (-x, -y)
    return (y, -x)


def rotate_extents(extents: Extents, rotation: int) -> Extents:
    """Permute unrotated (left, right, top, bottom) extents for a rotation."""
    left, right, top, bottom = extents
    rotation %= 360
    if rotation not in ROTATIONS:
        raise ValueError(f"Unsupported rotation: {rotation}")
    if rotation == 0:
        return (left, right, top, bottom)
    if rotation == 90:
        return (-bottom, -top, left, right)
    if rotation == 180:
        return (-right, -left, -bottom, -top)
    return (top, bottom, -right, -left)


@dataclass
class GridRect:
    """Axis-aligned integer rectangle; right/bottom edges are inclusive."""

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def is_empty(self) -> bool:
        return self.width == 0 and self.height == 0 and self.x == 0 and self.y == 0

    def scaled(self, factor: int) -> "GridRect":
        """Return this rectangle converted to pixel units."""
        return GridRect(self.x * factor, self.y * factor, self.width * factor, self.height * factor)

    def inflated(self, amount: int) -> "GridRect":
        return GridRect(self.x - amount, self.y - amount, self.width + 2 * amount, self.height + 2 * amount)

    def contains(self, point: tuple[float, float]) -> bool:
        px, py = point
        return self.x <= px <= self.right and self.y <= py <= self.bottom

    def intersects(self, other: "GridRect") -> bool:
        return not (
            other.x > self.right or other.right < self.x or other.y > self.bottom or other.bottom < self.y
        )

    @classmethod
    def from_edges(cls, left: int, top: int, right: int, bottom: int) -> "GridRect":
        return cls(left, top, right - left, bottom - top)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}
