"""Point-in-quadrilateral test for the trade region.

A point lies inside a convex quadrilateral exactly when the four triangles it
forms with consecutive corners add up to the quadrilateral's own area. Floats
make that equality flaky, so coordinates are snapped to a fixed grid of
``GRID`` degrees first and the shoelace sums are computed on integers.

Snapping makes the boundary fuzzy by half a grid step: a point up to about
2.5e-7 degrees outside an edge rounds onto it and counts as inside.
"""

from __future__ import annotations

from typing import Sequence

from ..data.base import BoundingBox, GeoPoint

# Coordinate precision, roughly 5cm at the equator.
GRID = 5e-7

_Cell = tuple[int, int]


def snap(value: float) -> int:
    """Nearest multiple of GRID, as a count of grid steps."""
    return round(value / GRID)


def twice_triangle_area(a: _Cell, b: _Cell, c: _Cell) -> int:
    """Shoelace formula, doubled so it stays an integer."""
    (xa, ya), (xb, yb), (xc, yc) = a, b, c
    return abs(xa * (yb - yc) + xb * (yc - ya) + xc * (ya - yb))


class GeoFence:
    def __init__(self, corners: Sequence[GeoPoint]):
        if len(corners) != 4:
            raise ValueError(f"a geofence needs 4 corners, got {len(corners)}")
        self.corners = tuple(corners)
        self._cells = tuple((snap(p.lat), snap(p.lon)) for p in self.corners)
        c1, c2, c3, c4 = self._cells
        self._area = twice_triangle_area(c1, c2, c3) + twice_triangle_area(c1, c4, c3)

    @classmethod
    def from_bounds(cls, box: BoundingBox) -> "GeoFence":
        return cls((
            GeoPoint(box.max_lat, box.min_lon),
            GeoPoint(box.max_lat, box.max_lon),
            GeoPoint(box.min_lat, box.max_lon),
            GeoPoint(box.min_lat, box.min_lon),
        ))

    @property
    def degenerate(self) -> bool:
        return self._area == 0

    def contains(self, lat: float, lon: float) -> bool:
        """True for points inside the fence or on its boundary."""
        if self.degenerate:
            return False
        p = (snap(lat), snap(lon))
        c1, c2, c3, c4 = self._cells
        around = (
            twice_triangle_area(p, c1, c2)
            + twice_triangle_area(p, c2, c3)
            + twice_triangle_area(p, c3, c4)
            + twice_triangle_area(p, c1, c4)
        )
        return around == self._area
