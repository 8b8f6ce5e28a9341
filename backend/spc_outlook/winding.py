"""
winding.py — Point-in-polygon test for outlook hazard boundaries.

Uses the winding-number method: walk the closed ring edge by edge and count
how many times the boundary winds around the test point, +1 for each upward
crossing with the point on the left, -1 for each downward crossing with the
point on the right. A non-zero total means the point is inside.

Latitude is the "vertical" axis and longitude the "horizontal" one.

Reference:
    Dan Sunday, "Inclusion of a Point in a Polygon"
    https://geomalgorithms.com/a03-_inclusion.html
"""

from __future__ import annotations

from typing import Iterable

from spc_outlook.models import Point, Ring


def is_left(p0: Point, p1: Point, p2: Point) -> float:
    """
    Test on which side of the directed edge p0→p1 the point p2 lies.

    Returns:
        > 0 if p2 is left of the edge, < 0 if right, 0 if on the line.
    """
    return (p1.lng - p0.lng) * (p2.lat - p0.lat) - (p2.lng - p0.lng) * (p1.lat - p0.lat)


def winding_number(point: Point, ring: Ring) -> int:
    """
    Compute the winding number of a closed ring around a point.

    The ring must already be closed (ring[0] == ring[-1]); an unclosed ring
    is a caller error and the result for it is undefined. Rings with fewer
    than two edges always give 0.

    Args:
        point: Test point.
        ring:  Closed sequence of vertices.

    Returns:
        Signed winding count; 0 means the point is outside.
    """
    if len(ring) < 3:
        return 0

    wn = 0
    for v0, v1 in zip(ring, ring[1:]):
        if v0.lat <= point.lat:
            # Upward crossing
            if v1.lat > point.lat and is_left(v0, v1, point) > 0:
                wn += 1
        else:
            # Downward crossing
            if v1.lat <= point.lat and is_left(v0, v1, point) < 0:
                wn -= 1

    return wn


def point_in_ring(point: Point, ring: Ring) -> bool:
    """True if the ring winds around the point at least once."""
    return winding_number(point, ring) != 0


def point_in_polygon(point: Point, outer: Ring, holes: Iterable[Ring] = ()) -> bool:
    """
    Test a point against a polygon with optional holes.

    The point must be inside the outer ring and NOT inside any hole. Holes
    are tested in order and the first one containing the point ends the test.

    Args:
        point: Test point.
        outer: Exterior ring.
        holes: Interior rings.

    Returns:
        True if the point is inside the outer ring and outside all holes.
    """
    if not point_in_ring(point, outer):
        return False

    for hole in holes:
        if point_in_ring(point, hole):
            return False

    return True
