# platform_router/domain/geometry.py
import logging
import math

import numpy as np

from platform_router.domain.entities.geography import Point, Ring

log = logging.getLogger(__name__)

EARTH_RADIUS_M = 6378137.0


def distance_m(a: Point, b: Point) -> float:
    """Haversine great-circle distance in meters."""
    lat1, lat2 = math.radians(a.lat), math.radians(b.lat)
    dlat = lat2 - lat1
    dlon = math.radians(b.lon - a.lon)
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))


def bearing(a: Point, b: Point) -> float:
    """Initial bearing from a to b in degrees, normalized to [0, 360)."""
    lat1, lat2 = math.radians(a.lat), math.radians(b.lat)
    dlon = math.radians(b.lon - a.lon)
    y = math.sin(dlon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(dlon)
    return math.degrees(math.atan2(y, x)) % 360.0


def point_at_bearing_and_distance(p: Point, bearing_deg: float, d: float) -> Point:
    lat1, lon1 = math.radians(p.lat), math.radians(p.lon)
    brg = math.radians(bearing_deg)
    ang = d / EARTH_RADIUS_M
    lat2 = math.asin(
        math.sin(lat1) * math.cos(ang) + math.cos(lat1) * math.sin(ang) * math.cos(brg)
    )
    lon2 = lon1 + math.atan2(
        math.sin(brg) * math.sin(ang) * math.cos(lat1),
        math.cos(ang) - math.sin(lat1) * math.sin(lat2),
    )
    return Point(math.degrees(lon2), math.degrees(lat2))


def perpendicular_bearings(line_bearing: float) -> tuple[float, float]:
    """(right, left) of the direction of travel, both in [0, 360)."""
    if line_bearing < 90:
        return line_bearing + 90, line_bearing + 270
    return (line_bearing + 90) % 360.0, line_bearing - 90


def rotated_bound_with_pad(a: Point, b: Point, d: float) -> Ring:
    """Closed 5-point rectangle padding segment a-b by d meters on each side.

    Corners run clockwise: a right, a left, b left, b right, back to a right.
    """
    up, down = perpendicular_bearings(bearing(a, b))
    n1 = point_at_bearing_and_distance(a, up, d)
    n2 = point_at_bearing_and_distance(a, down, d)
    n3 = point_at_bearing_and_distance(b, down, d)
    n4 = point_at_bearing_and_distance(b, up, d)
    return (n1, n2, n3, n4, n1)


def ring_is_rectangle(ring: Ring) -> bool:
    return len(ring) == 5 and ring[0] == ring[-1]


def is_point_in_rectangle(ring: Ring, p: Point) -> bool:
    """Containment test for a clockwise closed 5-point ring.

    Malformed rings never contain anything.
    """
    if not ring_is_rectangle(ring):
        log.debug("malformed ring with %d points", len(ring))
        return False
    for i in range(4):
        a, b = ring[i], ring[i + 1]
        ex, ey = b.lon - a.lon, b.lat - a.lat
        px, py = p.lon - a.lon, p.lat - a.lat
        if ex * py - ey * px > 0:
            return False
    return True


# ---------- local plane around an anchor (small distances only) ----------


def to_local_m(anchor: Point, p: Point) -> np.ndarray:
    k = math.radians(1.0) * EARTH_RADIUS_M
    return np.array(
        [(p.lon - anchor.lon) * k * math.cos(math.radians(anchor.lat)), (p.lat - anchor.lat) * k]
    )


def from_local_m(anchor: Point, v: np.ndarray) -> Point:
    k = math.radians(1.0) * EARTH_RADIUS_M
    return Point(
        anchor.lon + float(v[0]) / (k * math.cos(math.radians(anchor.lat))),
        anchor.lat + float(v[1]) / k,
    )


def project_onto_line(p: Point, a: Point, b: Point) -> tuple[Point, float]:
    """Project p onto the infinite line a-b.

    Returns the projected point and its line parameter t (0 at a, 1 at b).
    """
    ab = to_local_m(a, b)
    ap = to_local_m(a, p)
    denom = float(np.dot(ab, ab))
    if denom == 0.0:
        raise ValueError("cannot project onto a zero-length line")
    t = float(np.dot(ap, ab)) / denom
    return from_local_m(a, t * ab), t
