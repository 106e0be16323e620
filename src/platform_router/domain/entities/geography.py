from dataclasses import dataclass

from platform_router.errors import DegenerateSpine


# Core geometry types used by the resolvers
@dataclass(frozen=True)
class Point:
    lon: float  # degrees, WGS84
    lat: float

    def __iter__(self):
        yield self.lon
        yield self.lat

    def __getitem__(self, i: int) -> float:
        return (self.lon, self.lat)[i]


Ring = tuple[Point, ...]


@dataclass(frozen=True)
class PlatformSpine:
    """Two-point line along the trackside edge of a platform."""

    start: Point
    end: Point

    def __post_init__(self):
        if self.start == self.end:
            raise DegenerateSpine(f"spine collapses to a single point {self.start}")

    def swapped(self) -> "PlatformSpine":
        return PlatformSpine(self.end, self.start)


@dataclass(frozen=True)
class DoorPosition:
    point: Point  # projection of the exit onto the spine line
    normalized: float  # 0 at spine start, 1 at spine end; not clamped
    distance_m: float  # great-circle distance from spine start
    platform_length_m: float


@dataclass
class PathResult:
    nodes: list[int]
    weight: float
