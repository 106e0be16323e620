# platform_router/domain/orientation.py
import logging
import math

from platform_router.domain.entities.geography import DoorPosition, PlatformSpine, Point
from platform_router.domain.entities.osm import MapSnapshot, Node, PlatformID, Relation
from platform_router.domain.geometry import distance_m, project_onto_line

log = logging.getLogger(__name__)


def next_stop(snapshot: MapSnapshot, platform: PlatformID, service: Relation) -> Node | None:
    """First node member after the platform's own entry in the route."""
    members = service.members
    try:
        pos = next(i for i, m in enumerate(members) if m.element_id == platform)
    except StopIteration:
        log.info("platform %s is not a member of route %s", platform, service.id)
        return None
    for m in members[pos + 1 :]:
        if m.type == "node" and m.ref in snapshot.nodes:
            return snapshot.nodes[m.ref]
    log.info("platform %s is the last stop of route %s", platform, service.id)
    return None


def orient_spine(
    snapshot: MapSnapshot, spine: PlatformSpine, platform: PlatformID, service: Relation
) -> PlatformSpine:
    """Make spine.start the end nearer to the service's next stop."""
    stop = next_stop(snapshot, platform, service)
    if stop is None:
        return spine
    to_start = distance_m(spine.start, stop.point)
    to_end = distance_m(spine.end, stop.point)
    if to_end < to_start:
        return spine.swapped()
    return spine


def project_door(exit_point: Point, spine: PlatformSpine) -> DoorPosition:
    length = distance_m(spine.start, spine.end)
    door, t = project_onto_line(exit_point, spine.start, spine.end)
    along = distance_m(spine.start, door)
    normalized = math.copysign(along / length, t) if along else 0.0
    return DoorPosition(point=door, normalized=normalized, distance_m=along, platform_length_m=length)


def exit_nodes(snapshot: MapSnapshot, path: list[int]) -> tuple[int, int]:
    """(source exit, destination exit): first and last level-tagged nodes on the path.

    A path without level changes falls back to its own endpoints.
    """
    levels = [nid for nid in path if snapshot.nodes[nid].tags.get("level")]
    if not levels:
        return path[0], path[-1]
    return levels[0], levels[-1]
