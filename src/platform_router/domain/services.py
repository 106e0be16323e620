# platform_router/domain/services.py
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from platform_router.domain.entities.osm import (
    MapSnapshot,
    PlatformID,
    Relation,
    RelationID,
    Way,
    WayID,
)
from platform_router.errors import MissingPlatformNumber

log = logging.getLogger(__name__)


@dataclass
class PlatformRecord:
    element_id: PlatformID
    services: list[Relation] = field(default_factory=list)
    platform_number: str | None = None

    def add_service(self, route: Relation) -> None:
        if all(s.id != route.id for s in self.services):
            self.services.append(route)


def is_platform(tags) -> bool:
    return tags.get("railway") == "platform" or tags.get("public_transport") == "platform"


def find_platforms(snapshot: MapSnapshot, search_term: str = "") -> list[PlatformID]:
    """Platform ways and relations whose name contains the search term."""
    found: list[PlatformID] = []
    for w in snapshot.ways.values():
        if is_platform(w.tags) and search_term in w.tags.get("name", ""):
            found.append(WayID(w.id))
    for r in snapshot.relations.values():
        if is_platform(r.tags) and search_term in r.tags.get("name", ""):
            found.append(RelationID(r.id))
    return found


def routes(snapshot: MapSnapshot) -> list[Relation]:
    return [r for r in snapshot.relations.values() if r.tags.get("type") == "route"]


def match_services(
    snapshot: MapSnapshot, platforms: Iterable[PlatformID]
) -> dict[PlatformID, PlatformRecord]:
    """Attach every route relation that lists a platform as a member to it."""
    records = {p: PlatformRecord(p) for p in platforms}
    for route in routes(snapshot):
        for m in route.members:
            if m.type not in ("way", "relation"):
                continue
            rec = records.get(m.element_id)
            if rec is not None:
                rec.add_service(route)
    n = sum(len(r.services) for r in records.values())
    log.debug("matched %d services to %d platforms", n, len(records))
    return records


def resolve_platform_number(snapshot: MapSnapshot, platform: PlatformID, service: Relation) -> str:
    """Platform number from the stop position paired with the platform in a route.

    The paired stop is the first node member of the route whose name equals
    the platform's name; its local_ref wins over ref.
    """
    name = snapshot.platform(platform).tags.get("name")
    if name is not None:
        for m in service.members:
            if m.type != "node":
                continue
            node = snapshot.nodes.get(m.ref)
            if node is None or node.tags.get("name") != name:
                continue
            number = node.tags.get("local_ref") or node.tags.get("ref")
            if number:
                return number
            break
    raise MissingPlatformNumber(platform, service.id)


def display_number(element: Way | Relation, record: PlatformRecord) -> str | None:
    return record.platform_number or element.tags.get("ref") or None


def platform_records(
    snapshot: MapSnapshot, search_term: str = ""
) -> dict[PlatformID, PlatformRecord]:
    return match_services(snapshot, find_platforms(snapshot, search_term))
