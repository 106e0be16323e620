# app/listing.py
"""Plain-text views of platforms and their services for the host's pick-lists."""

from platform_router.domain.entities.osm import MapSnapshot, PlatformID, Relation
from platform_router.domain.services import PlatformRecord, display_number

MODE_HEADINGS = {
    "light_rail": "Light rail",
    "subway": "Subway",
    "tram": "Tram",
    "trolleybus": "Trolley Bus",
    "bus": "Bus",
    "ferry": "Ferry",
}
OTHER_HEADING = "Everything else"


def service_label(service: Relation, platform_number: str | None = None) -> str:
    label = f"{service.tags.get('ref', '?')} to {service.tags.get('to', '?')}"
    if platform_number:
        label += f" on platform {platform_number}"
    return label


def group_services_by_mode(
    records: dict[PlatformID, PlatformRecord],
) -> dict[str, list[tuple[Relation, PlatformID]]]:
    """(service, platform) pairs grouped under a heading per vehicle type.

    Headings keep MODE_HEADINGS order with OTHER_HEADING last; empty groups are dropped.
    """
    groups: dict[str, list[tuple[Relation, PlatformID]]] = {
        h: [] for h in [*MODE_HEADINGS.values(), OTHER_HEADING]
    }
    for pid, rec in records.items():
        for service in rec.services:
            heading = MODE_HEADINGS.get(service.tags.get("route", ""), OTHER_HEADING)
            groups[heading].append((service, pid))
    return {h: pairs for h, pairs in groups.items() if pairs}


def platform_lines(snapshot: MapSnapshot, records: dict[PlatformID, PlatformRecord]) -> list[str]:
    lines: list[str] = []
    for pid, rec in records.items():
        element = snapshot.platform(pid)
        header = f"Platform {element.tags.get('name', '')} ({pid}) has services:"
        lines += ["=" * len(header), header, "=" * len(header)]
        number = display_number(element, rec)
        for service in rec.services:
            lines.append(
                f"{service_label(service, number)}"
                f" [{service.tags.get('operator', '')}, {service.tags.get('route', '')}]"
            )
    return lines
