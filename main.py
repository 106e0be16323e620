# main.py
import argparse
import sys

from platform_router.app.build import build
from platform_router.app.listing import group_services_by_mode, platform_lines, service_label
from platform_router.app.selection import PlatformChoice, Selection, SelectionHandoff
from platform_router.domain.entities.osm import PlatformID, element_id
from platform_router.errors import ElementKindError, RouterError, UnknownElement
from platform_router.io.recorder import FilteredSink, JsonlSink
from platform_router.io.result_events import RouteFailed
from platform_router.runtime.resources import load_snapshot


def parse_platform(text: str) -> PlatformID:
    kind, _, ref = text.partition("/")
    if kind not in ("way", "relation") or not ref.isdigit():
        raise argparse.ArgumentTypeError(f"expected way/<id> or relation/<id>, got {text!r}")
    return element_id(kind, int(ref))


def run(argv: list[str] | None = None) -> int:
    print("Data from: © OpenStreetMap contributors: https://openstreetmap.org/copyright")
    p = argparse.ArgumentParser(description="Where to stand on a platform for a quick transfer.")
    p.add_argument("snapshot", help="parsed map snapshot (.json or .pickle)")
    p.add_argument("--search", default="", help="station name filter, e.g. 'Warschauer Straße'")
    p.add_argument("--from", dest="source", type=parse_platform)
    p.add_argument("--from-service", type=int)
    p.add_argument("--to", dest="dest", type=parse_platform)
    p.add_argument("--to-service", type=int)
    p.add_argument("--threads", type=int, default=0, help="search workers (0 = sequential)")
    p.add_argument("--by-mode", action="store_true", help="list services grouped by vehicle type")
    p.add_argument("--failures", help="also append failed routes as JSON lines to this file")
    args = p.parse_args(argv)

    fmt = "pickle" if args.snapshot.endswith((".pkl", ".pickle")) else "json"
    snapshot = load_snapshot(args.snapshot, fmt)
    search = {"kind": "threaded", "workers": args.threads} if args.threads else {"kind": "sequential"}
    sinks = [JsonlSink()]
    if args.failures:
        sinks.append(FilteredSink(JsonlSink(path=args.failures), RouteFailed))
    session = build(snapshot, {"search_term": args.search, "search": search}, sinks=sinks)
    session.start()

    records = session.platforms()
    if args.by_mode:
        for heading, pairs in group_services_by_mode(records).items():
            print(f"{heading}:")
            for service, pid in pairs:
                print(f"  {service_label(service)} from {pid}")
    else:
        print("\n".join(platform_lines(snapshot, records)))
    if None in (args.source, args.from_service, args.dest, args.to_service):
        return 0

    handoff = SelectionHandoff()
    handoff.submit(
        Selection(
            PlatformChoice(args.source, args.from_service),
            PlatformChoice(args.dest, args.to_service),
        )
    )
    try:
        result = session.run(handoff)
    except (RouterError, UnknownElement, ElementKindError) as exc:
        print(f"No result: {exc}", file=sys.stderr)
        return 1

    print(f"Walk: {result.path.weight:.0f} m over {len(result.path.nodes)} nodes")
    for label, door in (("source", result.source_door), ("destination", result.destination_door)):
        print(
            f"{door.normalized * 100:.1f}% along {label} platform"
            f" ({door.distance_m:.1f} m of {door.platform_length_m:.1f} m)"
        )
    return 0


if __name__ == "__main__":
    sys.exit(run())
