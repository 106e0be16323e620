from conftest import rel, snapshot, way
from platform_router.app.listing import (
    OTHER_HEADING,
    group_services_by_mode,
    platform_lines,
    service_label,
)
from platform_router.domain.entities.osm import WayID
from platform_router.domain.services import PlatformRecord, platform_records


def test_service_label():
    r = rel(1, [], type="route", ref="S7", to="Ahrensfelde")
    assert service_label(r) == "S7 to Ahrensfelde"
    assert service_label(r, "2") == "S7 to Ahrensfelde on platform 2"


def test_services_grouped_by_mode_in_heading_order():
    bus = rel(1, [], type="route", route="bus", ref="100")
    tram = rel(2, [], type="route", route="tram", ref="M10")
    train = rel(3, [], type="route", route="train", ref="RE1")
    records = {
        WayID(5): PlatformRecord(WayID(5), [bus, train]),
        WayID(6): PlatformRecord(WayID(6), [tram]),
    }
    groups = group_services_by_mode(records)
    assert list(groups) == ["Tram", "Bus", OTHER_HEADING]
    assert groups["Bus"] == [(bus, WayID(5))]
    assert groups[OTHER_HEADING] == [(train, WayID(5))]


def test_platform_lines(station):
    lines = platform_lines(station, platform_records(station, "Station"))
    assert lines[1] == "Platform Station (way/100) has services:"
    assert lines[0] == "=" * len(lines[1])
    assert lines[3] == "U1 to North [, subway]"
    assert lines[7] == "M10 to South [, tram]"


def test_platform_lines_show_element_ref():
    snap = snapshot(
        ways=[way(5, [1, 2], railway="platform", name="Hbf", ref="4")],
        relations=[rel(9, [("way", 5, "platform")], type="route", ref="S1", to="X", operator="DB")],
    )
    lines = platform_lines(snap, platform_records(snap))
    assert lines[-1] == "S1 to X on platform 4 [DB, ]"
