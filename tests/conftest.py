# tests/conftest.py
import pytest

from platform_router.domain.entities.osm import MapSnapshot, Member, Node, Relation, Way


def node(nid, lon, lat, **tags):
    return Node(nid, lon, lat, tags)


def way(wid, ids, **tags):
    return Way(wid, tuple(ids), tags)


def rel(rid, members, **tags):
    return Relation(rid, tuple(Member(t, ref, role) for t, ref, role in members), tags)


def snapshot(nodes=(), ways=(), relations=()):
    return MapSnapshot(
        {n.id: n for n in nodes}, {w.id: w for w in ways}, {r.id: r for r in relations}
    )


@pytest.fixture
def station() -> MapSnapshot:
    """A subway track with an area platform east of it and a line platform further east.

    way 900    subway track along lon 13.4000
    way 100    closed area platform; west edge (101, 102) is ~2 m from the track
    way 300    line platform at lon 13.4003
    way 200    footway 103 -> 201 -> 202 -> 301 joining the two platforms
    rel 1000   route serving way 100, next stop far north
    rel 2000   route serving way 300, next stop far south
    """
    nodes = [
        node(901, 13.4000, 52.5000),
        node(902, 13.4000, 52.5020),
        node(101, 13.40003, 52.5005),
        node(102, 13.40003, 52.5010),
        node(103, 13.4001, 52.5010),
        node(104, 13.4001, 52.5005),
        node(201, 13.4002, 52.5009, level="0"),
        node(202, 13.4002, 52.5007, level="-1"),
        node(310, 13.4003, 52.5005),
        node(301, 13.4003, 52.5008),
        node(311, 13.4003, 52.5011),
        node(1001, 13.40002, 52.5007, public_transport="stop_position", name="Station", local_ref="1", ref="A"),
        node(1002, 13.4000, 52.5100, public_transport="stop_position", name="North"),
        node(2001, 13.4003, 52.4900, public_transport="stop_position", name="South"),
    ]
    ways = [
        way(900, [901, 902], railway="subway"),
        way(100, [101, 102, 103, 104, 101], railway="platform", area="yes", name="Station"),
        way(300, [310, 301, 311], public_transport="platform", name="Station"),
        way(200, [103, 201, 202, 301], highway="footway"),
    ]
    relations = [
        rel(
            1000,
            [("node", 1001, "stop"), ("way", 100, "platform"), ("node", 1002, "stop")],
            type="route", route="subway", ref="U1", to="North",
        ),
        rel(
            2000,
            [("way", 300, "platform"), ("node", 2001, "stop")],
            type="route", route="tram", ref="M10", to="South",
        ),
    ]
    return snapshot(nodes, ways, relations)
