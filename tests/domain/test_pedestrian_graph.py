import threading

import networkx as nx
import pytest

from conftest import node, snapshot, way
from platform_router.config.models import GraphModel
from platform_router.domain.geometry import distance_m
from platform_router.domain.pedestrian_graph import build_pedestrian_graph
from platform_router.errors import Cancelled

N1 = node(1, 0.0, 0.0)
N2 = node(2, 0.0, 0.001)
N3 = node(3, 0.0, 0.002)
D12 = distance_m(N1.point, N2.point)


def test_plain_footway_is_symmetric_at_full_distance():
    g = build_pedestrian_graph(snapshot([N1, N2], [way(10, [1, 2], highway="footway")]))
    assert g.weight(1, 2) == pytest.approx(D12)
    assert g.weight(2, 1) == pytest.approx(D12)
    assert g.footway_nodes == {1, 2}


def test_forward_conveying_gives_only_forward_half_edge():
    snap = snapshot([N1, N2], [way(10, [1, 2], highway="footway", conveying="forward")])
    g = build_pedestrian_graph(snap)
    assert g.weight(1, 2) == pytest.approx(D12 / 2)
    assert g.weight(2, 1) is None


def test_backward_conveying_gives_only_reverse_half_edge():
    snap = snapshot([N1, N2], [way(10, [1, 2], highway="steps", conveying="backward")])
    g = build_pedestrian_graph(snap)
    assert g.weight(2, 1) == pytest.approx(D12 / 2)
    assert g.weight(1, 2) is None


def test_other_conveying_values_walk_both_ways():
    snap = snapshot([N1, N2], [way(10, [1, 2], highway="footway", conveying="reversible")])
    g = build_pedestrian_graph(snap)
    assert g.weight(1, 2) == pytest.approx(D12)
    assert g.weight(2, 1) == pytest.approx(D12)


def test_elevator_nodes_are_excluded():
    lift = node(2, 0.0, 0.001, highway="elevator")
    snap = snapshot([N1, lift, N3], [way(10, [1, 2, 3], highway="footway")])
    g = build_pedestrian_graph(snap)
    assert g.graph.number_of_edges() == 0
    assert g.has_node(2)


def test_steps_are_walkable_but_not_footway_members():
    snap = snapshot([N1, N2], [way(10, [1, 2], highway="steps")])
    g = build_pedestrian_graph(snap)
    assert g.weight(1, 2) == pytest.approx(D12)
    assert g.footway_nodes == frozenset()


def test_non_walkable_and_short_ways_add_no_edges():
    snap = snapshot(
        [N1, N2, N3],
        [way(10, [1, 2], highway="residential"), way(11, [3], highway="footway")],
    )
    g = build_pedestrian_graph(snap)
    assert g.graph.number_of_edges() == 0
    assert g.has_node(1) and g.has_node(2)
    assert not g.has_node(3)
    assert 3 not in g.footway_nodes


def test_later_way_overwrites_same_ordered_pair():
    snap = snapshot(
        [N1, N2],
        [
            way(10, [1, 2], highway="footway"),
            way(11, [1, 2], highway="footway", conveying="forward"),
        ],
    )
    g = build_pedestrian_graph(snap)
    assert g.weight(1, 2) == pytest.approx(D12 / 2)
    assert g.weight(2, 1) == pytest.approx(D12)


def test_missing_node_skips_only_that_segment():
    snap = snapshot([N1, N2], [way(10, [1, 2, 99], highway="footway")])
    g = build_pedestrian_graph(snap)
    assert g.weight(1, 2) == pytest.approx(D12)
    assert not g.has_node(99)


def test_graph_is_frozen_and_weights_non_negative():
    snap = snapshot([N1, N2, N3], [way(10, [1, 2, 3], highway="footway")])
    g = build_pedestrian_graph(snap)
    assert nx.is_frozen(g.graph)
    with pytest.raises(nx.NetworkXError):
        g.graph.add_edge(1, 3, weight=1.0)
    assert all(w >= 0 for _, _, w in g.graph.edges(data="weight"))


def test_assisted_factor_and_progress_are_configurable():
    seen = []

    class Hooks:
        def build_progress(self, **kw):
            seen.append(kw)

    snap = snapshot(
        [N1, N2, N3],
        [
            way(10, [1, 2], highway="footway", conveying="forward"),
            way(11, [2, 3], highway="footway"),
        ],
    )
    g = build_pedestrian_graph(
        snap, GraphModel(assisted_factor=0.25, progress_every=1), hooks=Hooks()
    )
    assert g.weight(1, 2) == pytest.approx(D12 / 4)
    assert [s["done"] for s in seen] == [1, 2]
    assert all(s["stage"] == "graph" and s["total"] == 2 for s in seen)


def test_cancel_stops_build():
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(Cancelled):
        build_pedestrian_graph(
            snapshot([N1, N2], [way(10, [1, 2], highway="footway")]), cancel=cancel
        )
