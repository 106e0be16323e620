# platform_router/domain/pedestrian_graph.py
import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass

import networkx as nx

from platform_router.app.hooks import NoopHooks, RouterHooks
from platform_router.config.models import GraphModel
from platform_router.domain.entities.osm import MapSnapshot, Way
from platform_router.domain.geometry import distance_m
from platform_router.errors import Cancelled

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PedestrianGraph:
    graph: nx.DiGraph  # frozen; edge attr "weight" in meters
    footway_nodes: frozenset[int]

    def has_node(self, node_id: int) -> bool:
        return self.graph.has_node(node_id)

    def weight(self, u: int, v: int) -> float | None:
        data = self.graph.get_edge_data(u, v)
        return None if data is None else data["weight"]


def _set_edge(g: nx.DiGraph, u: int, v: int, w: float) -> None:
    old = g.get_edge_data(u, v)
    if old is not None and old["weight"] != w:
        log.debug("edge %s->%s overwritten: %.3f -> %.3f", u, v, old["weight"], w)
    g.add_edge(u, v, weight=w)


def add_way_segments(g: nx.DiGraph, way: Way, snapshot: MapSnapshot, cfg: GraphModel) -> int:
    """Add the walkable edges of one way. Returns the number of edges written."""
    ids = way.node_ids
    if len(ids) < 2:
        return 0
    for nid in ids:
        if nid in snapshot.nodes:
            g.add_node(nid)
    if way.tags.get("highway") not in cfg.walkable_highways:
        return 0

    conveying = way.tags.get("conveying", "")
    written = 0
    for u, v in zip(ids, ids[1:]):
        nu, nv = snapshot.nodes.get(u), snapshot.nodes.get(v)
        if nu is None or nv is None:
            log.warning("way %s references missing node %s", way.id, u if nu is None else v)
            continue
        # no routing through elevators
        if nu.tags.get("highway") == "elevator" or nv.tags.get("highway") == "elevator":
            continue
        d = distance_m(nu.point, nv.point)
        if conveying == "forward":
            _set_edge(g, u, v, d * cfg.assisted_factor)
            written += 1
        elif conveying == "backward":
            _set_edge(g, v, u, d * cfg.assisted_factor)
            written += 1
        else:
            _set_edge(g, u, v, d)
            _set_edge(g, v, u, d)
            written += 2
    return written


def footway_node_ids(ways: Iterable[Way], footway_highway: str = "footway") -> frozenset[int]:
    out: set[int] = set()
    for w in ways:
        if len(w.node_ids) >= 2 and w.tags.get("highway") == footway_highway:
            out.update(w.node_ids)
    return frozenset(out)


def build_pedestrian_graph(
    snapshot: MapSnapshot,
    cfg: GraphModel | None = None,
    *,
    hooks: RouterHooks | None = None,
    cancel: threading.Event | None = None,
) -> PedestrianGraph:
    cfg = cfg or GraphModel()
    hooks = hooks or NoopHooks()
    g = nx.DiGraph()
    total = len(snapshot.ways)
    for i, way in enumerate(snapshot.ways.values(), start=1):
        if cancel is not None and cancel.is_set():
            raise Cancelled("graph build cancelled")
        add_way_segments(g, way, snapshot, cfg)
        if i % cfg.progress_every == 0:
            hooks.build_progress(stage="graph", done=i, total=total)

    footways = footway_node_ids(snapshot.ways.values(), cfg.footway_highway)
    log.info("pedestrian graph: %d nodes, %d edges", g.number_of_nodes(), g.number_of_edges())
    return PedestrianGraph(graph=nx.freeze(g), footway_nodes=footways)
