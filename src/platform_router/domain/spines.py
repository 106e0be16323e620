# platform_router/domain/spines.py
import logging
import threading
from collections.abc import Sequence

from platform_router.domain.entities.geography import PlatformSpine
from platform_router.domain.entities.osm import (
    MapSnapshot,
    Node,
    PlatformID,
    Relation,
    RelationID,
    Way,
    WayID,
)
from platform_router.domain.rail_index import RailProximityIndex
from platform_router.errors import AmbiguousPlatformEdge, DegenerateSpine, UnresolvedSpine

log = logging.getLogger(__name__)


def longest_cyclic_run(flags: Sequence[bool]) -> tuple[int, int] | None:
    """Longest run of True in a cyclic sequence.

    The scan starts at the first False and walks the sequence as if it were
    concatenated with itself, so a run crossing the end wraps naturally.
    Returns (start index, length) in the original indexing, or None when the
    sequence has no False (no boundary to anchor on) or no True at all.
    Ties keep the first run found.
    """
    n = len(flags)
    try:
        origin = next(i for i, f in enumerate(flags) if not f)
    except StopIteration:
        return None

    best_start, best_len = -1, 0
    run_start, run_len = -1, 0
    for k in range(origin, origin + n + 1):
        # the extra step lands back on flags[origin], which is False and closes any open run
        if flags[k % n]:
            if run_len == 0:
                run_start = k % n
            run_len += 1
        else:
            if run_len > best_len:
                best_start, best_len = run_start, run_len
            run_len = 0
    return None if best_len == 0 else (best_start, best_len)


def ring_nodes(node_ids: Sequence[int]) -> list[int]:
    """Node sequence of a ring without the closing duplicate and joint repeats."""
    out: list[int] = []
    for nid in node_ids:
        if not out or out[-1] != nid:
            out.append(nid)
    if len(out) > 1 and out[0] == out[-1]:
        out.pop()
    return out


def join_ways(ways: Sequence[Way]) -> list[int]:
    """Chain ways into one node sequence through their shared endpoints.

    Each step takes the first remaining way that touches the end of the chain,
    reversed when it is drawn towards it. A way touching nothing starts a new
    stretch appended as drawn.
    """
    pending = [list(w.node_ids) for w in ways if w.node_ids]
    chain: list[int] = pending.pop(0) if pending else []
    while pending:
        tail = chain[-1]
        for i, ids in enumerate(pending):
            if ids[0] == tail:
                chain.extend(pending.pop(i)[1:])
                break
            if ids[-1] == tail:
                chain.extend(reversed(pending.pop(i)[:-1]))
                break
        else:
            log.debug("way outline breaks after node %s", tail)
            chain.extend(pending.pop(0))
    return chain


class SpineResolver:
    """Reduces platforms to two-point spines, lazily and once per platform."""

    def __init__(self, snapshot: MapSnapshot, rail_index: RailProximityIndex):
        self.snapshot, self.rail_index = snapshot, rail_index
        self._cache: dict[tuple[PlatformID, str | None], PlatformSpine] = {}
        self._lock = threading.Lock()

    # ---------- helpers ----------

    def _nodes(self, eid: PlatformID, node_ids: Sequence[int]) -> list[Node]:
        nodes = []
        for nid in node_ids:
            node = self.snapshot.nodes.get(nid)
            if node is None:
                log.warning("platform %s references missing node %s", eid, nid)
                continue
            nodes.append(node)
        return nodes

    def _spine(self, eid: PlatformID, first: Node, last: Node) -> PlatformSpine:
        try:
            return PlatformSpine(first.point, last.point)
        except DegenerateSpine as exc:
            raise UnresolvedSpine(eid, str(exc)) from exc

    def member_ways(self, relation: Relation, *, exclude_roles: Sequence[str] = ()) -> list[Way]:
        out = []
        for m in relation.members:
            if m.type != "way" or m.role in exclude_roles:
                continue
            way = self.snapshot.ways.get(m.ref)
            if way is None:
                log.warning("relation %s references missing way %s", relation.id, m.ref)
                continue
            out.append(way)
        return out

    def platform_node_ids(self, eid: PlatformID) -> list[int]:
        """All node ids of a platform, in way order (relations: member order)."""
        if isinstance(eid, WayID):
            return list(self.snapshot.way(eid).node_ids)
        if isinstance(eid, RelationID):
            ids: list[int] = []
            for way in self.member_ways(self.snapshot.relation(eid)):
                ids.extend(way.node_ids)
            return ids
        raise TypeError(eid)

    # ---------- strategies ----------

    def from_rail_run(self, eid: PlatformID, node_ids: Sequence[int]) -> PlatformSpine:
        nodes = self._nodes(eid, ring_nodes(node_ids))
        if not nodes:
            raise UnresolvedSpine(eid, "platform has no nodes")
        closeness = [self.rail_index.is_close(n.point) for n in nodes]
        run = longest_cyclic_run(closeness)
        if run is None:
            log.warning("closeness for %s: %s", eid, closeness)
            reason = "every node is trackside" if all(closeness) else "no trackside nodes"
            raise UnresolvedSpine(eid, reason)
        start, length = run
        if length < 2:
            raise UnresolvedSpine(eid, "trackside run is a single node")
        return self._spine(eid, nodes[start], nodes[(start + length - 1) % len(nodes)])

    def from_endpoints(self, eid: PlatformID, node_ids: Sequence[int]) -> PlatformSpine:
        nodes = self._nodes(eid, node_ids)
        if len(nodes) < 2:
            raise UnresolvedSpine(eid, f"platform has {len(nodes)} nodes")
        return self._spine(eid, nodes[0], nodes[-1])

    def pick_edge(
        self, eid: RelationID, edges: list[Way], platform_number: str | None
    ) -> Way:
        if len(edges) == 1:
            return edges[0]
        if platform_number is not None:
            matches = [w for w in edges if w.tags.get("ref") == platform_number]
            if len(matches) == 1:
                return matches[0]
        raise AmbiguousPlatformEdge(eid, [w.id for w in edges], platform_number)

    # ---------- entry point ----------

    def compute(self, eid: PlatformID, platform_number: str | None = None) -> PlatformSpine:
        if isinstance(eid, WayID):
            way = self.snapshot.way(eid)
            if way.is_closed:
                return self.from_rail_run(eid, way.node_ids)
            return self.from_endpoints(eid, way.node_ids)
        if isinstance(eid, RelationID):
            relation = self.snapshot.relation(eid)
            ways = self.member_ways(relation)
            edges = [w for w in ways if w.tags.get("railway") == "platform_edge"]
            if edges:
                edge = self.pick_edge(eid, edges, platform_number)
                log.debug("platform %s uses platform_edge way %s", eid, edge.id)
                return self.from_endpoints(eid, edge.node_ids)
            # inner rings never face the track
            outer = self.member_ways(relation, exclude_roles=("inner",))
            return self.from_rail_run(eid, join_ways(outer))
        raise TypeError(f"{eid} cannot be a platform")

    def resolve(self, eid: PlatformID, platform_number: str | None = None) -> PlatformSpine:
        key = (eid, platform_number)
        with self._lock:
            cached = self._cache.get(key)
        if cached is not None:
            return cached
        spine = self.compute(eid, platform_number)
        with self._lock:
            return self._cache.setdefault(key, spine)
