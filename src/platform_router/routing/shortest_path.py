# platform_router/routing/shortest_path.py
import logging
import queue
import threading
from collections.abc import Iterable, Sequence

import networkx as nx

from platform_router.domain.entities.geography import PathResult
from platform_router.domain.entities.osm import MapSnapshot
from platform_router.domain.pedestrian_graph import PedestrianGraph
from platform_router.errors import Cancelled

log = logging.getLogger(__name__)

# (weight, (source order, target order), path)
Candidate = tuple[float, tuple[int, int], list[int]]


def egress_nodes(
    snapshot: MapSnapshot, graph: PedestrianGraph, node_ids: Iterable[int]
) -> list[int]:
    """Platform nodes a passenger can step on or off from: level-tagged or on a footway."""
    out: list[int] = []
    seen: set[int] = set()
    for nid in node_ids:
        if nid in seen:
            continue
        seen.add(nid)
        node = snapshot.nodes.get(nid)
        if node is None:
            continue
        if node.tags.get("level") or nid in graph.footway_nodes:
            out.append(nid)
    return out


def best_from_source(
    graph: PedestrianGraph, source: int, order: int, targets: Sequence[int]
) -> Candidate | None:
    """Lightest path from one source to any target (label-setting, non-negative weights)."""
    if not graph.has_node(source):
        log.warning("source node %s is not in the pedestrian graph", source)
        return None
    dist, paths = nx.single_source_dijkstra(graph.graph, source, weight="weight")
    best: Candidate | None = None
    for j, t in enumerate(targets):
        if t not in dist:
            continue
        cand = (dist[t], (order, j), paths[t])
        if best is None or cand[:2] < best[:2]:
            best = cand
    return best


def _lighter(a: Candidate | None, b: Candidate | None) -> Candidate | None:
    if a is None:
        return b
    if b is None:
        return a
    return b if b[:2] < a[:2] else a


def _as_result(best: Candidate | None) -> PathResult | None:
    return None if best is None else PathResult(nodes=list(best[2]), weight=float(best[0]))


class SequentialSearch:
    def search(
        self,
        graph: PedestrianGraph,
        sources: Sequence[int],
        targets: Sequence[int],
        *,
        cancel: threading.Event | None = None,
    ) -> PathResult | None:
        best: Candidate | None = None
        for i, s in enumerate(sources):
            if cancel is not None and cancel.is_set():
                raise Cancelled("search cancelled")
            best = _lighter(best, best_from_source(graph, s, i, targets))
        return _as_result(best)


class ThreadedSearch:
    """One Dijkstra per source on a worker pool; a single consumer keeps the minimum.

    Workers never touch shared result state: they put candidates on a queue and
    the calling thread reduces them.
    """

    _DONE = object()

    def __init__(self, workers: int = 4):
        self.workers = max(1, workers)

    def search(
        self,
        graph: PedestrianGraph,
        sources: Sequence[int],
        targets: Sequence[int],
        *,
        cancel: threading.Event | None = None,
    ) -> PathResult | None:
        jobs: queue.Queue = queue.Queue()
        for i, s in enumerate(sources):
            jobs.put((i, s))
        results: queue.Queue = queue.Queue()
        n_workers = min(self.workers, max(1, len(sources)))

        def _run():
            try:
                while True:
                    if cancel is not None and cancel.is_set():
                        return
                    try:
                        i, s = jobs.get_nowait()
                    except queue.Empty:
                        return
                    results.put(best_from_source(graph, s, i, targets))
            except Exception as exc:
                results.put(exc)
            finally:
                results.put(self._DONE)

        threads = [threading.Thread(target=_run, daemon=True) for _ in range(n_workers)]
        for t in threads:
            t.start()

        best: Candidate | None = None
        error: BaseException | None = None
        finished = 0
        while finished < n_workers:
            item = results.get()
            if item is self._DONE:
                finished += 1
            elif isinstance(item, BaseException):
                error = error or item
            else:
                best = _lighter(best, item)
        for t in threads:
            t.join()
        if error is not None:
            raise error
        if cancel is not None and cancel.is_set():
            raise Cancelled("search cancelled")
        return _as_result(best)
