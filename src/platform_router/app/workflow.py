# app/workflow.py
import logging
import threading
import time
from dataclasses import dataclass

from platform_router.app.hooks import NoopHooks, RouterHooks
from platform_router.app.protocols import PathSearch
from platform_router.app.selection import PlatformChoice, Selection, SelectionHandoff
from platform_router.config.models import RouterModel
from platform_router.domain.entities.geography import DoorPosition, PathResult, PlatformSpine
from platform_router.domain.entities.osm import MapSnapshot, PlatformID, Relation, RelationID
from platform_router.domain.orientation import exit_nodes, orient_spine, project_door
from platform_router.domain.pedestrian_graph import PedestrianGraph, build_pedestrian_graph
from platform_router.domain.rail_index import RailProximityIndex
from platform_router.domain.services import PlatformRecord, platform_records, resolve_platform_number
from platform_router.domain.spines import SpineResolver
from platform_router.errors import (
    AmbiguousPlatformEdge,
    Cancelled,
    MissingPlatformNumber,
    RouterError,
    UnreachableTarget,
    UnresolvedSpine,
)
from platform_router.io.result_events import RouteComputed, RouteFailed
from platform_router.routing.shortest_path import SequentialSearch, egress_nodes

log = logging.getLogger(__name__)


@dataclass
class RoutingResult:
    selection: Selection
    path: PathResult
    coordinates: list[tuple[float, float]]  # (lon, lat) along the path
    source_spine: PlatformSpine
    destination_spine: PlatformSpine
    source_exit: int
    destination_exit: int
    source_door: DoorPosition
    destination_door: DoorPosition
    source_platform_number: str | None = None
    destination_platform_number: str | None = None


@dataclass
class _Leg:
    spine: PlatformSpine
    nodes: list[int]
    platform_number: str | None


def _failure_reason(exc: RouterError) -> str:
    if isinstance(exc, UnresolvedSpine):
        return "unresolved_spine"
    if isinstance(exc, AmbiguousPlatformEdge):
        return "ambiguous_edge"
    if isinstance(exc, UnreachableTarget):
        return "unreachable"
    if isinstance(exc, Cancelled):
        return "cancelled"
    return "other"


class RouterSession:
    """One routing workflow over a read-only snapshot.

    Graph and rail index are built once (optionally on a background thread) and
    shared read-only; everything a query computes stays inside `route`.
    """

    def __init__(
        self,
        snapshot: MapSnapshot,
        cfg: RouterModel | None = None,
        *,
        hooks: RouterHooks | None = None,
        search: PathSearch | None = None,
    ):
        self.snapshot = snapshot
        self.cfg = cfg or RouterModel()
        self.hooks = hooks or NoopHooks()
        self.search = search or SequentialSearch()
        self.cancel_event = threading.Event()
        self._ready = threading.Event()
        self._build_error: BaseException | None = None
        self._thread: threading.Thread | None = None
        self._graph: PedestrianGraph | None = None
        self._rail_index: RailProximityIndex | None = None
        self._spines: SpineResolver | None = None
        self._records: dict[PlatformID, PlatformRecord] | None = None

    # ---------------- build phase ----------------

    def build(self) -> None:
        t0 = time.perf_counter()
        snap = self.snapshot
        self.hooks.build_start(
            nodes=len(snap.nodes), ways=len(snap.ways), relations=len(snap.relations)
        )
        graph = build_pedestrian_graph(
            snap, self.cfg.graph, hooks=self.hooks, cancel=self.cancel_event
        )
        rail_index = RailProximityIndex.from_snapshot(
            snap, self.cfg.rail_index, hooks=self.hooks, cancel=self.cancel_event
        )
        self._graph, self._rail_index = graph, rail_index
        self._spines = SpineResolver(snap, rail_index)
        self.hooks.build_end(
            graph_nodes=graph.graph.number_of_nodes(),
            graph_edges=graph.graph.number_of_edges(),
            corridors=len(rail_index),
            wall_ms=(time.perf_counter() - t0) * 1000,
        )
        self._ready.set()

    def _build_in_background(self) -> None:
        try:
            self.build()
        except BaseException as exc:
            self._build_error = exc
            self.hooks.error(reason="build_failed", exc=exc)
            self._ready.set()

    def start(self) -> "RouterSession":
        if self._thread is None:
            self._thread = threading.Thread(
                target=self._build_in_background, name="router-build", daemon=True
            )
            self._thread.start()
        return self

    def wait_ready(self, timeout: float | None = None) -> None:
        if self._thread is None and not self._ready.is_set():
            self.build()
            return
        if not self._ready.wait(timeout):
            raise TimeoutError("graph build still running")
        if self._build_error is not None:
            raise self._build_error

    def cancel(self) -> None:
        self.cancel_event.set()

    @property
    def graph(self) -> PedestrianGraph:
        self.wait_ready()
        return self._graph

    @property
    def rail_index(self) -> RailProximityIndex:
        self.wait_ready()
        return self._rail_index

    @property
    def spines(self) -> SpineResolver:
        self.wait_ready()
        return self._spines

    # ---------------- presentation inputs ----------------

    def platforms(self) -> dict[PlatformID, PlatformRecord]:
        if self._records is None:
            t0 = time.perf_counter()
            self._records = platform_records(self.snapshot, self.cfg.search_term)
            self.hooks.phase(
                "matching", wall_ms=(time.perf_counter() - t0) * 1000, platforms=len(self._records)
            )
        return self._records

    # ---------------- routing phase ----------------

    def run(self, handoff: SelectionHandoff, timeout: float | None = None) -> RoutingResult:
        """Block until the host delivers a selection, then route it."""
        selection = handoff.get(timeout=timeout)
        return self.route(selection)

    def _platform_number(self, choice: PlatformChoice, service: Relation) -> str | None:
        try:
            return resolve_platform_number(self.snapshot, choice.platform, service)
        except MissingPlatformNumber as exc:
            log.warning("%s", exc)
            return None

    def _leg(self, choice: PlatformChoice) -> _Leg:
        service = self.snapshot.relation(RelationID(choice.service))
        record = self.platforms().get(choice.platform)
        if record is not None and all(s.id != service.id for s in record.services):
            log.warning("route %s does not serve platform %s", service.id, choice.platform)
        number = self._platform_number(choice, service)
        spine = self.spines.resolve(choice.platform, number)
        spine = orient_spine(self.snapshot, spine, choice.platform, service)
        node_ids = self.spines.platform_node_ids(choice.platform)
        return _Leg(spine, egress_nodes(self.snapshot, self.graph, node_ids), number)

    def route(self, selection: Selection) -> RoutingResult:
        self.wait_ready()
        self.hooks.route_start(selection)
        try:
            result = self._route(selection)
        except RouterError as exc:
            self.hooks.error(reason=_failure_reason(exc), exc=exc)
            self.hooks.record(
                RouteFailed(
                    run_id=self.cfg.run_id,
                    name="RouteFailed",
                    source_platform=str(selection.source.platform),
                    destination_platform=str(selection.destination.platform),
                    reason=_failure_reason(exc),
                    message=str(exc),
                )
            )
            raise
        self.hooks.route_end(result)
        self.hooks.record(
            RouteComputed(
                run_id=self.cfg.run_id,
                name="RouteComputed",
                source_platform=str(selection.source.platform),
                destination_platform=str(selection.destination.platform),
                weight_m=result.path.weight,
                path=result.coordinates,
                source_normalized=result.source_door.normalized,
                source_distance_m=result.source_door.distance_m,
                destination_normalized=result.destination_door.normalized,
                destination_distance_m=result.destination_door.distance_m,
            )
        )
        return result

    def _route(self, selection: Selection) -> RoutingResult:
        t0 = time.perf_counter()
        src = self._leg(selection.source)
        dst = self._leg(selection.destination)
        self.hooks.phase(
            "spines",
            wall_ms=(time.perf_counter() - t0) * 1000,
            sources=len(src.nodes),
            targets=len(dst.nodes),
        )

        t1 = time.perf_counter()
        path = self.search.search(self.graph, src.nodes, dst.nodes, cancel=self.cancel_event)
        if path is None:
            raise UnreachableTarget(src.nodes, dst.nodes)
        self.hooks.phase(
            "routing", wall_ms=(time.perf_counter() - t1) * 1000, weight_m=path.weight
        )

        t2 = time.perf_counter()
        source_exit, dest_exit = exit_nodes(self.snapshot, path.nodes)
        source_door = project_door(self.snapshot.point(source_exit), src.spine)
        dest_door = project_door(self.snapshot.point(dest_exit), dst.spine)
        self.hooks.phase("projection", wall_ms=(time.perf_counter() - t2) * 1000)

        coords = [tuple(self.snapshot.point(nid)) for nid in path.nodes]
        return RoutingResult(
            selection=selection,
            path=path,
            coordinates=coords,
            source_spine=src.spine,
            destination_spine=dst.spine,
            source_exit=source_exit,
            destination_exit=dest_exit,
            source_door=source_door,
            destination_door=dest_door,
            source_platform_number=src.platform_number,
            destination_platform_number=dst.platform_number,
        )
