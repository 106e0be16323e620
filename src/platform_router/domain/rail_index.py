# platform_router/domain/rail_index.py
import logging
import threading
from collections.abc import Iterable

import numpy as np

from platform_router.app.hooks import NoopHooks, RouterHooks
from platform_router.config.models import RailIndexModel
from platform_router.domain.entities.geography import Point, Ring
from platform_router.domain.entities.osm import MapSnapshot
from platform_router.domain.geometry import ring_is_rectangle, rotated_bound_with_pad
from platform_router.errors import Cancelled

log = logging.getLogger(__name__)


class RailProximityIndex:
    """Immutable set of rail corridors ("gates") around running rail segments.

    Corridors are stored as a read-only (n, 5, 2) array of lon/lat corners so
    a point can be tested against every corridor at once.
    """

    def __init__(self, corridors: Iterable[Ring]):
        rings = []
        for ring in corridors:
            if not ring_is_rectangle(ring):
                log.warning("dropping malformed corridor with %d points", len(ring))
                continue
            rings.append([(p.lon, p.lat) for p in ring])
        arr = np.asarray(rings, dtype=float).reshape(-1, 5, 2)
        arr.setflags(write=False)
        self._rings = arr
        # bounding boxes for a cheap prefilter
        lo, hi = arr.min(axis=1), arr.max(axis=1)
        lo.setflags(write=False)
        hi.setflags(write=False)
        self._lo, self._hi = lo, hi

    def __len__(self) -> int:
        return len(self._rings)

    @property
    def corridors(self) -> tuple[Ring, ...]:
        return tuple(tuple(Point(float(x), float(y)) for x, y in r) for r in self._rings)

    def is_close(self, p: Point) -> bool:
        if not len(self._rings):
            return False
        xy = np.array([p.lon, p.lat])
        cand = np.all((self._lo <= xy) & (xy <= self._hi), axis=1)
        if not cand.any():
            return False
        rings = self._rings[cand]
        a, b = rings[:, :4, :], rings[:, 1:, :]
        edge = b - a
        to_p = xy - a
        cross = edge[..., 0] * to_p[..., 1] - edge[..., 1] * to_p[..., 0]
        return bool(np.any(np.all(cross <= 0, axis=1)))

    @classmethod
    def from_snapshot(
        cls,
        snapshot: MapSnapshot,
        cfg: RailIndexModel | None = None,
        *,
        hooks: RouterHooks | None = None,
        cancel: threading.Event | None = None,
    ) -> "RailProximityIndex":
        cfg = cfg or RailIndexModel()
        hooks = hooks or NoopHooks()
        kinds = set(cfg.railway_kinds)
        corridors: list[Ring] = []
        for way in snapshot.ways.values():
            if cancel is not None and cancel.is_set():
                raise Cancelled("rail index build cancelled")
            if way.tags.get("railway") not in kinds:
                continue
            for u, v in zip(way.node_ids, way.node_ids[1:]):
                nu, nv = snapshot.nodes.get(u), snapshot.nodes.get(v)
                if nu is None or nv is None or nu.point == nv.point:
                    continue
                corridors.append(rotated_bound_with_pad(nu.point, nv.point, cfg.pad_m))
        hooks.build_progress(stage="rail_index", done=len(corridors), total=len(corridors))
        return cls(corridors)
