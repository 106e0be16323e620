# io/router_logging.py
import json
import logging
import sys

from platform_router.app.hooks import NoopHooks
from platform_router.io.recorder import Recorder
from platform_router.io.result_events import RouteComputed


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
        }
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(extra)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def default_json_logger(name="platform_router", level="INFO"):
    logger = logging.getLogger(name)
    if not logger.handlers:
        h = logging.StreamHandler(sys.stderr)
        h.setFormatter(_JsonFormatter())
        logger.addHandler(h)
    logger.setLevel(level)
    return logger


class RouterLogging(NoopHooks):
    """
    One place to shape and emit structured logs for the build and routing phases.
    """

    def __init__(
        self,
        run_id: str = "local",
        level: str = "INFO",
        debug: bool = False,
        logger: logging.Logger | None = None,
        recorder: Recorder | None = None,
    ):
        self.run_id, self.debug = run_id, debug
        self.recorder = recorder
        self.log = logger or default_json_logger(level="DEBUG" if debug else level)

    # --------------- Helpers -----------------------------

    def _emit(self, level: str, msg: str, **extra):
        self.log.log(getattr(logging, level), msg, extra={"extra": {"run_id": self.run_id, **extra}})

    # --------------------------------------------------------

    # build lifecycle

    def build_start(self, *, nodes, ways, relations):
        self._emit("INFO", "build_start", nodes=nodes, ways=ways, relations=relations)

    def build_progress(self, *, stage: str, done: int, total: int):
        if self.debug:
            self._emit("DEBUG", "build_progress", stage=stage, done=done, total=total)

    def build_end(self, *, graph_nodes, graph_edges, corridors, wall_ms):
        self._emit(
            "INFO",
            "build_end",
            graph_nodes=graph_nodes,
            graph_edges=graph_edges,
            corridors=corridors,
            wall_ms=round(wall_ms, 1),
        )

    def phase(self, name: str, *, wall_ms: float, **kw):
        self._emit("INFO", name, wall_ms=round(wall_ms, 1), **kw)

    # routing lifecycle

    def route_start(self, selection):
        self._emit(
            "INFO",
            "route_start",
            source=str(selection.source.platform),
            source_service=selection.source.service,
            destination=str(selection.destination.platform),
            destination_service=selection.destination.service,
        )

    def route_end(self, result):
        self._emit(
            "INFO",
            "route_end",
            weight_m=round(result.path.weight, 2),
            hops=len(result.path.nodes),
            source_normalized=round(result.source_door.normalized, 4),
            destination_normalized=round(result.destination_door.normalized, 4),
        )

    def error(self, *, reason: str, exc: BaseException | None = None, **kw):
        self._emit("ERROR", "router_error", reason=reason, error=str(exc) if exc else None, **kw)

    # ------------- Result reporting --------------------------

    def record(self, ev):
        if self.recorder:
            self.recorder.emit(ev)
        if isinstance(ev, RouteComputed):
            self._emit("DEBUG", "route_recorded", weight_m=ev.weight_m)
