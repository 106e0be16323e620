# app/hooks.py
from typing import Protocol


class RouterHooks(Protocol):
    def build_start(self, *, nodes, ways, relations): ...
    def build_progress(self, *, stage: str, done: int, total: int): ...
    def build_end(self, *, graph_nodes, graph_edges, corridors, wall_ms): ...
    def phase(self, name: str, *, wall_ms: float, **kw): ...
    def route_start(self, selection): ...
    def route_end(self, result): ...
    def error(self, *, reason: str, exc: BaseException | None = None, **kw): ...
    def record(self, ev): ...


class NoopHooks:
    def build_start(self, **_):
        pass

    def build_progress(self, **_):
        pass

    def build_end(self, **_):
        pass

    def phase(self, *_, **__):
        pass

    def route_start(self, *_, **__):
        pass

    def route_end(self, *_, **__):
        pass

    def error(self, *_, **__):
        pass

    def record(self, *_, **__):
        pass
