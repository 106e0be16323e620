# runtime/registries.py
from collections.abc import Callable

from platform_router.app.protocols import PathSearch
from platform_router.config.models import SearchSequentialModel, SearchThreadedModel, SearchUnion
from platform_router.routing.shortest_path import SequentialSearch, ThreadedSearch

SearchFactory = Callable[[SearchUnion, dict], PathSearch]

_search_registry: dict[str, SearchFactory] = {}


# ------------------- Path search registries ---------------------------


def register_search(kind: str):
    def deco(fn: SearchFactory):
        _search_registry[kind] = fn
        return fn

    return deco


def make_search(cfg: SearchUnion, *, deps: dict | None = None) -> PathSearch:
    try:
        factory = _search_registry[cfg.kind]
    except KeyError:
        raise ValueError(f"Unknown search kind {cfg.kind!r}") from None
    return factory(cfg, deps or {})


@register_search("sequential")
def _make_sequential(cfg: SearchSequentialModel, deps):
    return SequentialSearch()


@register_search("threaded")
def _make_threaded(cfg: SearchThreadedModel, deps):
    return ThreadedSearch(workers=cfg.workers)
