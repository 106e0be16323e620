import pytest
from pydantic import ValidationError

from platform_router.config.models import (
    RAIL_KINDS,
    GraphModel,
    RailIndexModel,
    RouterModel,
    SearchSequentialModel,
    SearchThreadedModel,
)
from platform_router.runtime.registries import make_search, register_search
from platform_router.routing.shortest_path import SequentialSearch, ThreadedSearch


def test_defaults():
    m = RouterModel()
    assert m.graph.walkable_highways == ("footway", "steps")
    assert m.graph.assisted_factor == 0.5
    assert m.rail_index.pad_m == 3.0
    assert m.rail_index.railway_kinds == RAIL_KINDS
    assert isinstance(m.search, SearchSequentialModel)
    assert m.log.level == "INFO"


def test_search_union_discriminates_on_kind():
    m = RouterModel.model_validate({"search": {"kind": "threaded", "workers": 8}})
    assert isinstance(m.search, SearchThreadedModel)
    assert m.search.workers == 8
    with pytest.raises(ValidationError):
        RouterModel.model_validate({"search": {"kind": "astar"}})


@pytest.mark.parametrize(
    "data",
    [
        {"graph": {"assisted_factor": 0}},
        {"graph": {"progress_every": -1}},
        {"rail_index": {"pad_m": -0.5}},
        {"search": {"kind": "threaded", "workers": 0}},
        {"log": {"level": "LOUD"}},
    ],
)
def test_invalid_values_rejected(data):
    with pytest.raises(ValidationError):
        RouterModel.model_validate(data)


def test_unknown_fields_forbidden():
    with pytest.raises(ValidationError):
        RouterModel.model_validate({"graph": {"walkable": ["footway"]}})
    with pytest.raises(ValidationError):
        GraphModel(conveying="yes")


def test_zero_padding_allowed():
    assert RailIndexModel(pad_m=0).pad_m == 0


def test_make_search_builds_registered_engines():
    assert isinstance(make_search(SearchSequentialModel()), SequentialSearch)
    engine = make_search(SearchThreadedModel(workers=3))
    assert isinstance(engine, ThreadedSearch)
    assert engine.workers == 3


def test_make_search_unknown_kind():
    class Fake:
        kind = "nope"

    with pytest.raises(ValueError, match="nope"):
        make_search(Fake())


def test_register_search_adds_a_kind(monkeypatch):
    from platform_router.runtime import registries

    monkeypatch.setattr(registries, "_search_registry", dict(registries._search_registry))

    @register_search("fixed")
    def _make_fixed(cfg, deps):
        return deps["engine"]

    class Cfg:
        kind = "fixed"

    engine = SequentialSearch()
    assert make_search(Cfg(), deps={"engine": engine}) is engine
