# platform_router/app/build.py
from collections.abc import Mapping

from platform_router.app.hooks import NoopHooks
from platform_router.app.workflow import RouterSession
from platform_router.config.models import RouterModel
from platform_router.domain.entities.osm import MapSnapshot
from platform_router.io.recorder import JsonlSink, Recorder, Sink
from platform_router.io.router_logging import RouterLogging
from platform_router.runtime.registries import make_search


def build(
    snapshot: MapSnapshot,
    cfg: RouterModel | Mapping | None = None,
    *,
    use_logging: bool = True,
    sinks: list[Sink] | None = None,
) -> RouterSession:
    # 0) Validate config
    if cfg is None:
        model = RouterModel()
    else:
        model = cfg if isinstance(cfg, RouterModel) else RouterModel.model_validate(cfg)

    # 1) Recorder for results
    recorder = Recorder(*(sinks if sinks is not None else [JsonlSink()]))

    # 2) Hooks
    hooks = (
        RouterLogging(
            run_id=model.run_id,
            recorder=recorder,
            level=model.log.level,
            debug=model.log.debug,
        )
        if use_logging
        else NoopHooks()
    )

    # 3) Search engine
    search = make_search(model.search)

    return RouterSession(snapshot, model, hooks=hooks, search=search)
