# platform_router/runtime/resources.py
import json
import os
import pickle
from functools import lru_cache

from platform_router.domain.entities.osm import MapSnapshot
from platform_router.io.snapshot import snapshot_from_dict


@lru_cache(maxsize=8)
def load_snapshot(file: str, fmt: str = "json") -> MapSnapshot:
    file = os.path.expandvars(os.path.expanduser(file))
    if fmt == "json":
        with open(file, encoding="utf-8") as f:
            return snapshot_from_dict(json.load(f))
    if fmt == "pickle":
        with open(file, "rb") as f:
            snap = pickle.load(f)
        if not isinstance(snap, MapSnapshot):
            raise TypeError(f"{file} does not hold a MapSnapshot")
        return snap
    raise ValueError(f"Unsupported snapshot fmt {fmt!r}")
