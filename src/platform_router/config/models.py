from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

RAIL_KINDS = ("rail", "light_rail", "tram", "subway", "narrow_gauge", "monorail")


class LogModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False


# ----------------- GRAPH ---------------------


class GraphModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    walkable_highways: tuple[str, ...] = ("footway", "steps")
    footway_highway: str = "footway"
    assisted_factor: float = 0.5  # weight multiplier for escalators / moving walkways
    progress_every: int = 10_000  # ways between progress reports

    @field_validator("assisted_factor", "progress_every")
    @classmethod
    def _positive(cls, v, info: ValidationInfo):
        if v <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return v


class RailIndexModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    pad_m: float = 3.0
    railway_kinds: tuple[str, ...] = RAIL_KINDS

    @field_validator("pad_m")
    @classmethod
    def _nonneg(cls, v: float) -> float:
        if v < 0:
            raise ValueError("pad_m must be >= 0")
        return v


# ----------------- SEARCH ENGINES ---------------------


class SearchSequentialModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["sequential"] = "sequential"


class SearchThreadedModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["threaded"] = "threaded"
    workers: int = 4

    @field_validator("workers")
    @classmethod
    def _at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError("workers must be >= 1")
        return v


SearchUnion = Annotated[
    SearchSequentialModel | SearchThreadedModel,
    Field(discriminator="kind"),
]


# ------------------------------------------------------------------


class RouterModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: str = "platform-router"
    run_id: str = "local"
    log: LogModel = LogModel()
    graph: GraphModel = GraphModel()
    rail_index: RailIndexModel = RailIndexModel()
    search: SearchUnion = Field(default_factory=SearchSequentialModel)
    search_term: str = ""
