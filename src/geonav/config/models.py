import os
from math import isfinite
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class SimModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    epoch: tuple[int, int, int, int, int, int] = (2025, 1, 1, 0, 0, 0)
    seed: int = 0
    duration: int = 600  # seconds
    tick_s: float = Field(default=0.5, gt=0)  # position polling cadence


class LogModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False
    sample_every: int = 1


# ----------------- PROJECTION ---------------------


class ProjectionModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    reference_latitude: float = Field(default=-45.86438, ge=-90, le=90)
    reference_longitude: float = Field(default=170.51731, ge=-180, le=180)
    # meters per degree at the reference latitude (Dunedin, NZ by default)
    meters_per_degree_lat: float = 111139.0
    meters_per_degree_lon: float = 76600.0

    @field_validator("meters_per_degree_lat", "meters_per_degree_lon")
    @classmethod
    def _positive(cls, v: float) -> float:
        if not isfinite(v) or v <= 0:
            raise ValueError("meters per degree must be a positive finite number")
        return v


# ----------------- GRAPH ---------------------


class FeatureSourceModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    file: str
    must_exist: bool = True

    @field_validator("file")
    @classmethod
    def _expand(cls, v: str) -> str:
        return os.path.expandvars(os.path.expanduser(v))


class GraphModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    tolerance: float = Field(default=1e-5, gt=0)
    oneway_key: str = "oneway"
    oneway_values: list[str] = Field(default_factory=lambda: ["yes", "1"])
    poi_name_key: str = "name"
    sources: list[FeatureSourceModel] = Field(default_factory=list)  # lines, multilines, points


# ----------------- TRACKER / ROUTE ---------------------


class TrackerModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    instruction_distance_threshold: float = Field(default=5.0, gt=0)
    pass_through_distance: float = Field(default=1.2, gt=0)
    drift_threshold: float = Field(default=2.0, ge=0)
    correction_lerp: float = Field(default=0.05, gt=0, le=1.0)
    auto_correction: bool = True
    scale_factor: float = Field(default=1.0, gt=0)
    stop_at_goal: bool = True

    @model_validator(mode="after")
    def _check_zones(self):
        if self.pass_through_distance > self.instruction_distance_threshold:
            raise ValueError("pass_through_distance must not exceed instruction_distance_threshold")
        return self


class InstructionModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    position: tuple[float, float]  # (x, z) local meters
    direction: Literal["straight", "left", "right", "goal"] = "straight"
    text: str = ""

    @field_validator("direction", mode="before")
    @classmethod
    def _lower(cls, v):
        return v.lower() if isinstance(v, str) else v


def _prototype_route() -> list[InstructionModel]:
    return [
        InstructionModel(position=(332.1, -221.4), direction="straight", text="Started. Go straight."),
        InstructionModel(position=(3.0, 6.1), direction="left", text="Turn left."),
        InstructionModel(position=(-85.5, -60.5), direction="goal", text="You have arrived."),
    ]


# ----------------- POSITION SOURCES ---------------------


class ReplaySourceModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["replay"] = "replay"
    samples: list[tuple[float, float]]  # (lat, lon)
    period_s: float = Field(default=0.5, gt=0)
    not_ready_ticks: int = Field(default=0, ge=0)


class SimulatedWalkSourceModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["simulated_walk"] = "simulated_walk"
    speed_mps: float = Field(default=1.4, gt=0)
    jitter_m: float = Field(default=0.0, ge=0)
    bias_m: float = 0.0  # constant lateral offset, left of travel is positive


PositionSourceUnion = Annotated[
    ReplaySourceModel | SimulatedWalkSourceModel,
    Field(discriminator="kind"),
]


# ------------------------------------------------------------------


class ScenarioModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: str
    run_id: str = "local"
    sim: SimModel = SimModel()
    log: LogModel = LogModel()
    projection: ProjectionModel = ProjectionModel()
    graph: GraphModel = GraphModel()
    tracker: TrackerModel = TrackerModel()
    route: list[InstructionModel] = Field(default_factory=_prototype_route)
    position_source: PositionSourceUnion | None = None
