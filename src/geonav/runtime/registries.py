# runtime/registries.py
from collections.abc import Callable
from typing import Any

from geonav.app.protocols import PositionSource
from geonav.config.models import (
    PositionSourceUnion,
    ReplaySourceModel,
    SimulatedWalkSourceModel,
)
from geonav.domain.entities.geography import GeodeticPoint
from geonav.io.position_sources import ReplayPositionSource, SimulatedWalkSource

PositionSourceFactory = Callable[[PositionSourceUnion, dict[str, Any]], PositionSource]

_position_source_registry: dict[str, PositionSourceFactory] = {}


# ------------------- Position sources ---------------------------


def register_position_source(kind: str):
    def deco(fn: PositionSourceFactory):
        _position_source_registry[kind] = fn
        return fn

    return deco


def make_position_source(cfg: PositionSourceUnion | None, *, deps: dict) -> PositionSource | None:
    """
    deps can include:
      - 'projector': CoordinateProjector
      - 'route': list[LocalPoint]          # instruction positions, in order
      - 'rng': numpy Generator             # noise stream
    """
    if cfg is None:
        return None
    try:
        factory = _position_source_registry[cfg.kind]
    except KeyError:
        raise ValueError(f"Unknown position source kind {cfg.kind!r}")
    return factory(cfg, deps)


@register_position_source("replay")
def _make_replay(cfg: ReplaySourceModel, deps):
    samples = [GeodeticPoint(lat, lon) for lat, lon in cfg.samples]
    return ReplayPositionSource(
        samples, period_s=cfg.period_s, not_ready_ticks=cfg.not_ready_ticks
    )


@register_position_source("simulated_walk")
def _make_simulated_walk(cfg: SimulatedWalkSourceModel, deps):
    return SimulatedWalkSource(
        deps["route"],
        projector=deps["projector"],
        rng=deps["rng"],
        speed_mps=cfg.speed_mps,
        jitter_m=cfg.jitter_m,
        bias_m=cfg.bias_m,
    )
