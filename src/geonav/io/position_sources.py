# io/position_sources.py
import math
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

import numpy as np

from geonav.app.protocols import CoordinateProjector, PositionSource
from geonav.domain.entities.geography import GeodeticPoint, LocalPoint


class PositionStatus(Enum):
    INITIALIZING = "initializing"
    RUNNING = "running"
    STOPPED = "stopped"
    FAILED = "failed"


@dataclass(frozen=True)
class PositionSample:
    latitude: float
    longitude: float
    t: float
    ready: bool = True
    status: PositionStatus = PositionStatus.RUNNING

    @property
    def usable(self) -> bool:
        return self.ready and self.status is PositionStatus.RUNNING

    @property
    def geodetic(self) -> GeodeticPoint:
        return GeodeticPoint(self.latitude, self.longitude)


class ReplayPositionSource(PositionSource):
    """Plays back recorded fixes, one per period; stops on the last one."""

    def __init__(
        self, samples: Sequence[GeodeticPoint], *, period_s: float = 0.5, not_ready_ticks: int = 0
    ):
        self.samples, self.period_s, self.not_ready_ticks = list(samples), period_s, not_ready_ticks

    def latest(self, t: float) -> PositionSample | None:
        if not self.samples:
            return None
        k = int(t // self.period_s)
        if k < self.not_ready_ticks:
            g = self.samples[0]
            return PositionSample(
                g.latitude, g.longitude, t, ready=False, status=PositionStatus.INITIALIZING
            )
        i = k - self.not_ready_ticks
        if i >= len(self.samples):
            g = self.samples[-1]
            return PositionSample(
                g.latitude, g.longitude, t, ready=False, status=PositionStatus.STOPPED
            )
        g = self.samples[i]
        return PositionSample(g.latitude, g.longitude, t)


class SimulatedWalkSource(PositionSource):
    """
    Walks a polyline at constant speed and reports geodetic fixes with a
    constant lateral bias plus Gaussian jitter (meters). Stands in for a
    GPS receiver in scenario runs.
    """

    def __init__(
        self,
        path: Sequence[LocalPoint],
        *,
        projector: CoordinateProjector,
        rng: np.random.Generator,
        speed_mps: float = 1.4,
        jitter_m: float = 0.0,
        bias_m: float = 0.0,
    ):
        self.path = [p.planar() for p in path]
        self.projector, self.rng = projector, rng
        self.speed_mps, self.jitter_m, self.bias_m = speed_mps, jitter_m, bias_m
        self._legs = [math.hypot(b.x - a.x, b.z - a.z) for a, b in zip(self.path, self.path[1:])]
        self.total_length_m = sum(self._legs)

    def _walk(self, s: float) -> tuple[LocalPoint, tuple[float, float]]:
        """Point at arc length s and the unit direction of its leg."""
        for (a, b), L in zip(zip(self.path, self.path[1:]), self._legs):
            if L <= 0:
                continue
            if s <= L:
                f = s / L
                ux, uz = (b.x - a.x) / L, (b.z - a.z) / L
                return LocalPoint(a.x + f * (b.x - a.x), a.z + f * (b.z - a.z)), (ux, uz)
            s -= L
        last = self.path[-1]
        a, b = self.path[-2], last
        L = self._legs[-1] or 1.0
        return last, ((b.x - a.x) / L, (b.z - a.z) / L)

    def latest(self, t: float) -> PositionSample:
        if len(self.path) < 2:
            g = self.projector.to_geodetic(self.path[0])
            return PositionSample(g.latitude, g.longitude, t)
        s = min(self.speed_mps * t, self.total_length_m)
        p, (ux, uz) = self._walk(s)
        # left normal of travel direction in the (x east, z north) plane
        nx, nz = -uz, ux
        jx, jz = self.rng.normal(0.0, self.jitter_m, size=2) if self.jitter_m > 0 else (0.0, 0.0)
        q = LocalPoint(p.x + self.bias_m * nx + jx, p.z + self.bias_m * nz + jz)
        g = self.projector.to_geodetic(q)
        return PositionSample(g.latitude, g.longitude, t)
