# tests/io/test_position_sources.py
import numpy as np
import pytest

from geonav.domain.entities.geography import GeodeticPoint, LocalPoint
from geonav.domain.projection import Projector
from geonav.io.position_sources import (
    PositionStatus,
    ReplayPositionSource,
    SimulatedWalkSource,
)
from geonav.sim.rng import RNGRegistry

REF = GeodeticPoint(-45.86438, 170.51731)


@pytest.fixture
def projector() -> Projector:
    return Projector(REF)


def test_replay_warms_up_plays_and_stops():
    a, b = GeodeticPoint(1.0, 2.0), GeodeticPoint(3.0, 4.0)
    src = ReplayPositionSource([a, b], period_s=0.5, not_ready_ticks=2)
    warm = src.latest(0.6)
    assert warm.status is PositionStatus.INITIALIZING and not warm.usable
    assert src.latest(1.0).geodetic == a and src.latest(1.0).usable
    assert src.latest(1.7).geodetic == b
    done = src.latest(5.0)
    assert done.status is PositionStatus.STOPPED and not done.usable


def test_empty_replay_has_no_sample():
    assert ReplayPositionSource([]).latest(0.0) is None


def test_simulated_walk_follows_path(projector):
    path = [LocalPoint(0.0, 0.0), LocalPoint(0.0, 10.0), LocalPoint(10.0, 10.0)]
    src = SimulatedWalkSource(path, projector=projector, rng=np.random.default_rng(0), speed_mps=2.0)
    start = projector.to_local(src.latest(0.0).geodetic)
    assert abs(start.x) < 1e-6 and abs(start.z) < 1e-6
    mid = projector.to_local(src.latest(7.5).geodetic)  # 15 m in: halfway down the 2nd leg
    assert mid.x == pytest.approx(5.0, abs=1e-6) and mid.z == pytest.approx(10.0, abs=1e-6)
    end = projector.to_local(src.latest(100.0).geodetic)
    assert end.x == pytest.approx(10.0, abs=1e-6) and end.z == pytest.approx(10.0, abs=1e-6)


def test_simulated_walk_bias_is_left_of_travel(projector):
    path = [LocalPoint(0.0, 0.0), LocalPoint(0.0, 10.0)]  # heading north
    src = SimulatedWalkSource(
        path, projector=projector, rng=np.random.default_rng(0), speed_mps=1.0, bias_m=1.5
    )
    p = projector.to_local(src.latest(4.0).geodetic)
    assert p.x == pytest.approx(-1.5, abs=1e-6)  # west
    assert p.z == pytest.approx(4.0, abs=1e-6)


def test_simulated_walk_jitter_is_seeded(projector):
    path = [LocalPoint(0.0, 0.0), LocalPoint(50.0, 0.0)]

    def draws(seed):
        rng = RNGRegistry(seed, scenario="walk").stream("sensor_noise")
        src = SimulatedWalkSource(path, projector=projector, rng=rng, jitter_m=0.8)
        return [src.latest(t * 0.5).geodetic for t in range(5)]

    assert draws(7) == draws(7)
    assert draws(7) != draws(8)
