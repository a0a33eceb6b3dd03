# tests/app/test_session.py
import pytest

from geonav.app.events import GoalReached, InstructionAdvanced, NavigationStarted, PositionTick
from geonav.app.session import NavigationSession
from geonav.domain.entities.geography import GeodeticPoint, LocalPoint
from geonav.domain.entities.route import NavigationInstruction, TurnDirection
from geonav.domain.projection import Projector
from geonav.domain.tracker import RouteTracker
from geonav.errors import ConfigurationError
from geonav.io.position_sources import PositionSample, PositionStatus, ReplayPositionSource

PROJ = Projector(GeodeticPoint(-45.86438, 170.51731))


def tracker() -> RouteTracker:
    return RouteTracker(
        [
            NavigationInstruction(LocalPoint(100.0, 100.0), TurnDirection.STRAIGHT, "Go straight."),
            NavigationInstruction(LocalPoint(100.0, 110.0), TurnDirection.GOAL, "Arrived."),
        ]
    )


def fixes(*pts: tuple[float, float]) -> list[GeodeticPoint]:
    return [PROJ.to_geodetic(LocalPoint(x, z)) for x, z in pts]


class ManualSource:
    """Reports whatever local fix the test last set."""

    def __init__(self):
        self.fix, self.ready = LocalPoint(0.0, 0.0), True

    def latest(self, t):
        g = PROJ.to_geodetic(self.fix)
        status = PositionStatus.RUNNING if self.ready else PositionStatus.INITIALIZING
        return PositionSample(g.latitude, g.longitude, t, ready=self.ready, status=status)


def test_requires_source_and_projector():
    with pytest.raises(ConfigurationError):
        NavigationSession(tracker=tracker(), source=None, projector=PROJ)
    with pytest.raises(ConfigurationError):
        NavigationSession(tracker=tracker(), source=ReplayPositionSource([]), projector=None)


def test_start_emits_started_and_first_tick():
    s = NavigationSession(tracker=tracker(), source=ReplayPositionSource([]), projector=PROJ)
    started, tick = s.start(0.0)
    assert isinstance(started, NavigationStarted)
    assert started.start == (100.0, 100.0) and started.instructions == 2
    assert tick == PositionTick(t=0.0, n=0)


def test_fixes_are_relative_to_first_usable_fix():
    # the user is actually 3 km away; only displacement matters
    src = ReplayPositionSource(fixes((3000.0, 0.0), (3000.0, 5.0), (3000.0, 9.5)), period_s=1.0)
    s = NavigationSession(tracker=tracker(), source=src, projector=PROJ, tick_s=1.0)
    s.start(0.0)

    out = s.on_tick(PositionTick(t=0.0, n=0))
    assert s.progress.current_instruction_index == 1
    assert [type(e) for e in out] == [InstructionAdvanced, PositionTick]
    assert out[0].index == 1 and out[0].direction == "goal"

    s.on_tick(PositionTick(t=1.0, n=1))
    assert s.progress.tracked_position.z == pytest.approx(105.0, abs=1e-6)

    out = s.on_tick(PositionTick(t=2.0, n=2))
    assert s.progress.arrived
    assert [type(e) for e in out] == [GoalReached]


def test_samples_not_ready_keep_start_position():
    src = ReplayPositionSource(fixes((50.0, 50.0)), period_s=0.5, not_ready_ticks=4)
    s = NavigationSession(tracker=tracker(), source=src, projector=PROJ)
    s.start(0.0)
    for n in range(4):
        out = s.on_tick(PositionTick(t=n * 0.5, n=n))
        assert out[-1] == PositionTick(t=(n + 1) * 0.5, n=n + 1)
    p = s.progress
    assert (p.tracked_position.x, p.tracked_position.z) == (100.0, 100.0)


def test_keeps_ticking_after_goal_when_configured():
    src = ReplayPositionSource(fixes((0.0, 0.0), (0.0, 10.0)), period_s=1.0)
    s = NavigationSession(tracker=tracker(), source=src, projector=PROJ, tick_s=1.0, stop_at_goal=False)
    s.start(0.0)
    s.on_tick(PositionTick(t=0.0, n=0))
    out = s.on_tick(PositionTick(t=1.0, n=1))
    assert isinstance(out[0], GoalReached)
    assert out[-1] == PositionTick(t=2.0, n=2)


def test_restart_puts_user_back_on_first_instruction():
    src = ManualSource()
    s = NavigationSession(tracker=tracker(), source=src, projector=PROJ)
    s.start(0.0)
    s.on_tick(PositionTick(t=0.0, n=0))
    src.fix = LocalPoint(0.0, 30.0)
    s.on_tick(PositionTick(t=0.5, n=1))

    s.start(1.0)
    s.on_tick(PositionTick(t=1.0, n=0))  # user has not moved since the restart
    p = s.progress
    assert p.tracked_position.x == pytest.approx(100.0, abs=1e-6)
    assert p.tracked_position.z == pytest.approx(100.0, abs=1e-6)


def test_dropout_mid_run_reuses_last_fix_and_keeps_anchor():
    src = ManualSource()
    s = NavigationSession(tracker=tracker(), source=src, projector=PROJ)
    s.start(0.0)
    s.on_tick(PositionTick(t=0.0, n=0))
    src.fix = LocalPoint(0.0, 5.0)
    s.on_tick(PositionTick(t=0.5, n=1))
    assert s.progress.tracked_position.z == pytest.approx(105.0, abs=1e-6)

    src.fix, src.ready = LocalPoint(0.0, 50.0), False
    s.on_tick(PositionTick(t=1.0, n=2))
    assert s.progress.tracked_position.z == pytest.approx(105.0, abs=1e-6)

    src.fix, src.ready = LocalPoint(0.0, 7.0), True
    s.on_tick(PositionTick(t=1.5, n=3))
    assert s.progress.tracked_position.z == pytest.approx(107.0, abs=1e-6)
    assert s.progress.current_instruction_index == 1
