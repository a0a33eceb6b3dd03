# app/session.py
from geonav.app.events import (
    DriftCorrected,
    GoalReached,
    InstructionAdvanced,
    NavigationStarted,
    PositionTick,
)
from geonav.app.protocols import CoordinateProjector, PositionSource
from geonav.domain.entities.geography import ORIGIN, LocalPoint
from geonav.domain.entities.route import RouteProgress
from geonav.domain.tracker import RouteTracker
from geonav.errors import ConfigurationError
from geonav.sim.event import BaseEvent


class NavigationSession:
    """
    Glue between a position source and the tracker, driven by PositionTick.

    Fixes are fed to the tracker as displacement from the first usable fix
    after start, so the user begins on the first instruction. Samples that
    are not ready are treated as missing: the tracker still ticks on the
    last observation.
    """

    def __init__(
        self,
        *,
        tracker: RouteTracker,
        source: PositionSource | None,
        projector: CoordinateProjector | None,
        tick_s: float = 0.5,
        stop_at_goal: bool = True,
    ):
        if source is None:
            raise ConfigurationError("no position source configured")
        if projector is None:
            raise ConfigurationError("no coordinate projector configured")
        if tick_s <= 0:
            raise ConfigurationError(f"tick_s must be > 0, got {tick_s}")
        self.tracker, self.source, self.projector = tracker, source, projector
        self.tick_s, self.stop_at_goal = tick_s, stop_at_goal
        self._anchor: LocalPoint | None = None
        self.ticks = 0

    @property
    def progress(self) -> RouteProgress:
        return self.tracker.progress()

    def start(self, t: float = 0.0, destination=None) -> list[BaseEvent]:
        self._anchor = None
        self.ticks = 0
        # the next usable fix becomes the new anchor, so the old displacement is void
        self.tracker.frame.observed = ORIGIN
        p = self.tracker.start_navigation(destination)
        return [
            NavigationStarted(
                t=t,
                start=(p.tracked_position.x, p.tracked_position.z),
                instructions=len(self.tracker.instructions),
            ),
            PositionTick(t=t, n=0),
        ]

    def _observe(self, t: float) -> LocalPoint | None:
        sample = self.source.latest(t)
        if sample is None or not sample.usable:
            return None
        local = self.projector.to_local(sample.geodetic)
        if self._anchor is None:
            self._anchor = local
        return local - self._anchor

    def on_tick(self, ev: PositionTick) -> list[BaseEvent]:
        self.ticks += 1
        res = self.tracker.tick(self._observe(ev.t))
        out: list[BaseEvent] = []
        if res.advanced:
            i = self.tracker.index
            instr = self.tracker.instructions[i]
            out.append(
                InstructionAdvanced(t=ev.t, index=i, direction=instr.direction.value, text=instr.text)
            )
        if res.arrived:
            out.append(GoalReached(t=ev.t, index=self.tracker.index))
        if res.correction is not None:
            out.append(
                DriftCorrected(
                    t=ev.t, drift=res.drift, offset=(res.correction.x, res.correction.z)
                )
            )
        if not (self.stop_at_goal and self.tracker.arrived):
            out.append(PositionTick(t=ev.t + self.tick_s, n=ev.n + 1))
        return out
