# geonav/domain/tracker.py
import logging
import math
from collections.abc import Sequence

from geonav.domain.entities.geography import LocalPoint
from geonav.domain.entities.route import (
    NavigationInstruction,
    RouteProgress,
    TickResult,
    TrackedFrame,
)
from geonav.errors import ConfigurationError

log = logging.getLogger(__name__)

DEGENERATE_SQ = 1e-12


def planar_distance(a: LocalPoint, b: LocalPoint) -> float:
    return math.hypot(b.x - a.x, b.z - a.z)


def nearest_point_on_segment(a: LocalPoint, b: LocalPoint, p: LocalPoint) -> LocalPoint:
    """Closest point to p on segment ab in the horizontal plane; a if ab has no length."""
    abx, abz = b.x - a.x, b.z - a.z
    ab_sq = abx * abx + abz * abz
    if ab_sq < DEGENERATE_SQ:
        return LocalPoint(a.x, a.z)
    t = ((p.x - a.x) * abx + (p.z - a.z) * abz) / ab_sq
    t = min(1.0, max(0.0, t))
    return LocalPoint(a.x + t * abx, a.z + t * abz)


class RouteTracker:
    """
    Follows a fixed instruction list.

    Every tick: consume the current instruction once the tracked position is
    inside the pass-through radius, then pull the tracked frame a fraction
    of the way back onto the active segment (previous -> current
    instruction) when it has drifted past `drift_threshold`. Distances ignore
    height.

    The cursor stops at the last instruction; passing through that one marks
    the session as arrived.
    """

    def __init__(
        self,
        instructions: Sequence[NavigationInstruction],
        *,
        instruction_distance_threshold: float = 5.0,
        pass_through_distance: float = 1.2,
        drift_threshold: float = 2.0,
        correction_lerp: float = 0.05,
        auto_correction: bool = True,
        scale_factor: float = 1.0,
        frame: TrackedFrame | None = None,
    ):
        if instructions is None or len(instructions) < 2:
            raise ConfigurationError("navigation data is insufficient: need at least two instructions")
        if not 0.0 < correction_lerp <= 1.0:
            raise ConfigurationError(f"correction_lerp must be in (0, 1], got {correction_lerp}")
        self.instructions = tuple(instructions)
        self.instruction_distance_threshold = instruction_distance_threshold
        self.pass_through_distance = pass_through_distance
        self.drift_threshold = drift_threshold
        self.correction_lerp = correction_lerp
        self.auto_correction = auto_correction
        self.scale_factor = scale_factor
        self.frame = frame or TrackedFrame()
        self._index = 0
        self._arrived = False

    @classmethod
    def from_config(cls, cfg, instructions: Sequence[NavigationInstruction]) -> "RouteTracker":
        return cls(
            instructions,
            instruction_distance_threshold=cfg.instruction_distance_threshold,
            pass_through_distance=cfg.pass_through_distance,
            drift_threshold=cfg.drift_threshold,
            correction_lerp=cfg.correction_lerp,
            auto_correction=cfg.auto_correction,
            scale_factor=cfg.scale_factor,
        )

    # ---------------- state ----------------

    @property
    def index(self) -> int:
        return self._index

    @property
    def arrived(self) -> bool:
        return self._arrived

    @property
    def last_index(self) -> int:
        return len(self.instructions) - 1

    def progress(self) -> RouteProgress:
        return RouteProgress(
            current_instruction_index=self._index,
            tracked_position=self.frame.position,
            arrived=self._arrived,
            instruction=self.instructions[self._index],
        )

    # ---------------- operations ----------------

    def start_navigation(self, destination=None) -> RouteProgress:
        """
        Reset the cursor and re-anchor the frame so the user stands on the
        first instruction. `destination` is accepted for callers that pass
        one; the route itself is fixed.
        """
        self._index = 0
        self._arrived = False
        start = self.instructions[0].position.planar()
        self.frame.origin = start - self.frame.observed.planar()
        log.info(
            "navigation_started",
            extra={"extra": {"start": [start.x, start.z], "instructions": len(self.instructions)}},
        )
        return self.progress()

    def tick(self, observed: LocalPoint | None = None) -> TickResult:
        if observed is not None:
            self.frame.observed = observed
        advanced, arrived = self._advance(self.frame.position)
        drift = correction = None
        if self.auto_correction:
            drift, correction = self._correct(self.frame.position)
        return TickResult(advanced=advanced, arrived=arrived, drift=drift, correction=correction)

    # ---------------- helpers ----------------

    def _advance(self, pos: LocalPoint) -> tuple[bool, bool]:
        if self._arrived:
            return False, False
        target = self.instructions[self._index].position.planar()
        d = planar_distance(pos, target)
        if d > self.instruction_distance_threshold or d >= self.pass_through_distance:
            return False, False
        if self._index < self.last_index:
            self._index += 1
            log.info(
                "instruction_passed",
                extra={"extra": {"index": self._index, "distance": round(d, 3)}},
            )
            return True, False
        self._arrived = True
        log.info("goal_reached", extra={"extra": {"index": self._index}})
        return False, True

    def _correct(self, pos: LocalPoint) -> tuple[float | None, LocalPoint | None]:
        if self._index <= 0:
            return None, None
        a = self.instructions[self._index - 1].position.planar().scaled(self.scale_factor)
        b = self.instructions[self._index].position.planar().scaled(self.scale_factor)
        nearest = nearest_point_on_segment(a, b, pos)
        drift = planar_distance(pos, nearest)
        if drift <= self.drift_threshold:
            return drift, None
        offset = (nearest - pos).scaled(self.correction_lerp)
        self.frame.shift(offset)
        log.info(
            "drift_corrected",
            extra={"extra": {"drift": round(drift, 3), "offset": [offset.x, offset.z]}},
        )
        return drift, offset
