from dataclasses import dataclass
from enum import Enum

from geonav.domain.entities.geography import ORIGIN, LocalPoint


class TurnDirection(Enum):
    STRAIGHT = "straight"
    LEFT = "left"
    RIGHT = "right"
    GOAL = "goal"


@dataclass(frozen=True)
class NavigationInstruction:
    position: LocalPoint
    direction: TurnDirection
    text: str = ""


@dataclass
class TrackedFrame:
    """
    The frame the user is rendered in. `origin` is where the frame sits in
    local space, `observed` is the user's pose inside it; drift correction
    moves the origin, never the observation.
    """

    origin: LocalPoint = ORIGIN
    observed: LocalPoint = ORIGIN

    @property
    def position(self) -> LocalPoint:
        return (self.origin + self.observed).planar()

    def shift(self, offset: LocalPoint) -> None:
        self.origin = self.origin + offset.planar()


@dataclass(frozen=True)
class RouteProgress:
    current_instruction_index: int
    tracked_position: LocalPoint
    arrived: bool = False
    instruction: NavigationInstruction | None = None


@dataclass(frozen=True)
class TickResult:
    advanced: bool = False
    arrived: bool = False
    drift: float | None = None
    correction: LocalPoint | None = None
