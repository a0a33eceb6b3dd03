# app/events.py
from dataclasses import dataclass

from geonav.sim.event import BaseEvent


# Tick loop
@dataclass(order=True)
class PositionTick(BaseEvent):
    n: int = 0  # tick counter since start


# Navigation (observability; no handlers required)
@dataclass(order=True)
class NavigationStarted(BaseEvent):
    start: tuple[float, float]
    instructions: int


@dataclass(order=True)
class InstructionAdvanced(BaseEvent):
    index: int
    direction: str
    text: str


@dataclass(order=True)
class GoalReached(BaseEvent):
    index: int


@dataclass(order=True)
class DriftCorrected(BaseEvent):
    drift: float
    offset: tuple[float, float]
