# geonav/app/wiring.py
from geonav.app.events import PositionTick
from geonav.app.session import NavigationSession
from geonav.sim.kernel import Kernel


def wire(kernel: Kernel, *, session: NavigationSession) -> None:
    k = kernel

    # position polling; NavigationStarted/InstructionAdvanced/GoalReached/DriftCorrected
    # are dispatched without handlers so the logging hooks see them
    k.on(PositionTick, session.on_tick)
