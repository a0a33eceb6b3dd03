# sim/hooks.py
from typing import Protocol

from geonav.sim.event import BaseEvent


class KernelHooks(Protocol):
    def run_start(self, *, until, qsize): ...
    def run_end(self, *, processed, last_t, qsize): ...
    def dispatch(self, ev: BaseEvent, *, seq, handlers): ...
    def error(self, ev: BaseEvent, *, reason: str, **kw): ...


class NoopHooks:
    def run_start(self, **_):
        pass

    def run_end(self, **_):
        pass

    def dispatch(self, *_, **__):
        pass

    def error(self, *_, **__):
        pass
