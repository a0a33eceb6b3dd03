# sim/kernel.py
import heapq
from collections import defaultdict
from collections.abc import Callable, Iterable
from itertools import count

from geonav.sim.event import BaseEvent
from geonav.sim.hooks import KernelHooks, NoopHooks

Handler = Callable[[BaseEvent], Iterable[BaseEvent] | None]

EPS = 1e-9


class Kernel:
    """
    Time-ordered event queue driving the position tick. Events at the same
    time dispatch in the order they were scheduled; handlers may return
    follow-up events, which is how PositionTick keeps itself going.
    Events without handlers are still dispatched so hooks can observe them.
    """

    def __init__(self, hooks: KernelHooks | None = None):
        self._now = 0.0
        self._queue: list[tuple[float, int, BaseEvent]] = []
        self._seq = count(1)
        self._handlers: dict[type[BaseEvent], list[Handler]] = defaultdict(list)
        self._hooks = hooks or NoopHooks()

    @property
    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        return len(self._queue)

    def on(self, etype: type[BaseEvent], handler: Handler) -> None:
        self._handlers[etype].append(handler)

    def schedule(self, ev: BaseEvent) -> None:
        if ev.t < self._now - EPS:
            self._hooks.error(ev, reason="scheduled_past", now=self._now)
            raise RuntimeError(f"cannot schedule {type(ev).__name__} at {ev.t} < now {self._now}")
        heapq.heappush(self._queue, (ev.t, next(self._seq), ev))

    def run(self, until: float | None = None) -> int:
        """Dispatch queued events up to and including `until`; returns how many ran."""
        self._hooks.run_start(until=until, qsize=len(self._queue))
        processed = 0
        while self._queue and (until is None or self._queue[0][0] <= until):
            t, seq, ev = heapq.heappop(self._queue)
            self._now = t
            handlers = self._handlers.get(type(ev), ())
            self._hooks.dispatch(ev, seq=seq, handlers=len(handlers))
            for h in handlers:
                for nxt in h(ev) or ():
                    self.schedule(nxt)
            processed += 1
        self._hooks.run_end(processed=processed, last_t=self._now, qsize=len(self._queue))
        return processed
