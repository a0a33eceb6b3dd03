# io/kernel_logging.py
import json
import logging
import sys
from dataclasses import asdict

from geonav.io.recorder import Recorder
from geonav.sim.hooks import NoopHooks


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
        }
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(extra)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def default_json_logger(name="geonav", level="INFO"):
    """One stdout JSON handler on the package logger; module loggers propagate to it."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        h = logging.StreamHandler(sys.stdout)
        h.setFormatter(JsonFormatter())
        logger.addHandler(h)
    logger.setLevel(level)
    return logger


class KernelLogging(NoopHooks):
    """
    Kernel hooks for a navigation run. Navigation events are logged at INFO
    with run id and wall time, and forwarded to the recorder. Position ticks
    are logged only in debug mode, one in every `sample_every`.
    """

    NAVIGATION = {
        "NavigationStarted",
        "InstructionAdvanced",
        "GoalReached",
        "DriftCorrected",
    }

    def __init__(
        self,
        run_id: str = "local",
        clock=None,
        level: str = "INFO",
        debug: bool = False,
        sample_every: int = 1,
        logger: logging.Logger | None = None,
        recorder: Recorder | None = None,
    ):
        self.run_id, self.clock, self.recorder = run_id, clock, recorder
        self.debug, self.sample_every = debug, max(1, sample_every)
        self.log = logger or default_json_logger(level=level)
        self._ticks = 0

    def _emit(self, level: int, msg: str, t: float | None = None, **fields):
        payload = {"run_id": self.run_id, "t": t}
        if self.clock is not None and t is not None:
            payload["wall"] = self.clock.to_wall(t).isoformat()
        self.log.log(level, msg, extra={"extra": {**payload, **fields}})

    def run_start(self, *, until, qsize):
        self._emit(logging.INFO, "run_start", until=until, qsize=qsize)

    def run_end(self, *, processed, last_t, qsize):
        self._emit(logging.INFO, "run_end", t=last_t, processed=processed, qsize=qsize)

    def dispatch(self, ev, *, seq, handlers):
        name = type(ev).__name__
        if name in self.NAVIGATION:
            fields = asdict(ev)
            self._emit(logging.INFO, name, seq=seq, **fields)
            if self.recorder:
                self.recorder.emit(ev)
            return
        self._ticks += 1
        if self.debug and self._ticks % self.sample_every == 0:
            self._emit(logging.DEBUG, name, t=ev.t, seq=seq, handlers=handlers)

    def error(self, ev, *, reason, **extra):
        self._emit(logging.ERROR, "kernel_error", t=ev.t, event=type(ev).__name__, reason=reason, **extra)
