# sim/clock.py
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta


@dataclass(frozen=True)
class SimClock:
    """Maps sim seconds onto wall time so log records carry a timestamp."""

    epoch: datetime  # wall time of t=0, UTC

    @classmethod
    def utc_epoch(cls, y: int, m: int, d: int, hh=0, mm=0, ss=0) -> "SimClock":
        return cls(datetime(y, m, d, hh, mm, ss, tzinfo=UTC))

    def to_wall(self, t: float) -> datetime:
        return self.epoch + timedelta(seconds=t)
