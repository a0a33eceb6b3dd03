from typing import Protocol, runtime_checkable

from geonav.domain.entities.geography import GeodeticPoint, LocalPoint


# ------------- Collaborators --------------------
@runtime_checkable
class CoordinateProjector(Protocol):
    """
    Responsibilities:
      • Convert geodetic samples into the scene-local planar frame.
      • Invert that conversion (simulated feeds, diagnostics).
    Units: degrees in, meters out; height is always 0.
    """

    def to_local(self, geo: GeodeticPoint) -> LocalPoint: ...
    def to_geodetic(self, p: LocalPoint) -> GeodeticPoint: ...


@runtime_checkable
class PositionSource(Protocol):
    """
    A live geodetic feed. Polled once per tick, never awaited:
    `latest()` returns the newest sample or None if nothing arrived yet.
    """

    def latest(self, t: float):
        """Return the PositionSample current at sim time t (or None)."""
