# geonav/domain/projection.py
from dataclasses import dataclass

from geonav.app.protocols import CoordinateProjector
from geonav.domain.entities.geography import GeodeticPoint, LocalPoint


def project(
    geo: GeodeticPoint,
    reference: GeodeticPoint,
    meters_per_degree_lat: float,
    meters_per_degree_lon: float,
) -> LocalPoint:
    """
    Local equirectangular projection: x east-positive, z north-positive.
    Only valid near the reference; scale factors must match its latitude.
    """
    z = (geo.latitude - reference.latitude) * meters_per_degree_lat
    x = (geo.longitude - reference.longitude) * meters_per_degree_lon
    return LocalPoint(x, z)


def unproject(
    p: LocalPoint,
    reference: GeodeticPoint,
    meters_per_degree_lat: float,
    meters_per_degree_lon: float,
) -> GeodeticPoint:
    return GeodeticPoint(
        latitude=reference.latitude + p.z / meters_per_degree_lat,
        longitude=reference.longitude + p.x / meters_per_degree_lon,
    )


@dataclass(frozen=True)
class Projector(CoordinateProjector):
    reference: GeodeticPoint
    meters_per_degree_lat: float = 111139.0
    meters_per_degree_lon: float = 76600.0

    @classmethod
    def from_config(cls, cfg) -> "Projector":
        return cls(
            reference=GeodeticPoint(cfg.reference_latitude, cfg.reference_longitude),
            meters_per_degree_lat=cfg.meters_per_degree_lat,
            meters_per_degree_lon=cfg.meters_per_degree_lon,
        )

    def to_local(self, geo: GeodeticPoint) -> LocalPoint:
        return project(geo, self.reference, self.meters_per_degree_lat, self.meters_per_degree_lon)

    def to_geodetic(self, p: LocalPoint) -> GeodeticPoint:
        return unproject(p, self.reference, self.meters_per_degree_lat, self.meters_per_degree_lon)
