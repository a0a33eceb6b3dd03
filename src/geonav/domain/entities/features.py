from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from geonav.domain.entities.geography import GeodeticPoint

Properties = Mapping[str, Any]


# Map features as parsed from a feature collection; coordinates stay geodetic
@dataclass(frozen=True)
class PointFeature:
    coordinate: GeodeticPoint
    properties: Properties = field(default_factory=dict)

    def coordinates(self) -> list[GeodeticPoint]:
        return [self.coordinate]

    def lines(self) -> list[list[GeodeticPoint]]:
        return []


@dataclass(frozen=True)
class LineStringFeature:
    points: tuple[GeodeticPoint, ...]
    properties: Properties = field(default_factory=dict)

    def coordinates(self) -> list[GeodeticPoint]:
        return list(self.points)

    def lines(self) -> list[list[GeodeticPoint]]:
        return [list(self.points)]


@dataclass(frozen=True)
class MultiLineStringFeature:
    parts: tuple[tuple[GeodeticPoint, ...], ...]
    properties: Properties = field(default_factory=dict)

    def coordinates(self) -> list[GeodeticPoint]:
        return [p for part in self.parts for p in part]

    def lines(self) -> list[list[GeodeticPoint]]:
        # consecutive pairs never span two parts
        return [list(part) for part in self.parts]


MapFeature = PointFeature | LineStringFeature | MultiLineStringFeature


@dataclass(frozen=True)
class FeatureCollection:
    source: str
    features: tuple[MapFeature, ...]

    @classmethod
    def of(cls, source: str, features: Iterable[MapFeature]) -> "FeatureCollection":
        return cls(source=source, features=tuple(features))


@dataclass(frozen=True)
class RawCollection:
    """An unparsed collection: JSON text or an already-decoded mapping."""

    source: str
    payload: str | bytes | Mapping[str, Any]
