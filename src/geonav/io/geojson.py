# io/geojson.py
"""
GeoJSON-like feature collections -> MapFeature.

Coordinates are [longitude, latitude(, elevation)]. Only Point, LineString and
MultiLineString geometries are understood; features with no geometry or any
other geometry type are skipped. A structurally broken collection fails as a
whole with FeatureCollectionParseError so the caller can skip just that source.
"""

import json
import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from geonav.domain.entities.features import (
    FeatureCollection,
    LineStringFeature,
    MapFeature,
    MultiLineStringFeature,
    PointFeature,
    RawCollection,
)
from geonav.domain.entities.geography import GeodeticPoint
from geonav.errors import FeatureCollectionParseError

log = logging.getLogger(__name__)

Position = list[float]


class PointGeometry(BaseModel):
    model_config = ConfigDict(extra="allow")
    type: Literal["Point"]
    coordinates: Position


class LineStringGeometry(BaseModel):
    model_config = ConfigDict(extra="allow")
    type: Literal["LineString"]
    coordinates: list[Position]


class MultiLineStringGeometry(BaseModel):
    model_config = ConfigDict(extra="allow")
    type: Literal["MultiLineString"]
    coordinates: list[list[Position]]


Geometry = Annotated[
    PointGeometry | LineStringGeometry | MultiLineStringGeometry,
    Field(discriminator="type"),
]
_geometry = TypeAdapter(Geometry)
SUPPORTED = {"Point", "LineString", "MultiLineString"}


class FeatureModel(BaseModel):
    model_config = ConfigDict(extra="allow")
    type: str = "Feature"
    properties: dict[str, Any] | None = None
    geometry: dict[str, Any] | None = None


class FeatureCollectionModel(BaseModel):
    model_config = ConfigDict(extra="allow")
    type: str = "FeatureCollection"
    features: list[FeatureModel]


# ----------------------------------------------------------------------


def _geo(pos: Position) -> GeodeticPoint | None:
    if len(pos) < 2:
        return None
    return GeodeticPoint(latitude=float(pos[1]), longitude=float(pos[0]))


def _line(positions: Iterable[Position]) -> tuple[GeodeticPoint, ...]:
    return tuple(g for g in map(_geo, positions) if g is not None)


def _to_feature(geom, props: dict[str, Any]) -> MapFeature | None:
    if isinstance(geom, PointGeometry):
        g = _geo(geom.coordinates)
        return PointFeature(g, props) if g is not None else None
    if isinstance(geom, LineStringGeometry):
        return LineStringFeature(_line(geom.coordinates), props)
    return MultiLineStringFeature(tuple(_line(part) for part in geom.coordinates), props)


def parse_collection(payload: str | bytes | Mapping[str, Any], *, source: str) -> FeatureCollection:
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError as exc:  # JSONDecodeError, UnicodeDecodeError
            raise FeatureCollectionParseError(source, f"invalid JSON: {exc}") from exc
    try:
        model = FeatureCollectionModel.model_validate(payload)
        features: list[MapFeature] = []
        for f in model.features:
            if f.geometry is None:
                continue
            kind = f.geometry.get("type")
            if kind not in SUPPORTED:
                log.debug("unsupported_geometry", extra={"extra": {"source": source, "type": kind}})
                continue
            feature = _to_feature(_geometry.validate_python(f.geometry), f.properties or {})
            if feature is not None:
                features.append(feature)
    except ValidationError as exc:
        raise FeatureCollectionParseError(
            source, f"{exc.error_count()} shape error(s): {exc.errors()[0]['msg']}"
        ) from exc
    return FeatureCollection.of(source, features)


def load_collection(path: str | os.PathLike) -> RawCollection:
    p = Path(path)
    return RawCollection(source=p.name, payload=p.read_bytes())


def load_sources(sources) -> list[RawCollection]:
    """Read configured source files in order. Missing optional files are skipped."""
    out = []
    for src in sources:
        if not Path(src.file).exists():
            if src.must_exist:
                raise FileNotFoundError(src.file)
            log.warning("source_missing", extra={"extra": {"file": src.file}})
            continue
        out.append(load_collection(src.file))
    return out
