# geonav/domain/graph_builder.py
import logging
from collections.abc import Iterable, Mapping, Sequence

from geonav.app.protocols import CoordinateProjector
from geonav.domain.entities.features import (
    FeatureCollection,
    PointFeature,
    Properties,
    RawCollection,
)
from geonav.domain.entities.geography import (
    DEFAULT_TOLERANCE,
    GraphBuildResult,
    LocalPoint,
    NodeGraph,
)
from geonav.errors import ConfigurationError, FeatureCollectionParseError
from geonav.io.geojson import parse_collection

log = logging.getLogger(__name__)


def is_oneway(
    properties: Properties | None, key: str = "oneway", values: Iterable[str] = ("yes", "1")
) -> bool:
    if not properties or key not in properties:
        return False
    v = properties[key]
    if v is None:
        return False
    return str(v).strip().lower() in {s.lower() for s in values}


class GraphBuilder:
    """
    Builds a deduplicated directed node graph from map feature collections.

    Pass 1 assigns a node to every distinct (tolerance-equal) projected
    coordinate; pass 2 links consecutive line coordinates. Edges can only be
    resolved once every node exists, because a line may reference a
    coordinate first seen in a later collection.
    """

    def __init__(
        self,
        projector: CoordinateProjector | None,
        *,
        tolerance: float = DEFAULT_TOLERANCE,
        oneway_key: str = "oneway",
        oneway_values: Sequence[str] = ("yes", "1"),
        poi_name_key: str = "name",
    ):
        if projector is None:
            raise ConfigurationError("GraphBuilder needs a coordinate projector")
        if tolerance <= 0:
            raise ConfigurationError(f"tolerance must be > 0, got {tolerance}")
        self.projector = projector
        self.tolerance = tolerance
        self.oneway_key = oneway_key
        self.oneway_values = tuple(oneway_values)
        self.poi_name_key = poi_name_key

    @classmethod
    def from_config(cls, cfg, projector: CoordinateProjector | None) -> "GraphBuilder":
        return cls(
            projector,
            tolerance=cfg.tolerance,
            oneway_key=cfg.oneway_key,
            oneway_values=cfg.oneway_values,
            poi_name_key=cfg.poi_name_key,
        )

    # ------------------------------------------------------------------

    def ingest(
        self, collections: Iterable[FeatureCollection | RawCollection | Mapping]
    ) -> GraphBuildResult:
        # fresh graph + id sequence per call
        result = GraphBuildResult(graph=NodeGraph(tolerance=self.tolerance))
        parsed = self._parse_all(collections, result)

        for coll in parsed:
            self._assign_nodes(coll, result)

        for coll in parsed:
            self._assign_edges(coll, result)

        log.info(
            "graph_built",
            extra={
                "extra": {
                    "nodes": len(result.graph),
                    "edges": result.graph.edge_count,
                    "pois": len(result.pois),
                    "failed_sources": [e.source for e in result.errors],
                    "skipped_edges": result.skipped_edges,
                }
            },
        )
        return result

    # ---------------- helpers ------------------------------------------

    def _parse_all(self, collections, result: GraphBuildResult) -> list[FeatureCollection]:
        out: list[FeatureCollection] = []
        for i, c in enumerate(collections):
            if isinstance(c, FeatureCollection):
                out.append(c)
                continue
            if isinstance(c, RawCollection):
                source, payload = c.source, c.payload
            else:
                source, payload = f"collection[{i}]", c
            try:
                out.append(parse_collection(payload, source=source))
            except FeatureCollectionParseError as exc:
                log.warning(str(exc), extra={"extra": {"source": exc.source}})
                result.errors.append(exc)
        return out

    def _local(self, geo) -> LocalPoint:
        return self.projector.to_local(geo)

    def _assign_nodes(self, coll: FeatureCollection, result: GraphBuildResult) -> None:
        g = result.graph
        for feature in coll.features:
            for geo in feature.coordinates():
                g.add_node(self._local(geo))
            if isinstance(feature, PointFeature):
                name = feature.properties.get(self.poi_name_key)
                if name:
                    result.pois[str(name)] = self._local(feature.coordinate)

    def _assign_edges(self, coll: FeatureCollection, result: GraphBuildResult) -> None:
        g = result.graph
        for feature in coll.features:
            oneway = is_oneway(feature.properties, self.oneway_key, self.oneway_values)
            for line in feature.lines():
                for a_geo, b_geo in zip(line, line[1:]):
                    a, b = g.find(self._local(a_geo)), g.find(self._local(b_geo))
                    if a is None or b is None:
                        result.skipped_edges += 1
                        log.debug("edge_skipped", extra={"extra": {"source": coll.source}})
                        continue
                    if a == b:  # repeated vertex
                        continue
                    g.add_edge(a, b)
                    if not oneway:
                        g.add_edge(b, a)
