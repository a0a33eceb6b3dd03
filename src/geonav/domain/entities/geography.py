import math
from collections.abc import Iterator
from dataclasses import dataclass, field

from geonav.errors import FeatureCollectionParseError

DEFAULT_TOLERANCE = 1e-5  # projected units

GridKey = tuple[int, int]


# Core geometry types shared by projection, graph building and tracking
@dataclass(frozen=True)
class GeodeticPoint:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class LocalPoint:
    x: float  # meters east of the reference
    z: float  # meters north of the reference
    y: float = 0.0  # height; resolved outside the core

    def __add__(self, other: "LocalPoint") -> "LocalPoint":
        return LocalPoint(self.x + other.x, self.z + other.z, self.y + other.y)

    def __sub__(self, other: "LocalPoint") -> "LocalPoint":
        return LocalPoint(self.x - other.x, self.z - other.z, self.y - other.y)

    def scaled(self, k: float) -> "LocalPoint":
        return LocalPoint(self.x * k, self.z * k, self.y * k)

    def planar(self) -> "LocalPoint":
        return LocalPoint(self.x, self.z)


ORIGIN = LocalPoint(0.0, 0.0)


def grid_key(p: LocalPoint, tolerance: float = DEFAULT_TOLERANCE) -> GridKey:
    """Quantize (x, z) onto an integer grid with cell size = tolerance."""
    return (math.floor(p.x / tolerance), math.floor(p.z / tolerance))


def same_location(a: LocalPoint, b: LocalPoint, tolerance: float = DEFAULT_TOLERANCE) -> bool:
    return abs(a.x - b.x) < tolerance and abs(a.z - b.z) < tolerance


@dataclass
class GraphNode:
    id: int
    position: LocalPoint
    neighbors: set[int] = field(default_factory=set)


class NodeGraph:
    """
    Directed adjacency graph keyed by node id, plus a grid index for
    tolerance lookups. Read-only to consumers once the build returns.
    """

    def __init__(self, *, tolerance: float = DEFAULT_TOLERANCE):
        self.tolerance = tolerance
        self._nodes: dict[int, GraphNode] = {}
        self._grid: dict[GridKey, list[int]] = {}

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[GraphNode]:
        return iter(self._nodes.values())

    def __contains__(self, node_id: int) -> bool:
        return node_id in self._nodes

    @property
    def nodes(self) -> dict[int, GraphNode]:
        return self._nodes

    def node(self, node_id: int) -> GraphNode:
        return self._nodes[node_id]

    def neighbors(self, node_id: int) -> frozenset[int]:
        return frozenset(self._nodes[node_id].neighbors)

    def has_edge(self, a: int, b: int) -> bool:
        n = self._nodes.get(a)
        return n is not None and b in n.neighbors

    @property
    def edge_count(self) -> int:
        return sum(len(n.neighbors) for n in self._nodes.values())

    def find(self, p: LocalPoint) -> int | None:
        """Lowest id of a node at the same location as p, if any."""
        gx, gz = grid_key(p, self.tolerance)
        # a point within tolerance can sit in an adjacent cell
        hits = [
            nid
            for dx in (-1, 0, 1)
            for dz in (-1, 0, 1)
            for nid in self._grid.get((gx + dx, gz + dz), ())
            if same_location(self._nodes[nid].position, p, self.tolerance)
        ]
        return min(hits) if hits else None

    def add_node(self, p: LocalPoint) -> int:
        """Id of the node at p; a new node gets the next id in sequence."""
        nid = self.find(p)
        if nid is None:
            nid = len(self._nodes) + 1
            self._nodes[nid] = GraphNode(nid, p)
            self._grid.setdefault(grid_key(p, self.tolerance), []).append(nid)
        return nid

    def add_edge(self, a: int, b: int) -> bool:
        """Insert a->b. Returns False if the edge already existed."""
        n = self._nodes.get(a)
        if n is None or b in n.neighbors:
            return False
        n.neighbors.add(b)
        return True


@dataclass
class GraphBuildResult:
    graph: NodeGraph
    pois: dict[str, LocalPoint] = field(default_factory=dict)
    errors: list[FeatureCollectionParseError] = field(default_factory=list)
    skipped_edges: int = 0
