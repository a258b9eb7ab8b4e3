"""Distance model: feature vectors to a weighted similarity graph."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
from scipy.spatial.distance import pdist, squareform

from .dataset import QUERY_ID, EmptyPrototypeSetError, PrototypeSet
from .logging_utils import apply_debug_logging

logger = logging.getLogger(__name__)

EdgeKey = Tuple[str, str]


class DimensionMismatch(ValueError):
    """Raised when two feature vectors do not have the same number of slots."""


def normalize_edge(edge: Tuple[str, str]) -> EdgeKey:
    a, b = edge
    return (a, b) if a <= b else (b, a)


def edge_key(a: str, b: str) -> EdgeKey:
    """Identity of an edge across rebuilds.

    Query edges are keyed ``("query", prototype)``; every other edge by its
    sorted endpoints.
    """

    if a == QUERY_ID:
        return (QUERY_ID, b)
    if b == QUERY_ID:
        return (QUERY_ID, a)
    return normalize_edge((a, b))


@dataclass(frozen=True)
class Edge:
    source: str
    target: str
    weight: float

    @property
    def key(self) -> EdgeKey:
        return edge_key(self.source, self.target)

    @property
    def is_query(self) -> bool:
        return self.source == QUERY_ID or self.target == QUERY_ID

    def other(self, node_id: str) -> str:
        return self.target if self.source == node_id else self.source


def _as_vector(value: Sequence[float]) -> np.ndarray:
    arr = np.asarray(value, dtype=float)
    if arr.ndim != 1:
        raise DimensionMismatch(f"feature vector must be one-dimensional, got shape {arr.shape}")
    return arr


def distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Euclidean distance between two feature vectors of equal length."""

    va = _as_vector(a)
    vb = _as_vector(b)
    if va.shape != vb.shape:
        raise DimensionMismatch(f"vectors must be the same length ({va.size} != {vb.size})")
    return float(np.linalg.norm(va - vb))


def _require_prototypes(prototypes: PrototypeSet) -> None:
    if prototypes is None or len(prototypes) == 0:
        raise EmptyPrototypeSetError("distance model needs at least one prototype")


def mean_vector(prototypes: PrototypeSet) -> np.ndarray:
    _require_prototypes(prototypes)
    return prototypes.matrix.mean(axis=0)


def distance_matrix(prototypes: PrototypeSet) -> np.ndarray:
    _require_prototypes(prototypes)
    if len(prototypes) == 1:
        return np.zeros((1, 1), dtype=float)
    return squareform(pdist(prototypes.matrix, metric="euclidean"))


def build_static_edges(prototypes: PrototypeSet) -> List[Edge]:
    """One edge per unordered prototype pair, weighted by Euclidean distance."""

    _require_prototypes(prototypes)
    ids = prototypes.ids
    n = len(ids)
    edges: List[Edge] = []
    if n > 1:
        # pdist emits pairs in (0, 1), (0, 2), ..., (1, 2), ... order
        weights = pdist(prototypes.matrix, metric="euclidean")
        pos = 0
        for i in range(n):
            for j in range(i + 1, n):
                edges.append(Edge(ids[i], ids[j], float(weights[pos])))
                pos += 1
    logger.info("Built %d static edges for %d prototypes", len(edges), n)
    return edges


def recompute_query_edges(query_vector: Sequence[float], prototypes: PrototypeSet) -> List[Edge]:
    """Return a fresh query edge list, one edge per prototype."""

    _require_prototypes(prototypes)
    query = _as_vector(query_vector)
    edges = [
        Edge(QUERY_ID, proto_id, distance(query, prototypes.matrix[row]))
        for row, proto_id in enumerate(prototypes.ids)
    ]
    if logger.isEnabledFor(logging.DEBUG):
        closest = closest_edge(edges)
        logger.debug(
            "Recomputed %d query edges (closest=%s)",
            len(edges),
            f"{closest.target}@{closest.weight:.4g}" if closest else None,
        )
    return edges


def closest_edge(edges: Iterable[Edge]) -> Optional[Edge]:
    """Return the minimum-weight edge; earlier edges win ties."""

    best: Optional[Edge] = None
    for edge in edges:
        if best is None or edge.weight < best.weight:
            best = edge
    return best


apply_debug_logging(globals(), logger=logger, skip={"normalize_edge", "edge_key", "_as_vector"})


__all__ = [
    "DimensionMismatch",
    "Edge",
    "EdgeKey",
    "build_static_edges",
    "closest_edge",
    "distance",
    "distance_matrix",
    "edge_key",
    "mean_vector",
    "normalize_edge",
    "recompute_query_edges",
]
