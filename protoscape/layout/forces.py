"""Forces of the relaxation: edge springs and the centering pull."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

import numpy as np

from ..distance import Edge
from .model import LayoutOptions, NodeId, ResolvedLinks

JIGGLE = 1e-6


@dataclass(frozen=True)
class LinearScale:
    """Linear map from ``[lo, hi]`` to ``[0, span]``; a flat domain maps to mid-range."""

    lo: float
    hi: float
    span: float

    @classmethod
    def fit(cls, weights: Sequence[float], span: float) -> "LinearScale":
        arr = np.asarray(weights, dtype=float)
        if arr.size == 0:
            return cls(0.0, 0.0, span)
        return cls(float(arr.min()), float(arr.max()), span)

    def __call__(self, value):
        width = self.hi - self.lo
        if width == 0.0:
            return np.full_like(np.asarray(value, dtype=float), 0.5 * self.span)
        return (np.asarray(value, dtype=float) - self.lo) / width * self.span


def link_strength(edge: Edge, options: LayoutOptions) -> float:
    if not edge.is_query:
        return options.static_strength
    if edge.weight < options.exact_match_eps:
        return options.query_match_strength
    return options.query_strength


def resolve_links(
    edges: Sequence[Edge], index: Mapping[NodeId, int], options: LayoutOptions
) -> ResolvedLinks:
    """Compile edges into arrays: endpoints, target lengths, strengths and biases.

    The length scale is fitted to the weights of exactly this edge set.
    """

    if not edges:
        return ResolvedLinks.empty()
    try:
        source = np.fromiter((index[e.source] for e in edges), dtype=int, count=len(edges))
        target = np.fromiter((index[e.target] for e in edges), dtype=int, count=len(edges))
    except KeyError as exc:
        raise KeyError(f"edge references unknown node {exc.args[0]!r}") from exc

    weights = np.fromiter((e.weight for e in edges), dtype=float, count=len(edges))
    scale = LinearScale.fit(weights, options.max_px)
    distance = scale(weights * options.dist_multiplier)
    strength = np.fromiter((link_strength(e, options) for e in edges), dtype=float, count=len(edges))

    degree = np.bincount(np.concatenate([source, target]), minlength=len(index)).astype(float)
    bias = degree[source] / (degree[source] + degree[target])

    return ResolvedLinks(
        keys=[e.key for e in edges],
        weights=weights,
        source=source,
        target=target,
        distance=distance,
        strength=strength,
        bias=bias,
    )


def apply_link_force(
    positions: np.ndarray,
    velocities: np.ndarray,
    links: ResolvedLinks,
    alpha: float,
    rng: np.random.Generator,
) -> None:
    """Nudge endpoint velocities so each edge moves toward its target length."""

    if len(links) == 0:
        return
    s, t = links.source, links.target
    delta = (positions[t] + velocities[t]) - (positions[s] + velocities[s])
    zero = delta == 0.0
    if zero.any():
        delta[zero] = (rng.random(int(zero.sum())) - 0.5) * JIGGLE
    length = np.sqrt(np.einsum("ij,ij->i", delta, delta))
    factor = (length - links.distance) / length * alpha * links.strength
    delta *= factor[:, None]
    np.add.at(velocities, t, -delta * links.bias[:, None])
    np.add.at(velocities, s, delta * (1.0 - links.bias)[:, None])


def apply_center_force(
    positions: np.ndarray,
    free: np.ndarray,
    center: Sequence[float],
    strength: float = 1.0,
) -> Optional[np.ndarray]:
    """Translate free nodes so the mean position moves toward ``center``."""

    if positions.shape[0] == 0 or not free.any():
        return None
    shift = (positions.mean(axis=0) - np.asarray(center, dtype=float)) * strength
    positions[free] -= shift
    return shift


__all__ = [
    "LinearScale",
    "apply_center_force",
    "apply_link_force",
    "link_strength",
    "resolve_links",
]
