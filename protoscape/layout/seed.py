"""Initial node positions for the relaxation."""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Protocol, Sequence

import numpy as np

from .model import LayoutOptions, NodeId, ResolvedLinks

logger = logging.getLogger(__name__)

INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3.0 - math.sqrt(5.0))


class BaseSeeder(Protocol):
    """Protocol implemented by seeding strategies."""

    def seed(
        self,
        node_ids: Sequence[NodeId],
        links: ResolvedLinks,
        options: LayoutOptions,
        rng: np.random.Generator,
    ) -> Optional[np.ndarray]:
        """Return an ``(n, 2)`` position array or ``None`` when the strategy fails."""


class PhyllotaxisSeeder:
    """Sunflower spiral around the canvas centre; never fails."""

    def seed(
        self,
        node_ids: Sequence[NodeId],
        links: ResolvedLinks,
        options: LayoutOptions,
        rng: np.random.Generator,
    ) -> Optional[np.ndarray]:
        i = np.arange(len(node_ids), dtype=float)
        radius = INITIAL_RADIUS * np.sqrt(0.5 + i)
        angle = i * INITIAL_ANGLE
        cx, cy = options.center
        return np.column_stack([cx + radius * np.cos(angle), cy + radius * np.sin(angle)])


class ClassicalMDSSeeder:
    """Embed the target-length matrix in 2D with classical MDS."""

    def seed(
        self,
        node_ids: Sequence[NodeId],
        links: ResolvedLinks,
        options: LayoutOptions,
        rng: np.random.Generator,
    ) -> Optional[np.ndarray]:
        n = len(node_ids)
        if n < 3 or len(links) == 0:
            return None

        dist = np.full((n, n), np.inf, dtype=float)
        np.fill_diagonal(dist, 0.0)
        dist[links.source, links.target] = np.minimum(dist[links.source, links.target], links.distance)
        dist[links.target, links.source] = dist[links.source, links.target]

        for k in range(n):
            dist = np.minimum(dist, dist[:, k][:, None] + dist[k, :][None, :])
        if not np.isfinite(dist).all():
            return None

        sq = dist * dist
        centering = np.eye(n) - np.full((n, n), 1.0 / n)
        gram = -0.5 * centering @ sq @ centering
        try:
            evals, evecs = np.linalg.eigh(gram)
        except np.linalg.LinAlgError:
            return None
        order = np.argsort(evals)[::-1][:2]
        evals = evals[order]
        evecs = evecs[:, order]
        if evals[0] <= 1e-9:
            return None

        coords = evecs * np.sqrt(np.clip(evals, 0.0, None))[None, :]
        if evals[1] <= 1e-9:
            # collinear targets: spread the second axis slightly so forces can act
            coords[:, 1] = (rng.random(n) - 0.5) * INITIAL_RADIUS
        cx, cy = options.center
        return coords + np.array([cx, cy])[None, :]


SEEDERS = {
    "mds": [ClassicalMDSSeeder(), PhyllotaxisSeeder()],
    "phyllotaxis": [PhyllotaxisSeeder()],
}


def initial_positions(
    node_ids: Sequence[NodeId],
    links: ResolvedLinks,
    options: LayoutOptions,
    rng: np.random.Generator,
) -> np.ndarray:
    """Run the configured seeder chain, first non-``None`` result wins."""

    try:
        chain: List[BaseSeeder] = SEEDERS[options.seed_strategy]
    except KeyError as exc:
        raise ValueError(f"unknown seed strategy '{options.seed_strategy}'") from exc

    for seeder in chain:
        coords = seeder.seed(node_ids, links, options, rng)
        if coords is not None:
            logger.info("Seeded %d nodes with %s", len(node_ids), type(seeder).__name__)
            return coords
    raise RuntimeError("no seeder produced positions")  # pragma: no cover - phyllotaxis always succeeds


__all__ = [
    "BaseSeeder",
    "ClassicalMDSSeeder",
    "PhyllotaxisSeeder",
    "SEEDERS",
    "initial_positions",
]
