"""Data structures shared by the layout engine."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

import numpy as np

from ..dataset import QUERY_ID
from ..distance import EdgeKey

NodeId = str
Point2D = Tuple[float, float]

DIST_MULTIPLIER = 1.5
MAX_PX = 200.0
EXACT_MATCH_EPS = 1e-3

STATIC_STRENGTH = 0.1
QUERY_MATCH_STRENGTH = 1.0
QUERY_STRENGTH = 0.25

ALPHA_MIN = 0.001


class NodeKind(str, Enum):
    PROTOTYPE = "prototype"
    QUERY = "query"


class EngineState(str, Enum):
    CONSTRUCTED = "constructed"
    RUNNING = "running"
    SETTLED = "settled"


@dataclass
class Node:
    id: NodeId
    kind: NodeKind = NodeKind.PROTOTYPE
    position: Optional[Point2D] = None
    pinned: Optional[Point2D] = None

    @classmethod
    def query(cls) -> "Node":
        return cls(QUERY_ID, NodeKind.QUERY)


@dataclass
class LayoutOptions:
    """Tuning knobs of the relaxation.

    Defaults reproduce the force simulation the dashboard was designed with:
    300 steps from ``alpha=1`` down to ``alpha_min`` and 40% velocity loss
    per step.
    """

    width: float = 960.0
    height: float = 720.0
    dist_multiplier: float = DIST_MULTIPLIER
    max_px: float = MAX_PX
    exact_match_eps: float = EXACT_MATCH_EPS
    static_strength: float = STATIC_STRENGTH
    query_match_strength: float = QUERY_MATCH_STRENGTH
    query_strength: float = QUERY_STRENGTH
    center_strength: float = 1.0
    alpha_min: float = ALPHA_MIN
    alpha_decay: float = field(default_factory=lambda: 1.0 - ALPHA_MIN ** (1.0 / 300.0))
    velocity_decay: float = 0.4
    seed_strategy: str = "mds"
    random_seed: Optional[int] = None

    @property
    def center(self) -> Point2D:
        return (self.width / 2.0, self.height / 2.0)

    def steps_to_settle(self, alpha: float = 1.0) -> int:
        """Number of cold steps needed for ``alpha`` to fall below ``alpha_min``."""

        if alpha < self.alpha_min:
            return 0
        if self.alpha_decay <= 0.0:
            return 0
        return int(math.ceil(math.log(self.alpha_min / alpha) / math.log(1.0 - self.alpha_decay)))


@dataclass(frozen=True)
class Snapshot:
    """Positions of every node after one settle step."""

    step: int
    alpha: float
    state: EngineState
    positions: Dict[NodeId, Point2D]

    def __getitem__(self, node_id: NodeId) -> Point2D:
        return self.positions[node_id]


@dataclass
class ResolvedLinks:
    """Edge set compiled to index arrays; replaced wholesale, never patched."""

    keys: List[EdgeKey]
    weights: np.ndarray
    source: np.ndarray
    target: np.ndarray
    distance: np.ndarray
    strength: np.ndarray
    bias: np.ndarray

    def __len__(self) -> int:
        return len(self.keys)

    @classmethod
    def empty(cls) -> "ResolvedLinks":
        zeros = np.zeros(0, dtype=float)
        idx = np.zeros(0, dtype=int)
        return cls([], zeros, idx, idx.copy(), zeros.copy(), zeros.copy(), zeros.copy())


__all__ = [
    "ALPHA_MIN",
    "DIST_MULTIPLIER",
    "EXACT_MATCH_EPS",
    "EngineState",
    "LayoutOptions",
    "MAX_PX",
    "Node",
    "NodeId",
    "NodeKind",
    "Point2D",
    "QUERY_MATCH_STRENGTH",
    "QUERY_STRENGTH",
    "ResolvedLinks",
    "STATIC_STRENGTH",
    "Snapshot",
]
