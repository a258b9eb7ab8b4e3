"""Force-directed layout of the similarity graph."""

from __future__ import annotations

from .engine import LayoutEngine, SnapshotListener
from .forces import LinearScale, apply_center_force, apply_link_force, link_strength, resolve_links
from .model import (
    DIST_MULTIPLIER,
    EXACT_MATCH_EPS,
    MAX_PX,
    EngineState,
    LayoutOptions,
    Node,
    NodeId,
    NodeKind,
    Point2D,
    ResolvedLinks,
    Snapshot,
)
from .seed import ClassicalMDSSeeder, PhyllotaxisSeeder, initial_positions

__all__ = [
    "ClassicalMDSSeeder",
    "DIST_MULTIPLIER",
    "EXACT_MATCH_EPS",
    "EngineState",
    "LayoutEngine",
    "LayoutOptions",
    "LinearScale",
    "MAX_PX",
    "Node",
    "NodeId",
    "NodeKind",
    "PhyllotaxisSeeder",
    "Point2D",
    "ResolvedLinks",
    "Snapshot",
    "SnapshotListener",
    "apply_center_force",
    "apply_link_force",
    "initial_positions",
    "link_strength",
    "resolve_links",
]
