"""Render instructions computed from the session state.

:func:`render_frame` is a pure function of the session; the host calls it
after every step or mutation and draws the result however it likes.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from .dataset import QUERY_ID
from .distance import EdgeKey
from .layout import NodeKind, Point2D, Snapshot

NODE_SIZE = 80.0
NODE_OFFSET = 50.0
QUERY_IMAGE = "https://i.postimg.cc/s2dngpxD/malleable.png"

HIGHLIGHT_STROKE = "red"
DEFAULT_STROKE = "#ccc"


@dataclass(frozen=True)
class NodeSprite:
    id: str
    kind: NodeKind
    label: str
    image: Optional[str]
    center: Point2D
    top_left: Point2D
    size: float = NODE_SIZE
    pinned: bool = False


@dataclass(frozen=True)
class LinkLine:
    key: EdgeKey
    start: Point2D
    end: Point2D
    weight: float
    is_query: bool
    highlight: bool
    stroke: str
    opacity: float
    width: float
    tooltip: Optional[str]

    @property
    def midpoint(self) -> Point2D:
        return ((self.start[0] + self.end[0]) / 2.0, (self.start[1] + self.end[1]) / 2.0)


@dataclass(frozen=True)
class RenderFrame:
    step: int
    alpha: float
    nodes: List[NodeSprite]
    links: List[LinkLine]
    highlight: Optional[EdgeKey]

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for node in data["nodes"]:
            node["kind"] = node["kind"].value
        return data


def format_weight(weight: float) -> str:
    return f"{weight:.3f}"


def render_frame(session, snapshot: Optional[Snapshot] = None) -> RenderFrame:
    """Build the drawing instructions for ``session`` at ``snapshot``."""

    snap = snapshot or session.snapshot()
    positions = snap.positions
    closest = session.closest_query_edge()
    highlight = closest.key if closest is not None else None

    nodes: List[NodeSprite] = []
    for node in session.nodes:
        x, y = positions[node.id]
        if node.id == QUERY_ID:
            label, image = "", QUERY_IMAGE
        else:
            proto = session.prototypes.get(node.id)
            label, image = proto.id, proto.image
        nodes.append(
            NodeSprite(
                id=node.id,
                kind=node.kind,
                label=label,
                image=image,
                center=(x, y),
                top_left=(x - NODE_OFFSET, y - NODE_OFFSET),
                pinned=node.pinned is not None,
            )
        )

    links: List[LinkLine] = []
    for edge in session.edges:
        is_highlight = edge.key == highlight
        links.append(
            LinkLine(
                key=edge.key,
                start=positions[edge.source],
                end=positions[edge.target],
                weight=edge.weight,
                is_query=edge.is_query,
                highlight=is_highlight,
                stroke=HIGHLIGHT_STROKE if is_highlight else DEFAULT_STROKE,
                opacity=1.0 if edge.is_query else 0.2,
                width=5.0 if edge.is_query else 1.0,
                tooltip=format_weight(edge.weight) if edge.is_query else None,
            )
        )

    return RenderFrame(step=snap.step, alpha=snap.alpha, nodes=nodes, links=links, highlight=highlight)


__all__ = [
    "LinkLine",
    "NodeSprite",
    "RenderFrame",
    "format_weight",
    "render_frame",
]
