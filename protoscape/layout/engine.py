"""Time-sliced force-directed layout engine."""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterator, List, Optional, Sequence

import numpy as np

from ..distance import Edge
from ..logging_utils import apply_debug_logging
from .forces import apply_center_force, apply_link_force, resolve_links
from .model import EngineState, LayoutOptions, Node, NodeId, Point2D, ResolvedLinks, Snapshot
from .seed import initial_positions

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[Snapshot], None]


class LayoutEngine:
    """Damped spring relaxation advanced one :meth:`step` at a time.

    Each step decays ``alpha`` toward ``alpha_target``, accumulates spring
    corrections into node velocities, pulls the free nodes toward the canvas
    centre and integrates with velocity damping. Pinned nodes keep their
    coordinates exactly but still pull on their neighbours.
    """

    def __init__(self, options: Optional[LayoutOptions] = None):
        self.options = options or LayoutOptions()
        self.rng = np.random.default_rng(self.options.random_seed)
        self.state = EngineState.CONSTRUCTED
        self.alpha = 1.0
        self.alpha_target = 0.0
        self.step_count = 0
        self.nodes: List[Node] = []
        self.index: Dict[NodeId, int] = {}
        self.links: ResolvedLinks = ResolvedLinks.empty()
        self.edges: List[Edge] = []
        self.positions = np.zeros((0, 2), dtype=float)
        self.velocities = np.zeros((0, 2), dtype=float)
        self._pinned = np.zeros((0, 2), dtype=float)
        self._is_pinned = np.zeros(0, dtype=bool)
        self._listeners: List[SnapshotListener] = []

    # working set -----------------------------------------------------------

    def rebuild(self, nodes: Sequence[Node], edges: Sequence[Edge]) -> None:
        """Replace nodes and edges; known node ids keep their position and pin."""

        nodes = list(nodes)
        index = {node.id: i for i, node in enumerate(nodes)}
        if len(index) != len(nodes):
            raise ValueError("node ids must be unique")
        links = resolve_links(edges, index, self.options)

        positions = np.zeros((len(nodes), 2), dtype=float)
        velocities = np.zeros((len(nodes), 2), dtype=float)
        pinned = np.zeros((len(nodes), 2), dtype=float)
        is_pinned = np.zeros(len(nodes), dtype=bool)
        missing: List[int] = []
        for i, node in enumerate(nodes):
            old = self.index.get(node.id)
            if old is not None:
                positions[i] = self.positions[old]
                velocities[i] = self.velocities[old]
                if self._is_pinned[old]:
                    is_pinned[i] = True
                    pinned[i] = self._pinned[old]
            elif node.position is not None:
                positions[i] = node.position
            else:
                missing.append(i)
            if node.pinned is not None:
                is_pinned[i] = True
                pinned[i] = node.pinned
        if missing:
            seeded = initial_positions([n.id for n in nodes], links, self.options, self.rng)
            positions[missing] = seeded[missing]
        positions[is_pinned] = pinned[is_pinned]

        self.nodes = nodes
        self.index = index
        self.edges = list(edges)
        self.links = links
        self.positions = positions
        self.velocities = velocities
        self._pinned = pinned
        self._is_pinned = is_pinned
        self._sync_nodes()
        logger.info(
            "Layout rebuilt with %d nodes and %d edges (%d seeded)",
            len(nodes),
            len(links),
            len(missing),
        )
        self.reheat(1.0)

    def replace_edges(self, edges: Sequence[Edge]) -> None:
        """Swap in a new edge set; the length scale is refitted to it."""

        links = resolve_links(edges, self.index, self.options)
        # fully compiled before the swap, so no step sees a mixed edge set
        self.edges, self.links = list(edges), links
        logger.debug("Replaced edge set with %d edges", len(links))

    # temperature -----------------------------------------------------------

    def reheat(self, intensity: float, *, target: Optional[float] = None) -> None:
        """Restart cooling from ``intensity``; positions are left untouched."""

        self.alpha = float(intensity)
        if target is not None:
            self.alpha_target = float(target)
        self.state = EngineState.RUNNING
        logger.debug("Reheated to alpha=%.3f target=%.3f", self.alpha, self.alpha_target)

    def cool(self) -> None:
        self.alpha_target = 0.0

    @property
    def running(self) -> bool:
        return self.state is EngineState.RUNNING

    # pinning ---------------------------------------------------------------

    def _node_index(self, node_id: NodeId) -> int:
        try:
            return self.index[node_id]
        except KeyError as exc:
            raise KeyError(f"unknown node '{node_id}'") from exc

    def pin(self, node_id: NodeId, position: Point2D) -> None:
        i = self._node_index(node_id)
        self._is_pinned[i] = True
        self._pinned[i] = position
        self.positions[i] = position
        self.velocities[i] = 0.0
        self.nodes[i].pinned = (float(position[0]), float(position[1]))
        self.nodes[i].position = self.nodes[i].pinned

    def unpin(self, node_id: NodeId) -> None:
        i = self._node_index(node_id)
        self._is_pinned[i] = False
        self.nodes[i].pinned = None

    def is_pinned(self, node_id: NodeId) -> bool:
        return bool(self._is_pinned[self._node_index(node_id)])

    @property
    def has_pinned(self) -> bool:
        return bool(self._is_pinned.any())

    # stepping --------------------------------------------------------------

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register a snapshot listener; returns a function that removes it."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def step(self) -> Snapshot:
        """Advance one settle step and notify listeners.

        While settled the positions are not touched and the current snapshot
        is returned.
        """

        if self.state is not EngineState.RUNNING:
            return self.snapshot()

        opts = self.options
        self.alpha += (self.alpha_target - self.alpha) * opts.alpha_decay
        free = ~self._is_pinned

        apply_link_force(self.positions, self.velocities, self.links, self.alpha, self.rng)
        apply_center_force(self.positions, free, opts.center, opts.center_strength)

        self.velocities[free] *= 1.0 - opts.velocity_decay
        self.positions[free] += self.velocities[free]
        self.positions[self._is_pinned] = self._pinned[self._is_pinned]
        self.velocities[self._is_pinned] = 0.0

        self.step_count += 1
        if self.alpha < opts.alpha_min:
            self.state = EngineState.SETTLED
            logger.info("Layout settled after %d steps", self.step_count)

        self._sync_nodes()
        snap = self.snapshot()
        for listener in list(self._listeners):
            listener(snap)
        return snap

    def iter_steps(self, max_steps: Optional[int] = None) -> Iterator[Snapshot]:
        """Yield one snapshot per step until settled or ``max_steps`` reached."""

        taken = 0
        while self.running and (max_steps is None or taken < max_steps):
            yield self.step()
            taken += 1

    def run(self, max_steps: Optional[int] = None) -> Snapshot:
        snap = self.snapshot()
        for snap in self.iter_steps(max_steps):
            pass
        return snap

    def _sync_nodes(self) -> None:
        for node, (x, y) in zip(self.nodes, self.positions):
            node.position = (float(x), float(y))

    def snapshot(self) -> Snapshot:
        return Snapshot(
            step=self.step_count,
            alpha=self.alpha,
            state=self.state,
            positions={node.id: (float(x), float(y)) for node, (x, y) in zip(self.nodes, self.positions)},
        )

    def position(self, node_id: NodeId) -> Point2D:
        x, y = self.positions[self._node_index(node_id)]
        return (float(x), float(y))


apply_debug_logging(
    globals(),
    logger=logger,
    skip={"LayoutEngine.step", "LayoutEngine.snapshot", "LayoutEngine._sync_nodes", "LayoutEngine.position"},
)


__all__ = ["LayoutEngine", "SnapshotListener"]
