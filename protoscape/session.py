"""Session: prototypes, schema, query state, edges and layout in one place."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional

from .config import get_layout_options
from .dataset import (
    DatasetOptions,
    PathLike,
    Prototype,
    PrototypeSet,
    load_group_map,
    load_rows_csv,
    prototypes_from_rows,
)
from .distance import DimensionMismatch, Edge, build_static_edges, closest_edge, recompute_query_edges
from .layout import LayoutEngine, LayoutOptions, Node, Snapshot
from .query import QueryState
from .schema import FeatureSchema, build_schema

logger = logging.getLogger(__name__)

UPDATE_ALPHA = 0.8


@dataclass
class SessionOptions:
    layout: Optional[LayoutOptions] = None
    dataset: DatasetOptions = field(default_factory=DatasetOptions)
    strict_range: bool = False
    update_alpha: float = UPDATE_ALPHA


class Session:
    """Everything a running dashboard mutates, built in dependency order.

    prototypes -> schema -> static edges -> query vector -> query edges ->
    layout. After every query edit call :meth:`apply_query`, which keeps the
    write order vector -> edges -> reheat.
    """

    def __init__(
        self,
        prototypes: PrototypeSet,
        schema: FeatureSchema,
        options: Optional[SessionOptions] = None,
    ):
        self.options = options or SessionOptions()
        if len(schema) != prototypes.dimension:
            raise DimensionMismatch(
                f"schema has {len(schema)} features but prototypes have {prototypes.dimension}"
            )
        self.prototypes = prototypes
        self.schema = schema
        self.static_edges: List[Edge] = build_static_edges(prototypes)
        self.query = QueryState(prototypes, strict_range=self.options.strict_range)
        self.query_edges: List[Edge] = recompute_query_edges(self.query.vector, prototypes)
        self.nodes: List[Node] = [Node(proto.id) for proto in prototypes] + [Node.query()]
        self.engine = LayoutEngine(self.options.layout or get_layout_options())
        self.engine.rebuild(self.nodes, self.edges)
        self.applied_revision = self.query.revision

    @classmethod
    def from_rows(
        cls,
        rows: Iterable[Mapping[str, Any]],
        group_map: Optional[Mapping[str, str]] = None,
        options: Optional[SessionOptions] = None,
    ) -> "Session":
        options = options or SessionOptions()
        prototypes = prototypes_from_rows(rows, options.dataset)
        schema = build_schema(prototypes.columns, group_map)
        return cls(prototypes, schema, options)

    @classmethod
    def from_files(
        cls,
        table_path: PathLike,
        groups_path: Optional[PathLike] = None,
        options: Optional[SessionOptions] = None,
    ) -> "Session":
        group_map = load_group_map(groups_path) if groups_path is not None else {}
        return cls.from_rows(load_rows_csv(table_path), group_map, options)

    @property
    def edges(self) -> List[Edge]:
        return self.static_edges + self.query_edges

    @property
    def dirty(self) -> bool:
        """True when the query vector changed since the last :meth:`apply_query`."""

        return self.query.revision != self.applied_revision

    def apply_query(self) -> None:
        """Recompute query edges from the current vector and re-settle the layout."""

        self.query_edges = recompute_query_edges(self.query.vector, self.prototypes)
        self.engine.replace_edges(self.edges)
        self.engine.reheat(self.options.update_alpha)
        self.applied_revision = self.query.revision
        closest = self.closest_query_edge()
        logger.info(
            "Applied query revision %d; closest prototype %s at %.3f",
            self.applied_revision,
            closest.target if closest else None,
            closest.weight if closest else float("nan"),
        )

    def closest_query_edge(self) -> Optional[Edge]:
        return closest_edge(self.query_edges)

    def closest_prototype(self) -> Optional[Prototype]:
        edge = self.closest_query_edge()
        return self.prototypes.get(edge.target) if edge is not None else None

    def tick(self) -> Snapshot:
        return self.engine.step()

    def settle(self, max_steps: Optional[int] = None) -> Snapshot:
        return self.engine.run(max_steps)

    def snapshot(self) -> Snapshot:
        return self.engine.snapshot()


__all__ = ["Session", "SessionOptions", "UPDATE_ALPHA"]
