from .schema import (
    FeatureKind,
    FeatureSchema,
    FeatureSpec,
    Trait,
    build_feature_specs,
    build_schema,
    classify_feature,
    group_features,
    humanize,
)
from .dataset import (
    QUERY_ID,
    DatasetError,
    DatasetOptions,
    EmptyPrototypeSetError,
    Prototype,
    PrototypeSet,
    UnknownPrototypeError,
    load_group_map,
    load_rows_csv,
    prototypes_from_rows,
)
from .distance import (
    DimensionMismatch,
    Edge,
    build_static_edges,
    closest_edge,
    distance,
    edge_key,
    mean_vector,
    recompute_query_edges,
)
from .query import QueryState, SlotIndexError, SlotRangeError
from .layout import EngineState, LayoutEngine, LayoutOptions, Node, NodeKind, Snapshot
from .config import get_layout_options, set_layout_options
from .session import Session, SessionOptions
from .controls import Control, ControlGroup, ControlKind, build_controls, refresh_controls
from .render import RenderFrame, render_frame
from .interaction import InteractionAdapter

__all__ = [
    'QUERY_ID',
    'FeatureKind',
    'FeatureSchema',
    'FeatureSpec',
    'Trait',
    'build_feature_specs',
    'build_schema',
    'classify_feature',
    'group_features',
    'humanize',
    'DatasetError',
    'DatasetOptions',
    'EmptyPrototypeSetError',
    'Prototype',
    'PrototypeSet',
    'UnknownPrototypeError',
    'load_group_map',
    'load_rows_csv',
    'prototypes_from_rows',
    'DimensionMismatch',
    'Edge',
    'build_static_edges',
    'closest_edge',
    'distance',
    'edge_key',
    'mean_vector',
    'recompute_query_edges',
    'QueryState',
    'SlotIndexError',
    'SlotRangeError',
    'EngineState',
    'LayoutEngine',
    'LayoutOptions',
    'Node',
    'NodeKind',
    'Snapshot',
    'get_layout_options',
    'set_layout_options',
    'Session',
    'SessionOptions',
    'Control',
    'ControlGroup',
    'ControlKind',
    'build_controls',
    'refresh_controls',
    'RenderFrame',
    'render_frame',
    'InteractionAdapter',
]
