"""Prototype tables: plain row structures, CSV and group-map loaders."""

from __future__ import annotations

import csv
import json
import logging
import math
import numbers
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Union

import numpy as np

logger = logging.getLogger(__name__)

QUERY_ID = "query"
IDENTITY_COLUMNS = 4

PathLike = Union[str, Path]


class DatasetError(ValueError):
    """Raised when prototype rows or the group map are malformed."""


class EmptyPrototypeSetError(DatasetError):
    """Raised when an operation needs at least one prototype and got none."""


class UnknownPrototypeError(KeyError):
    """Raised when a prototype id is not part of the loaded set."""


@dataclass
class DatasetOptions:
    identity_columns: int = IDENTITY_COLUMNS
    id_field: str = "scientific_name"
    name_field: str = "common_name"
    image_field: str = "image"


@dataclass
class Prototype:
    id: str
    display_name: str
    image: Optional[str]
    vector: np.ndarray
    extra: Dict[str, Any] = field(default_factory=dict)


class PrototypeSet:
    """Ordered, immutable collection of prototypes with a shared feature matrix."""

    def __init__(self, prototypes: Sequence[Prototype], columns: Sequence[str]):
        if not prototypes:
            raise EmptyPrototypeSetError("at least one prototype is required")
        self.columns: List[str] = list(columns)
        self._prototypes: List[Prototype] = list(prototypes)
        self.index: Dict[str, int] = {}
        for row, proto in enumerate(self._prototypes):
            if proto.id == QUERY_ID:
                raise DatasetError(f"prototype id '{QUERY_ID}' is reserved for the query point")
            if proto.id in self.index:
                raise DatasetError(f"duplicate prototype id '{proto.id}'")
            if proto.vector.shape != (len(self.columns),):
                raise DatasetError(
                    f"prototype '{proto.id}' has {proto.vector.size} feature values, "
                    f"expected {len(self.columns)}"
                )
            self.index[proto.id] = row
        self.matrix = np.vstack([proto.vector for proto in self._prototypes]).astype(float)
        self.matrix.setflags(write=False)

    def __len__(self) -> int:
        return len(self._prototypes)

    def __iter__(self) -> Iterator[Prototype]:
        return iter(self._prototypes)

    def __getitem__(self, row: int) -> Prototype:
        return self._prototypes[row]

    @property
    def ids(self) -> List[str]:
        return [proto.id for proto in self._prototypes]

    @property
    def dimension(self) -> int:
        return len(self.columns)

    def row_of(self, prototype_id: str) -> int:
        try:
            return self.index[prototype_id]
        except KeyError as exc:
            raise UnknownPrototypeError(f"unknown prototype '{prototype_id}'") from exc

    def get(self, prototype_id: str) -> Prototype:
        return self._prototypes[self.row_of(prototype_id)]

    def vector(self, prototype_id: str) -> np.ndarray:
        return self.matrix[self.row_of(prototype_id)]


def coerce_value(value: object) -> Optional[float]:
    """Coerce a cell to float, accepting numbers, booleans and numeric text."""

    if value is None:
        return None
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, numbers.Real):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if text.lower() in ("true", "false"):
            return 1.0 if text.lower() == "true" else 0.0
        try:
            return float(text)
        except ValueError:
            return None
    return None


def _feature_vector(row_id: str, row: Mapping[str, Any], columns: Sequence[str]) -> np.ndarray:
    values: List[float] = []
    for column in columns:
        if column not in row:
            raise DatasetError(f"prototype '{row_id}' is missing feature column '{column}'")
        value = coerce_value(row[column])
        if value is None or not math.isfinite(value):
            raise DatasetError(
                f"prototype '{row_id}' has non-numeric value {row[column]!r} in column '{column}'"
            )
        values.append(value)
    return np.asarray(values, dtype=float)


def prototypes_from_rows(
    rows: Iterable[Mapping[str, Any]], options: Optional[DatasetOptions] = None
) -> PrototypeSet:
    """Build a :class:`PrototypeSet` from ordered row mappings.

    The first ``options.identity_columns`` keys of the first row are identity
    metadata; every later key is a feature column, in order.
    """

    options = options or DatasetOptions()
    rows = list(rows)
    if not rows:
        raise EmptyPrototypeSetError("prototype table has no rows")

    keys = list(rows[0].keys())
    if len(keys) <= options.identity_columns:
        raise DatasetError(
            f"expected more than {options.identity_columns} columns, got {len(keys)}"
        )
    identity = keys[: options.identity_columns]
    columns = keys[options.identity_columns :]

    prototypes: List[Prototype] = []
    for row in rows:
        raw_id = row.get(options.id_field)
        if raw_id is None or str(raw_id) == "":
            raise DatasetError(f"row without '{options.id_field}': {dict(row)!r}")
        proto_id = str(raw_id)
        name = row.get(options.name_field)
        image = row.get(options.image_field)
        extra = {
            key: row[key]
            for key in identity
            if key not in (options.id_field, options.name_field, options.image_field) and key in row
        }
        prototypes.append(
            Prototype(
                id=proto_id,
                display_name=str(name) if name is not None else proto_id,
                image=str(image) if image is not None else None,
                vector=_feature_vector(proto_id, row, columns),
                extra=extra,
            )
        )

    proto_set = PrototypeSet(prototypes, columns)
    logger.info(
        "Loaded %d prototypes with %d feature columns", len(proto_set), proto_set.dimension
    )
    return proto_set


def load_rows_csv(path: PathLike) -> List[Dict[str, str]]:
    with open(path, newline="", encoding="utf-8") as fh:
        rows = list(csv.DictReader(fh))
    logger.info("Read %d rows from %s", len(rows), path)
    return rows


def load_group_map(path: PathLike) -> Dict[str, str]:
    with open(path, encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, dict):
        raise DatasetError(f"group map {path} must be a JSON object")
    group_map = {str(key): str(value) for key, value in data.items()}
    logger.info(
        "Read group map with %d features in %d groups from %s",
        len(group_map),
        len(set(group_map.values())),
        path,
    )
    return group_map


__all__ = [
    "DatasetError",
    "DatasetOptions",
    "EmptyPrototypeSetError",
    "IDENTITY_COLUMNS",
    "Prototype",
    "PrototypeSet",
    "QUERY_ID",
    "UnknownPrototypeError",
    "coerce_value",
    "load_group_map",
    "load_rows_csv",
    "prototypes_from_rows",
]
