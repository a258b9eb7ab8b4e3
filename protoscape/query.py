"""Query-point state: the single mutable feature vector."""

from __future__ import annotations

import logging
import math
import numbers

import numpy as np

from .dataset import PrototypeSet
from .distance import mean_vector
from .logging_utils import apply_debug_logging

logger = logging.getLogger(__name__)


class SlotIndexError(IndexError):
    """Raised for a slot index outside the feature vector."""


class SlotRangeError(ValueError):
    """Raised for non-finite slot values, and in strict mode for values outside ``[0, 1]``."""


def round_half_up(value: float) -> float:
    """Round to the nearest integer, halves away from zero for positives."""

    return float(math.floor(value + 0.5))


class QueryState:
    """Owns the query vector and the operations that edit it.

    Operations never trigger recomputation; callers recompute the query edges
    and reheat the layout afterwards.
    """

    def __init__(self, prototypes: PrototypeSet, *, strict_range: bool = False):
        self.prototypes = prototypes
        self.strict_range = strict_range
        self._vector = mean_vector(prototypes).astype(float)
        self.revision = 0
        logger.info("Query vector seeded with the mean of %d prototypes", len(prototypes))

    def __len__(self) -> int:
        return self._vector.size

    @property
    def vector(self) -> np.ndarray:
        return self._vector.copy()

    def value(self, slot: int) -> float:
        return float(self._vector[self._check_slot(slot)])

    def checked(self, slot: int) -> bool:
        return round_half_up(self.value(slot)) == 1.0

    def _check_slot(self, slot: object) -> int:
        if isinstance(slot, bool) or not isinstance(slot, numbers.Integral):
            raise SlotIndexError(f"slot index must be an integer, got {slot!r}")
        index = int(slot)
        if not 0 <= index < self._vector.size:
            raise SlotIndexError(f"slot {index} outside 0..{self._vector.size - 1}")
        return index

    def _commit(self, vector: np.ndarray) -> None:
        if vector.shape != self._vector.shape:  # pragma: no cover - internal invariant
            raise AssertionError(f"query vector shape changed to {vector.shape}")
        self._vector = vector
        self.revision += 1

    def set_from_prototype(self, prototype_id: str) -> None:
        self._commit(np.array(self.prototypes.vector(prototype_id), dtype=float))

    def set_to_mean(self) -> None:
        self._commit(mean_vector(self.prototypes).astype(float))

    def set_slot_continuous(self, slot: int, value: float) -> None:
        index = self._check_slot(slot)
        value = float(value)
        if not math.isfinite(value):
            raise SlotRangeError(f"slot {index} value {value} is not finite")
        if self.strict_range and not 0.0 <= value <= 1.0:
            raise SlotRangeError(f"slot {index} value {value} outside [0, 1]")
        vector = self._vector.copy()
        vector[index] = value
        self._commit(vector)

    def toggle_slot_binary(self, slot: int) -> None:
        index = self._check_slot(slot)
        vector = self._vector.copy()
        vector[index] = 1.0 - round_half_up(float(vector[index]))
        self._commit(vector)

    def set_all_slots(self, value: float) -> None:
        value = float(value)
        if not math.isfinite(value):
            raise SlotRangeError(f"value {value} is not finite")
        self._commit(np.full(self._vector.shape, value, dtype=float))


apply_debug_logging(globals(), logger=logger, skip={"round_half_up", "QueryState._check_slot"})


__all__ = ["QueryState", "SlotIndexError", "SlotRangeError", "round_half_up"]
