"""Event adapter between the host UI and the session."""

from __future__ import annotations

import logging
from typing import List, Optional

from .controls import SLIDER_MAX, SLIDER_MIN, ControlGroup, build_controls, refresh_controls
from .dataset import QUERY_ID
from .layout import Point2D
from .session import Session

logger = logging.getLogger(__name__)

DRAG_ALPHA_TARGET = 0.3
RESET_KEYS = {"0": 0.0, "1": 1.0}


class InteractionAdapter:
    """Translate pointer, keyboard and control events into session operations.

    With ``apply_on_change=False`` control edits only touch the query vector
    and :meth:`apply` (the APPLY button) commits them; double-clicks and the
    reset keys always apply immediately.
    """

    def __init__(self, session: Session, *, apply_on_change: bool = False):
        self.session = session
        self.apply_on_change = apply_on_change
        self.controls: List[ControlGroup] = build_controls(session.schema, session.query.vector)

    def _refresh(self) -> None:
        self.controls = refresh_controls(self.controls, self.session.query.vector)

    def apply(self) -> None:
        self.session.apply_query()

    def _edited(self) -> None:
        if self.apply_on_change:
            self.apply()

    # pointer ---------------------------------------------------------------

    def double_click(self, node_id: str) -> None:
        if node_id == QUERY_ID:
            self.session.query.set_to_mean()
        else:
            self.session.query.set_from_prototype(node_id)
        self.apply()
        self._refresh()

    def drag_start(self, node_id: str, position: Optional[Point2D] = None) -> None:
        engine = self.session.engine
        if position is None:
            position = engine.position(node_id)
        engine.reheat(max(engine.alpha, DRAG_ALPHA_TARGET), target=DRAG_ALPHA_TARGET)
        engine.pin(node_id, position)
        logger.debug("Drag started on %s at (%.1f, %.1f)", node_id, position[0], position[1])

    def drag(self, node_id: str, position: Point2D) -> None:
        self.session.engine.pin(node_id, position)

    def drag_end(self, node_id: str) -> None:
        engine = self.session.engine
        engine.unpin(node_id)
        # other nodes may still be held by another pointer
        if not engine.has_pinned:
            engine.cool()
        logger.debug("Drag ended on %s", node_id)

    # keyboard --------------------------------------------------------------

    def key_press(self, key: str) -> bool:
        value = RESET_KEYS.get(key)
        if value is None:
            return False
        self.session.query.set_all_slots(value)
        self.apply()
        self._refresh()
        return True

    # controls --------------------------------------------------------------

    def slider_input(self, slot: int, value: float) -> float:
        """Store a slider value, clamped to the slider's range; returns the stored value."""

        clamped = min(max(float(value), SLIDER_MIN), SLIDER_MAX)
        self.session.query.set_slot_continuous(slot, clamped)
        self._refresh()
        self._edited()
        return clamped

    def checkbox_change(self, slot: int) -> bool:
        """Flip a binary or categorical slot; returns the new checked state."""

        self.session.query.toggle_slot_binary(slot)
        self._refresh()
        self._edited()
        return self.session.query.checked(slot)


__all__ = ["DRAG_ALPHA_TARGET", "InteractionAdapter", "RESET_KEYS"]
