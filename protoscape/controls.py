"""Control-panel descriptors derived from the feature schema.

The widget layer builds one control per :class:`Control` and writes edits back
through :class:`~protoscape.interaction.InteractionAdapter`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional, Sequence

import numpy as np

from .query import round_half_up
from .schema import FeatureKind, FeatureSchema, Trait, humanize

SLIDER_MIN = 0.0
SLIDER_MAX = 1.0
SLIDER_STEP = 0.001


class ControlKind(str, Enum):
    SLIDER = "slider"
    SWITCH = "switch"
    MULTI = "multi"


_KIND_BY_FEATURE = {
    FeatureKind.CONTINUOUS: ControlKind.SLIDER,
    FeatureKind.BINARY: ControlKind.SWITCH,
    FeatureKind.CATEGORICAL: ControlKind.MULTI,
}


@dataclass(frozen=True)
class ControlOption:
    index: int
    raw_name: str
    label: str
    value: float
    checked: bool


@dataclass(frozen=True)
class Control:
    kind: ControlKind
    trait: str
    options: Sequence[ControlOption]
    minimum: float = SLIDER_MIN
    maximum: float = SLIDER_MAX
    step: float = SLIDER_STEP

    @property
    def caption(self) -> str:
        if self.kind is ControlKind.SLIDER:
            return f"{self.trait}: {self.options[0].value:.3f}"
        if self.kind is ControlKind.SWITCH:
            return f"{self.options[0].label}:"
        return f"{self.trait}:"


@dataclass
class ControlGroup:
    name: str
    title: str
    controls: List[Control] = field(default_factory=list)


def _option(spec_index: int, raw_name: str, label: str, vector: np.ndarray) -> ControlOption:
    value = float(vector[spec_index])
    return ControlOption(
        index=spec_index,
        raw_name=raw_name,
        label=label,
        value=value,
        checked=round_half_up(value) == 1.0,
    )


def _control(trait: Trait, vector: np.ndarray) -> Control:
    options = [_option(spec.index, spec.raw_name, spec.option_label, vector) for spec in trait.options]
    kind = _KIND_BY_FEATURE[trait.kind]
    if kind is not ControlKind.MULTI:
        # sliders and switches bind to a single slot
        options = options[:1]
    return Control(kind=kind, trait=trait.label, options=tuple(options))


def build_controls(schema: FeatureSchema, vector: Sequence[float]) -> List[ControlGroup]:
    values = np.asarray(vector, dtype=float)
    return [
        ControlGroup(
            name=group,
            title=humanize(group),
            controls=[_control(trait, values) for trait in traits],
        )
        for group, traits in schema.groups.items()
    ]


def refresh_controls(groups: Sequence[ControlGroup], vector: Sequence[float]) -> List[ControlGroup]:
    """Return copies of ``groups`` whose values follow ``vector``."""

    values = np.asarray(vector, dtype=float)
    refreshed: List[ControlGroup] = []
    for group in groups:
        controls = [
            replace(
                control,
                options=tuple(_option(o.index, o.raw_name, o.label, values) for o in control.options),
            )
            for control in group.controls
        ]
        refreshed.append(ControlGroup(name=group.name, title=group.title, controls=controls))
    return refreshed


def find_control(groups: Sequence[ControlGroup], slot: int) -> Optional[Control]:
    for group in groups:
        for control in group.controls:
            if any(option.index == slot for option in control.options):
                return control
    return None


__all__ = [
    "Control",
    "ControlGroup",
    "ControlKind",
    "ControlOption",
    "SLIDER_MAX",
    "SLIDER_MIN",
    "SLIDER_STEP",
    "build_controls",
    "find_control",
    "refresh_controls",
]
