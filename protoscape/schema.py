"""Feature schema: classify raw feature columns and group them for editing."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

BOOLEAN_PREFIX = "is_"
OPTION_SEPARATOR = "-"
WORD_DELIMITER = "_"
DEFAULT_GROUP = ""


class FeatureKind(str, Enum):
    CONTINUOUS = "continuous"
    BINARY = "binary"
    CATEGORICAL = "categorical"


@dataclass(frozen=True)
class FeatureSpec:
    """One feature slot: where it lives in every vector and how it is shown."""

    index: int
    raw_name: str
    kind: FeatureKind
    trait_label: str
    option_label: str
    group: str = DEFAULT_GROUP


@dataclass
class Trait:
    """Features of one group sharing a trait label and kind."""

    label: str
    kind: FeatureKind
    options: List[FeatureSpec] = field(default_factory=list)

    @property
    def indices(self) -> List[int]:
        return [spec.index for spec in self.options]


@dataclass
class FeatureSchema:
    features: List[FeatureSpec]
    groups: Dict[str, List[Trait]]

    def __len__(self) -> int:
        return len(self.features)

    @property
    def names(self) -> List[str]:
        return [spec.raw_name for spec in self.features]

    def feature(self, index: int) -> FeatureSpec:
        return self.features[index]

    def traits(self) -> List[Tuple[str, Trait]]:
        return [(group, trait) for group, traits in self.groups.items() for trait in traits]


def humanize(text: str) -> str:
    """Convert ``"ab_cd_ef"`` into ``"Ab Cd Ef"``."""

    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split(WORD_DELIMITER))


def classify_feature(name: str) -> FeatureKind:
    if name.startswith(BOOLEAN_PREFIX):
        return FeatureKind.BINARY
    if OPTION_SEPARATOR in name:
        return FeatureKind.CATEGORICAL
    return FeatureKind.CONTINUOUS


def _labels(name: str, kind: FeatureKind) -> Tuple[str, str]:
    head, _, tail = name.partition(OPTION_SEPARATOR)
    if kind is FeatureKind.CONTINUOUS:
        trait = humanize(name)
        return trait, trait
    trait = humanize(head)
    if kind is FeatureKind.CATEGORICAL:
        return trait, humanize(tail.split(OPTION_SEPARATOR)[0])
    prefix = humanize(BOOLEAN_PREFIX.rstrip(WORD_DELIMITER)) + " "
    option = trait[len(prefix):] if trait.startswith(prefix) else trait
    return trait, option


def build_feature_specs(
    columns: Sequence[str], group_map: Optional[Mapping[str, str]] = None
) -> List[FeatureSpec]:
    """Build one :class:`FeatureSpec` per column, preserving column order."""

    group_map = group_map or {}
    specs: List[FeatureSpec] = []
    for index, name in enumerate(columns):
        kind = classify_feature(name)
        trait, option = _labels(name, kind)
        group = group_map.get(name)
        specs.append(
            FeatureSpec(
                index=index,
                raw_name=name,
                kind=kind,
                trait_label=trait,
                option_label=option,
                group=DEFAULT_GROUP if group is None else str(group),
            )
        )
    return specs


def group_features(specs: Sequence[FeatureSpec]) -> Dict[str, List[Trait]]:
    """Group specs by group name, coalescing options of the same trait.

    Groups and traits keep first-seen order; options keep column order.
    """

    groups: Dict[str, Dict[Tuple[str, FeatureKind], Trait]] = {}
    for spec in specs:
        traits = groups.setdefault(spec.group, {})
        key = (spec.trait_label, spec.kind)
        trait = traits.get(key)
        if trait is None:
            trait = traits[key] = Trait(label=spec.trait_label, kind=spec.kind)
        trait.options.append(spec)
    return {group: list(traits.values()) for group, traits in groups.items()}


def build_schema(
    columns: Sequence[str], group_map: Optional[Mapping[str, str]] = None
) -> FeatureSchema:
    specs = build_feature_specs(columns, group_map)
    groups = group_features(specs)
    ungrouped = sum(1 for spec in specs if spec.group == DEFAULT_GROUP)
    logger.info(
        "Built feature schema with %d features in %d groups (%d ungrouped)",
        len(specs),
        len(groups),
        ungrouped,
    )
    return FeatureSchema(features=specs, groups=groups)


__all__ = [
    "BOOLEAN_PREFIX",
    "DEFAULT_GROUP",
    "FeatureKind",
    "FeatureSchema",
    "FeatureSpec",
    "OPTION_SEPARATOR",
    "Trait",
    "build_feature_specs",
    "build_schema",
    "classify_feature",
    "group_features",
    "humanize",
]
