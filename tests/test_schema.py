import pytest

from protoscape.schema import (
    DEFAULT_GROUP,
    FeatureKind,
    build_feature_specs,
    build_schema,
    classify_feature,
    group_features,
    humanize,
)

COLUMNS = [
    "max_height",
    "is_woody",
    "leaf_shape-ovate",
    "leaf_shape-linear",
    "flower_color-red",
    "flower_color-white",
    "is_evergreen",
]

GROUPS = {
    "max_height": "growth_form",
    "is_woody": "growth_form",
    "leaf_shape-ovate": "leaves",
    "leaf_shape-linear": "leaves",
    "flower_color-red": "flowers",
    "flower_color-white": "flowers",
}


@pytest.mark.parametrize(
    "text, expected",
    [
        ("leaf_shape", "Leaf Shape"),
        ("LEAF_SHAPE", "Leaf Shape"),
        ("height", "Height"),
        ("is_woody", "Is Woody"),
    ],
)
def test_humanize(text, expected):
    assert humanize(text) == expected


@pytest.mark.parametrize(
    "name, kind",
    [
        ("max_height", FeatureKind.CONTINUOUS),
        ("is_woody", FeatureKind.BINARY),
        ("leaf_shape-ovate", FeatureKind.CATEGORICAL),
        ("is_native-europe", FeatureKind.BINARY),
    ],
)
def test_classify_feature(name, kind):
    assert classify_feature(name) is kind


def test_labels_per_kind():
    specs = {spec.raw_name: spec for spec in build_feature_specs(COLUMNS, GROUPS)}

    height = specs["max_height"]
    assert (height.trait_label, height.option_label) == ("Max Height", "Max Height")

    woody = specs["is_woody"]
    assert (woody.trait_label, woody.option_label) == ("Is Woody", "Woody")

    ovate = specs["leaf_shape-ovate"]
    assert (ovate.trait_label, ovate.option_label) == ("Leaf Shape", "Ovate")


def test_option_label_stops_at_second_separator():
    (spec,) = build_feature_specs(["leaf-dark-green"])

    assert spec.kind is FeatureKind.CATEGORICAL
    assert (spec.trait_label, spec.option_label) == ("Leaf", "Dark")


def test_specs_keep_column_order_and_default_group():
    specs = build_feature_specs(COLUMNS, GROUPS)

    assert [spec.index for spec in specs] == list(range(len(COLUMNS)))
    assert [spec.raw_name for spec in specs] == COLUMNS
    assert specs[-1].group == DEFAULT_GROUP
    assert specs[0].group == "growth_form"


def test_group_features_coalesces_categorical_options():
    groups = group_features(build_feature_specs(COLUMNS, GROUPS))

    assert list(groups) == ["growth_form", "leaves", "flowers", DEFAULT_GROUP]
    leaves = groups["leaves"]
    assert len(leaves) == 1
    assert leaves[0].label == "Leaf Shape"
    assert leaves[0].kind is FeatureKind.CATEGORICAL
    assert [o.option_label for o in leaves[0].options] == ["Ovate", "Linear"]
    assert leaves[0].indices == [2, 3]

    growth = groups["growth_form"]
    assert [(t.label, t.kind) for t in growth] == [
        ("Max Height", FeatureKind.CONTINUOUS),
        ("Is Woody", FeatureKind.BINARY),
    ]


def test_same_label_different_kind_is_not_merged():
    groups = group_features(build_feature_specs(["colour", "colour-red"]))

    traits = groups[DEFAULT_GROUP]
    assert [(t.label, t.kind) for t in traits] == [
        ("Colour", FeatureKind.CONTINUOUS),
        ("Colour", FeatureKind.CATEGORICAL),
    ]


def test_grouping_never_reorders_slots():
    shuffled = {"flower_color-red": "a", "max_height": "b", "leaf_shape-linear": "a"}
    schema = build_schema(COLUMNS, shuffled)

    assert schema.names == COLUMNS
    assert len(schema) == len(COLUMNS)
    assert sorted(i for _, trait in schema.traits() for i in trait.indices) == list(range(len(COLUMNS)))
