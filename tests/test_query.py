import numpy as np
import pytest

from protoscape.dataset import Prototype, PrototypeSet, UnknownPrototypeError
from protoscape.query import QueryState, SlotIndexError, SlotRangeError, round_half_up


def _state(strict_range=False):
    protos = PrototypeSet(
        [
            Prototype("oak", "Oak", None, np.array([1.0, 1.0, 0.0])),
            Prototype("daisy", "Daisy", None, np.array([0.1, 0.0, 1.0])),
            Prototype("grass", "Grass", None, np.array([0.1, 0.0, 0.0])),
        ],
        ["max_height", "is_woody", "flower_color-white"],
    )
    return QueryState(protos, strict_range=strict_range)


def test_initial_vector_is_mean():
    state = _state()

    assert state.vector == pytest.approx([0.4, 1 / 3, 1 / 3])


def test_set_from_prototype_copies_vector():
    state = _state()
    state.set_from_prototype("daisy")

    assert state.vector.tolist() == [0.1, 0.0, 1.0]
    state.set_slot_continuous(0, 0.9)
    assert state.prototypes.vector("daisy")[0] == 0.1


def test_unknown_prototype_is_rejected():
    state = _state()
    before = state.vector

    with pytest.raises(UnknownPrototypeError):
        state.set_from_prototype("cactus")
    assert np.array_equal(state.vector, before)


def test_mean_is_reproducible():
    state = _state()
    state.set_to_mean()
    mean = state.vector
    state.set_from_prototype("oak")
    state.set_to_mean()

    assert np.array_equal(state.vector, mean)


def test_set_all_slots():
    state = _state()
    state.set_all_slots(1)
    assert state.vector.tolist() == [1.0, 1.0, 1.0]
    state.set_all_slots(0)
    assert state.vector.tolist() == [0.0, 0.0, 0.0]


@pytest.mark.parametrize("start", [0.0, 1.0])
def test_toggle_twice_restores_binary_value(start):
    state = _state()
    state.set_all_slots(start)
    state.toggle_slot_binary(1)
    assert state.value(1) == 1.0 - start
    state.toggle_slot_binary(1)
    assert state.value(1) == start


@pytest.mark.parametrize("start, flipped", [(0.4, 1.0), (0.5, 0.0), (0.9999, 0.0), (1e-9, 1.0)])
def test_toggle_rounds_before_flipping(start, flipped):
    state = _state()
    state.set_slot_continuous(2, start)
    state.toggle_slot_binary(2)
    assert state.value(2) == flipped
    state.toggle_slot_binary(2)
    assert state.value(2) == round_half_up(start)


def test_checked_uses_rounding():
    state = _state()
    state.set_slot_continuous(1, 0.6)
    assert state.checked(1)
    state.set_slot_continuous(1, 0.4)
    assert not state.checked(1)


@pytest.mark.parametrize("slot", [3, -1, 1.5, True, "0"])
def test_unknown_slot_is_rejected_without_mutation(slot):
    state = _state()
    before = state.vector
    revision = state.revision

    with pytest.raises(SlotIndexError):
        state.set_slot_continuous(slot, 0.5)
    with pytest.raises(SlotIndexError):
        state.toggle_slot_binary(slot)

    assert np.array_equal(state.vector, before)
    assert state.revision == revision


def test_continuous_values_are_not_revalidated_by_default():
    state = _state()
    state.set_slot_continuous(0, 1.7)
    assert state.value(0) == 1.7


def test_strict_range_rejects_out_of_range_values():
    state = _state(strict_range=True)
    before = state.vector

    with pytest.raises(SlotRangeError):
        state.set_slot_continuous(0, 1.2)
    assert np.array_equal(state.vector, before)
    state.set_slot_continuous(0, 1.0)
    assert state.value(0) == 1.0


@pytest.mark.parametrize(
    "operation",
    [
        lambda s: s.set_from_prototype("grass"),
        lambda s: s.set_to_mean(),
        lambda s: s.set_slot_continuous(0, 0.25),
        lambda s: s.toggle_slot_binary(2),
        lambda s: s.set_all_slots(0.0),
    ],
)
def test_vector_length_is_preserved(operation):
    state = _state()
    operation(state)

    assert len(state.vector) == len(state.prototypes.columns)
    assert len(state) == 3


def test_vector_property_returns_copy():
    state = _state()
    vec = state.vector
    vec[:] = 9.0

    assert state.value(0) != 9.0


@pytest.mark.parametrize("value", [float("nan"), float("inf"), -float("inf")])
def test_non_finite_values_are_rejected_without_mutation(value):
    state = _state()
    before = state.vector
    revision = state.revision

    with pytest.raises(SlotRangeError):
        state.set_slot_continuous(0, value)
    with pytest.raises(SlotRangeError):
        state.set_all_slots(value)
    assert np.array_equal(state.vector, before)
    assert state.revision == revision
