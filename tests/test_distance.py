import math

import numpy as np
import pytest

from protoscape.dataset import EmptyPrototypeSetError, Prototype, PrototypeSet
from protoscape.distance import (
    DimensionMismatch,
    Edge,
    build_static_edges,
    closest_edge,
    distance,
    distance_matrix,
    edge_key,
    mean_vector,
    recompute_query_edges,
)


def _prototypes(vectors):
    dim = len(vectors[0])
    return PrototypeSet(
        [Prototype(f"p{i}", f"Proto {i}", None, np.asarray(v, dtype=float)) for i, v in enumerate(vectors)],
        [f"f{j}" for j in range(dim)],
    )


@pytest.mark.parametrize(
    "a, b",
    [
        ([0.0, 0.0], [3.0, 4.0]),
        ([0.2, 0.9, 1.0], [1.0, 0.1, 0.0]),
        ([5.0], [-5.0]),
    ],
)
def test_distance_is_symmetric_and_non_negative(a, b):
    assert distance(a, b) == distance(b, a)
    assert distance(a, b) >= 0.0
    assert distance(a, a) == 0.0


def test_distance_value():
    assert distance([0.0, 0.0], [3.0, 4.0]) == pytest.approx(5.0)


def test_distance_rejects_length_mismatch():
    with pytest.raises(DimensionMismatch):
        distance([0.0, 1.0], [0.0, 1.0, 2.0])


def test_three_prototype_example():
    protos = _prototypes([[0, 0], [1, 0], [0, 1]])

    static = build_static_edges(protos)
    assert [(e.source, e.target) for e in static] == [("p0", "p1"), ("p0", "p2"), ("p1", "p2")]
    assert [e.weight for e in static] == pytest.approx([1.0, 1.0, math.sqrt(2.0)])

    mean = mean_vector(protos)
    assert mean == pytest.approx([1 / 3, 1 / 3])

    query = recompute_query_edges(mean, protos)
    assert [e.target for e in query] == ["p0", "p1", "p2"]
    assert all(e.source == "query" for e in query)
    assert query[0].weight == pytest.approx(math.sqrt(2.0) / 3)
    assert query[1].weight == pytest.approx(math.sqrt(5.0) / 3)
    assert query[2].weight == pytest.approx(math.sqrt(5.0) / 3)


def test_static_edge_count_is_quadratic():
    rng = np.random.default_rng(7)
    protos = _prototypes(rng.random((9, 4)).tolist())

    edges = build_static_edges(protos)

    assert len(edges) == 9 * 8 // 2
    assert len({e.key for e in edges}) == len(edges)
    for e in edges:
        assert e.weight == pytest.approx(distance(protos.vector(e.source), protos.vector(e.target)))


def test_query_edges_match_distance_exactly():
    rng = np.random.default_rng(11)
    protos = _prototypes(rng.random((6, 5)).tolist())
    query = rng.random(5)

    edges = recompute_query_edges(query, protos)

    for edge in edges:
        assert edge.weight == distance(query, protos.vector(edge.target))


def test_query_edges_are_a_fresh_list():
    protos = _prototypes([[0, 0], [1, 1]])
    first = recompute_query_edges([0, 0], protos)
    second = recompute_query_edges([1, 1], protos)

    assert first is not second
    assert first[0].weight == 0.0
    assert second[1].weight == 0.0


def test_query_edges_reject_wrong_dimension():
    protos = _prototypes([[0, 0], [1, 1]])

    with pytest.raises(DimensionMismatch):
        recompute_query_edges([0, 0, 0], protos)


def test_empty_prototype_set_is_rejected():
    with pytest.raises(EmptyPrototypeSetError):
        PrototypeSet([], ["f0"])
    with pytest.raises(EmptyPrototypeSetError):
        build_static_edges(None)


def test_single_prototype_has_no_static_edges():
    protos = _prototypes([[0.5, 0.5]])

    assert build_static_edges(protos) == []
    assert distance_matrix(protos).shape == (1, 1)


def test_distance_matrix_is_symmetric():
    protos = _prototypes([[0, 0], [1, 0], [0, 1]])
    matrix = distance_matrix(protos)

    assert np.allclose(matrix, matrix.T)
    assert np.allclose(np.diag(matrix), 0.0)
    assert matrix[1, 2] == pytest.approx(math.sqrt(2.0))


def test_edge_key_identity():
    assert edge_key("b", "a") == ("a", "b")
    assert edge_key("query", "a") == ("query", "a")
    assert edge_key("zeta", "query") == ("query", "zeta")
    assert Edge("query", "a", 0.1).key == ("query", "a")
    assert Edge("query", "a", 0.1).is_query
    assert not Edge("a", "b", 0.1).is_query


def test_closest_edge_prefers_first_on_ties():
    edges = [Edge("query", "a", 0.5), Edge("query", "b", 0.2), Edge("query", "c", 0.2)]

    assert closest_edge(edges).target == "b"
    assert closest_edge([]) is None
