"""
Unit tests for cosine similarity and top-K ranking
"""

import math

import numpy as np
import pytest

from app.core.exceptions import DimensionMismatchError
from app.vectorstore.memory import IndexSnapshot
from app.vectorstore.protocol import IndexEntry
from app.vectorstore.schemas import SchoolRecord
from app.vectorstore.similarity import cosine_similarities, cosine_similarity, rank_top_k


def _entry(record_id: int, vector: tuple[float, ...]) -> IndexEntry:
    record = SchoolRecord(
        id=record_id,
        name=f"School {record_id}",
        address="1 Main St",
        city="Springfield",
    )
    return IndexEntry(record_id=record_id, vector=vector, record=record)


@pytest.mark.parametrize(
    "vector",
    [
        [1.0, 0.0, 0.0],
        [0.3, -2.5, 7.1],
        [1e-3, 4e-3, -2e-3, 9e-3],
    ],
)
def test_vector_with_itself_is_one(vector):
    assert math.isclose(cosine_similarity(vector, vector), 1.0, abs_tol=1e-9)


@pytest.mark.parametrize("vector", [[1.0, 2.0, 3.0], [-0.5, 0.25, 8.0]])
def test_vector_with_its_negation_is_minus_one(vector):
    negated = [-value for value in vector]
    assert math.isclose(cosine_similarity(vector, negated), -1.0, abs_tol=1e-9)


def test_zero_vector_scores_zero():
    assert cosine_similarity([0.0, 0.0, 0.0], [1.0, 2.0, 3.0]) == 0.0
    assert cosine_similarity([1.0, 2.0, 3.0], [0.0, 0.0, 0.0]) == 0.0
    assert cosine_similarity([0.0, 0.0], [0.0, 0.0]) == 0.0


def test_orthogonal_vectors_score_zero():
    assert math.isclose(cosine_similarity([1.0, 0.0], [0.0, 5.0]), 0.0, abs_tol=1e-12)


def test_dimension_mismatch_raises():
    with pytest.raises(DimensionMismatchError) as exc_info:
        cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0])

    assert exc_info.value.expected == 2
    assert exc_info.value.actual == 3


def test_batch_scores_match_pairwise_scores():
    rows = [[1.0, 0.0], [0.0, 0.0], [1.0, 1.0], [-1.0, 0.0]]
    matrix = np.asarray(rows)
    norms = np.linalg.norm(matrix, axis=1)
    query = [2.0, 0.0]

    scores = cosine_similarities(matrix, norms, query)

    expected = [cosine_similarity(row, query) for row in rows]
    assert np.allclose(scores, expected)
    assert scores[1] == 0.0


def test_batch_scores_reject_wrong_query_length():
    matrix = np.ones((2, 3))
    with pytest.raises(DimensionMismatchError):
        cosine_similarities(matrix, np.linalg.norm(matrix, axis=1), [1.0, 1.0])


def test_rank_orders_by_score_then_record_id():
    entries = [_entry(5, (1.0,)), _entry(2, (1.0,)), _entry(9, (1.0,)), _entry(1, (1.0,))]
    scores = [0.5, 0.9, 0.9, 0.1]

    results = rank_top_k(entries, scores, top_k=3)

    assert [r.entry.record_id for r in results] == [2, 9, 5]
    assert [r.score for r in results] == [0.9, 0.9, 0.5]


def test_rank_returns_fewer_when_index_is_small():
    entries = [_entry(1, (1.0,)), _entry(2, (1.0,))]

    results = rank_top_k(entries, [0.2, 0.3], top_k=10)

    assert [r.entry.record_id for r in results] == [2, 1]


def test_snapshot_rejects_mixed_dimensions():
    with pytest.raises(DimensionMismatchError):
        IndexSnapshot.build([_entry(1, (1.0, 0.0)), _entry(2, (1.0, 0.0, 0.0))])


def test_snapshot_score_rejects_wrong_query_dimension():
    snapshot = IndexSnapshot.build([_entry(1, (1.0, 0.0))])

    with pytest.raises(DimensionMismatchError):
        snapshot.score([1.0, 0.0, 0.0])


def test_empty_snapshot():
    snapshot = IndexSnapshot()

    assert snapshot.is_empty
    assert len(snapshot) == 0
    assert snapshot.dimension is None
    assert snapshot.score([1.0, 2.0]).size == 0
