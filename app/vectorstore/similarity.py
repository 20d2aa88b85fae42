"""
Cosine similarity scoring and top-K ranking
"""

from __future__ import annotations

import heapq
from typing import Sequence

import numpy as np

from app.core.exceptions import DimensionMismatchError
from app.vectorstore.protocol import IndexEntry, SearchResult


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine of the angle between two vectors.

    Returns 0.0 when either vector has zero magnitude. The result is
    clipped to [-1, 1] to absorb floating-point drift.

    Raises:
        DimensionMismatchError: If the vectors differ in length
    """
    a_arr = np.asarray(a, dtype=float)
    b_arr = np.asarray(b, dtype=float)
    if a_arr.shape != b_arr.shape:
        raise DimensionMismatchError(expected=a_arr.size, actual=b_arr.size)

    denom = float(np.linalg.norm(a_arr) * np.linalg.norm(b_arr))
    if denom == 0.0:
        return 0.0
    return float(np.clip(np.dot(a_arr, b_arr) / denom, -1.0, 1.0))


def cosine_similarities(
    matrix: np.ndarray,
    norms: np.ndarray,
    query: Sequence[float],
) -> np.ndarray:
    """
    Score every row of ``matrix`` against ``query`` in one pass.

    Args:
        matrix: (n, d) array of stored vectors
        norms: (n,) precomputed row magnitudes
        query: d-dimensional query vector

    Returns:
        (n,) array of cosine similarities, 0.0 where a magnitude is zero
    """
    q = np.asarray(query, dtype=float)
    if matrix.ndim != 2 or q.shape != (matrix.shape[1],):
        raise DimensionMismatchError(expected=matrix.shape[-1], actual=q.size)

    dots = matrix @ q
    denom = norms * np.linalg.norm(q)
    scores = np.divide(dots, denom, out=np.zeros_like(dots), where=denom > 0)
    return np.clip(scores, -1.0, 1.0)


def rank_top_k(
    entries: Sequence[IndexEntry],
    scores: Sequence[float],
    top_k: int,
) -> list[SearchResult]:
    """Highest scores first; equal scores ordered by ascending record id."""

    best = heapq.nsmallest(
        top_k,
        range(len(entries)),
        key=lambda i: (-float(scores[i]), entries[i].record_id),
    )
    return [SearchResult(entry=entries[i], score=float(scores[i])) for i in best]
