"""
Ranking quality metrics for search results: Precision@K, reciprocal rank,
mean reciprocal rank and similarity score distributions.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Set, Tuple

import numpy as np

from .types import SearchResult


@dataclass(frozen=True)
class PrecisionAtK:
    precision: float
    relevant: int
    k: int


def precision_at_k(results: Sequence[SearchResult], relevant: Set[int], k: int) -> PrecisionAtK:
    """Fraction of the top-k results whose index is in `relevant`.

    k is clipped to the number of results; an empty result list scores 0.
    """
    if k <= 0:
        raise ValueError(f"k must be positive, got {k}")

    top = list(results)[:k]
    if not top:
        return PrecisionAtK(precision=0.0, relevant=0, k=0)

    hits = sum(1 for index, _ in top if index in relevant)
    return PrecisionAtK(precision=hits / len(top), relevant=hits, k=len(top))


def reciprocal_rank(results: Sequence[SearchResult], relevant: Set[int]) -> float:
    """1 / rank of the first relevant result, or 0.0 if none is relevant."""
    for rank, (index, _) in enumerate(results, start=1):
        if index in relevant:
            return 1.0 / rank
    return 0.0


def mean_reciprocal_rank(runs: Iterable[Tuple[Sequence[SearchResult], Set[int]]]) -> float:
    """Average reciprocal rank over (results, relevant) pairs."""
    ranks = [reciprocal_rank(results, relevant) for results, relevant in runs]
    if not ranks:
        return 0.0
    return float(np.mean(ranks))


def score_distribution(scores: Iterable[float]) -> Dict[str, float]:
    """Summary statistics for a set of similarity scores."""
    values = np.asarray(list(scores), dtype=np.float64)
    if values.size == 0:
        return {"count": 0, "min": 0.0, "max": 0.0, "mean": 0.0, "std": 0.0}

    return {
        "count": int(values.size),
        "min": float(values.min()),
        "max": float(values.max()),
        "mean": float(values.mean()),
        "std": float(values.std()),
    }


def result_scores(results: Sequence[SearchResult]) -> List[float]:
    return [score for _, score in results]
