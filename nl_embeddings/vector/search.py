"""
Similarity search engine.

Ranks a query embedding against an in-memory candidate collection by cosine
similarity. Small collections are scored one candidate at a time; collections
of at least `optimization_threshold` items are stacked into a matrix and
scored with a single matrix-vector product. Both strategies share the same
cosine definition, filtering and ordering, so they return the same ranking.
"""

from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from ..core.errors import DimensionMismatch, UnsupportedNormalization
from ..util.logging import logger
from .types import SearchResult, SearchStrategy

DEFAULT_OPTIMIZATION_THRESHOLD = 100

# Norms this close to 1 are treated as unit length and not divided out
UNIT_NORM_TOLERANCE = 1e-6


def _is_unit(norm: float) -> bool:
    return abs(norm - 1.0) <= UNIT_NORM_TOLERANCE


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity between two vectors, clamped to [-1, 1].

    For unit vectors this is the plain dot product and the magnitude
    division is skipped. A zero-magnitude vector has similarity 0.0.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape:
        raise DimensionMismatch(len(a), len(b))

    dot = float(np.dot(a, b))
    norm_a = float(np.linalg.norm(a))
    norm_b = float(np.linalg.norm(b))

    if not (_is_unit(norm_a) and _is_unit(norm_b)):
        denominator = norm_a * norm_b
        if denominator == 0.0:
            return 0.0
        dot = dot / denominator

    return min(max(dot, -1.0), 1.0)


class SimilaritySearchEngine:
    """Cosine similarity search with an adaptive point-wise/batched strategy."""

    def __init__(self, optimization_threshold: int = DEFAULT_OPTIMIZATION_THRESHOLD):
        """
        Initialize the search engine.

        Args:
            optimization_threshold: Collections with fewer candidates than this
                use the point-wise loop, larger ones the batched matrix product.
                Fixed for the lifetime of the engine.
        """
        if optimization_threshold < 0:
            raise ValueError(f"optimization_threshold must be >= 0, got {optimization_threshold}")
        self._optimization_threshold = int(optimization_threshold)

    @property
    def optimization_threshold(self) -> int:
        return self._optimization_threshold

    def select_strategy(self, count: int) -> SearchStrategy:
        """Pick the strategy used for a collection of `count` candidates."""
        if count < self._optimization_threshold:
            return SearchStrategy.POINTWISE
        return SearchStrategy.BATCHED

    def search(
        self,
        query: Sequence[float],
        candidates: Sequence[Sequence[float]],
        minimum_similarity: Optional[float] = None,
        strategy: SearchStrategy = SearchStrategy.AUTO,
    ) -> List[SearchResult]:
        """
        Rank candidates by cosine similarity to the query.

        Args:
            query: Query embedding
            candidates: Candidate embeddings; result indices refer to this order
            minimum_similarity: Keep only results with score >= this value
            strategy: AUTO applies the size threshold; POINTWISE or BATCHED force one

        Returns:
            SearchResults sorted by score descending, ties in index order

        Raises:
            DimensionMismatch: candidates and query differ in dimension
            UnsupportedNormalization: candidates are ragged or not flat vectors
        """
        if len(candidates) == 0:
            return []

        query_vector, candidate_vectors = self._prepare(query, candidates)

        if strategy == SearchStrategy.AUTO:
            strategy = self.select_strategy(len(candidate_vectors))

        if strategy == SearchStrategy.POINTWISE:
            scored = self._score_pointwise(query_vector, candidate_vectors)
        else:
            scored = self._score_batched(query_vector, candidate_vectors)

        results = self._rank(scored, minimum_similarity)
        logger.log_search(len(candidate_vectors), strategy.value, len(results), minimum_similarity)
        return results

    def _prepare(self, query, candidates) -> Tuple[np.ndarray, List[np.ndarray]]:
        """Convert inputs to float64 arrays and check dimensions."""
        try:
            query_vector = np.asarray(query, dtype=np.float64)
            candidate_vectors = [np.asarray(c, dtype=np.float64) for c in candidates]
        except (TypeError, ValueError) as e:
            raise UnsupportedNormalization(f"Embeddings must be numeric vectors: {e}") from e

        if query_vector.ndim != 1:
            raise UnsupportedNormalization(f"Query must be a flat vector, got shape {query_vector.shape}")

        for index, vector in enumerate(candidate_vectors):
            if vector.ndim != 1:
                raise UnsupportedNormalization(
                    f"Candidate {index} must be a flat vector, got shape {vector.shape}"
                )

        dimension = candidate_vectors[0].shape[0]
        for index, vector in enumerate(candidate_vectors):
            if vector.shape[0] != dimension:
                logger.log_search(len(candidate_vectors), "none", 0, status="failed")
                raise UnsupportedNormalization(
                    f"Candidate collection is heterogeneous: candidate {index} has dimension "
                    f"{vector.shape[0]}, candidate 0 has dimension {dimension}"
                )

        if query_vector.shape[0] != dimension:
            logger.log_search(len(candidate_vectors), "none", 0, status="failed")
            raise DimensionMismatch(query_vector.shape[0], dimension)

        return query_vector, candidate_vectors

    def _score_pointwise(self, query_vector: np.ndarray, candidate_vectors: List[np.ndarray]) -> List[Tuple[int, float]]:
        """Score each candidate independently."""
        return [
            (index, cosine_similarity(query_vector, vector))
            for index, vector in enumerate(candidate_vectors)
        ]

    def _score_batched(self, query_vector: np.ndarray, candidate_vectors: List[np.ndarray]) -> List[Tuple[int, float]]:
        """Score all candidates with one matrix-vector product."""
        # count x dimension, one row per candidate
        matrix = np.vstack(candidate_vectors)
        dots = matrix @ query_vector

        query_norm = float(np.linalg.norm(query_vector))
        row_norms = np.linalg.norm(matrix, axis=1)

        # Same rule as cosine_similarity: divide only where a norm is not unit
        unit_rows = np.abs(row_norms - 1.0) <= UNIT_NORM_TOLERANCE
        if _is_unit(query_norm):
            needs_division = ~unit_rows
        else:
            needs_division = np.ones(len(row_norms), dtype=bool)

        denominators = row_norms * query_norm
        similarities = dots.copy()
        divisible = needs_division & (denominators != 0.0)
        similarities[divisible] = dots[divisible] / denominators[divisible]
        similarities[needs_division & (denominators == 0.0)] = 0.0

        similarities = np.clip(similarities, -1.0, 1.0)
        return [(index, float(score)) for index, score in enumerate(similarities)]

    def _rank(self, scored: Iterable[Tuple[int, float]], minimum_similarity: Optional[float]) -> List[SearchResult]:
        """Filter by threshold and sort descending; sorted() keeps ties in index order."""
        if minimum_similarity is not None:
            scored = [(index, score) for index, score in scored if score >= minimum_similarity]

        results = [SearchResult(index=index, score=score) for index, score in scored]
        return sorted(results, key=lambda r: r.score, reverse=True)
