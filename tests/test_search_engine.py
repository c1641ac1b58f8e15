"""
Tests for the similarity search engine: strategy selection, strategy
equivalence, threshold filtering, ordering and dimension checks.
"""

import numpy as np
import pytest

from nl_embeddings.core.errors import DimensionMismatch, UnsupportedNormalization
from nl_embeddings.vector.search import SimilaritySearchEngine, cosine_similarity
from nl_embeddings.vector.types import SearchResult, SearchStrategy

from conftest import random_unit_vectors

TOLERANCE = 1e-4


def assert_results_match(first, second, tolerance=TOLERANCE):
    """Same ranking and scores within tolerance."""
    assert len(first) == len(second)
    for position, (a, b) in enumerate(zip(first, second)):
        assert a.index == b.index, f"Ranking mismatch at position {position}"
        assert abs(a.score - b.score) < tolerance, f"Score mismatch at position {position}"


@pytest.fixture
def engine():
    return SimilaritySearchEngine()


@pytest.fixture
def query():
    return random_unit_vectors(1, 64, seed=7)[0]


def test_default_threshold_is_100(engine):
    assert engine.optimization_threshold == 100


def test_negative_threshold_rejected():
    with pytest.raises(ValueError):
        SimilaritySearchEngine(optimization_threshold=-1)


def test_strategy_selection_switches_at_threshold():
    engine = SimilaritySearchEngine(optimization_threshold=50)

    assert engine.select_strategy(1) == SearchStrategy.POINTWISE
    assert engine.select_strategy(49) == SearchStrategy.POINTWISE
    assert engine.select_strategy(50) == SearchStrategy.BATCHED
    assert engine.select_strategy(500) == SearchStrategy.BATCHED


def test_zero_threshold_always_batches():
    assert SimilaritySearchEngine(optimization_threshold=0).select_strategy(1) == SearchStrategy.BATCHED


@pytest.mark.parametrize("threshold", [None, -1.0, 0.0, 0.5, 1.0])
def test_empty_collection_returns_empty(engine, threshold):
    """Searching nothing yields nothing, whatever the query looks like."""
    assert engine.search([0.1, 0.2], [], threshold) == []
    assert engine.search([], [], threshold) == []
    assert engine.search("not a vector", [], threshold) == []


@pytest.mark.parametrize("size", [1, 5, 10, 49, 50, 99, 100, 101, 150])
def test_pointwise_and_batched_agree(engine, query, size):
    """Both strategies return identical rankings and scores on the same data."""
    candidates = random_unit_vectors(size, 64, seed=size)

    pointwise = engine.search(query, candidates, strategy=SearchStrategy.POINTWISE)
    batched = engine.search(query, candidates, strategy=SearchStrategy.BATCHED)

    assert len(pointwise) == size
    assert_results_match(pointwise, batched)


@pytest.mark.parametrize("size", [5, 15, 120, 250])
def test_threshold_choice_does_not_change_results(query, size):
    """Engines with low, default and high thresholds agree on every size."""
    candidates = random_unit_vectors(size, 64, seed=size + 1)

    low = SimilaritySearchEngine(optimization_threshold=10).search(query, candidates)
    default = SimilaritySearchEngine().search(query, candidates)
    high = SimilaritySearchEngine(optimization_threshold=200).search(query, candidates)

    assert_results_match(low, default)
    assert_results_match(default, high)


def test_switch_point_has_no_discontinuity(query):
    """49 items (point-wise) and the same 49 plus one (batched) rank shared items identically."""
    engine = SimilaritySearchEngine(optimization_threshold=50)
    fifty = random_unit_vectors(50, 64, seed=3)
    forty_nine = fifty[:49]

    below = engine.search(query, forty_nine)
    at = engine.search(query, fifty)

    shared = [r for r in at if r.index < 49]
    assert len(at) == 50
    assert_results_match(below, shared)


def test_pointwise_and_batched_agree_on_non_unit_vectors(engine):
    """The full cosine formula is applied when vectors are not normalized."""
    rng = np.random.default_rng(11)
    candidates = (rng.normal(size=(30, 16)) * rng.uniform(0.1, 10.0, size=(30, 1))).tolist()
    query = (rng.normal(size=16) * 3.0).tolist()

    pointwise = engine.search(query, candidates, strategy=SearchStrategy.POINTWISE)
    batched = engine.search(query, candidates, strategy=SearchStrategy.BATCHED)

    assert_results_match(pointwise, batched)
    assert all(-1.0 <= r.score <= 1.0 for r in pointwise)


def test_results_sorted_descending(engine, query):
    results = engine.search(query, random_unit_vectors(40, 64, seed=5))
    scores = [r.score for r in results]

    assert scores == sorted(scores, reverse=True)
    assert sorted(r.index for r in results) == list(range(40))


@pytest.mark.parametrize("strategy", [SearchStrategy.POINTWISE, SearchStrategy.BATCHED])
def test_threshold_monotonicity(engine, query, strategy):
    """Raising the minimum similarity never adds results; every score clears it."""
    candidates = random_unit_vectors(120, 64, seed=9)
    previous_count = None

    for minimum in [-1.0, -0.5, -0.1, 0.0, 0.05, 0.1, 0.2, 0.5, 0.9, 1.0]:
        results = engine.search(query, candidates, minimum, strategy=strategy)

        assert all(r.score >= minimum for r in results)
        if previous_count is not None:
            assert len(results) <= previous_count
        previous_count = len(results)


@pytest.mark.parametrize("strategy", [SearchStrategy.POINTWISE, SearchStrategy.BATCHED])
def test_threshold_filter_preserves_order(engine, query, strategy):
    candidates = random_unit_vectors(60, 64, seed=13)

    unfiltered = engine.search(query, candidates, strategy=strategy)
    filtered = engine.search(query, candidates, 0.05, strategy=strategy)

    assert filtered == [r for r in unfiltered if r.score >= 0.05]


def test_threshold_is_inclusive(engine):
    candidates = [[1.0, 0.0], [0.0, 1.0]]

    results = engine.search([1.0, 0.0], candidates, minimum_similarity=1.0)

    assert results == [SearchResult(index=0, score=1.0)]


@pytest.mark.parametrize("strategy", [SearchStrategy.POINTWISE, SearchStrategy.BATCHED])
def test_equal_scores_keep_index_order(engine, strategy):
    candidates = [[0.0, 1.0], [1.0, 0.0], [1.0, 0.0], [0.0, 1.0], [1.0, 0.0]]

    results = engine.search([1.0, 0.0], candidates, strategy=strategy)

    assert [r.index for r in results] == [1, 2, 4, 0, 3]
    assert [r.score for r in results] == [1.0, 1.0, 1.0, 0.0, 0.0]


def test_self_similarity(engine, query):
    results = engine.search(query, [query])

    assert len(results) == 1
    assert results[0].index == 0
    assert results[0].score >= 0.99


@pytest.mark.parametrize("strategy", [SearchStrategy.POINTWISE, SearchStrategy.BATCHED])
def test_dimension_mismatch_raises(engine, strategy):
    with pytest.raises(DimensionMismatch):
        engine.search([1.0, 0.0, 0.0], [[1.0, 0.0, 0.0, 0.0], [0.0, 1.0, 0.0, 0.0]], strategy=strategy)


def test_dimension_mismatch_reports_dimensions(engine):
    with pytest.raises(DimensionMismatch) as exc_info:
        engine.search([1.0, 0.0], [[1.0, 0.0, 0.0]])

    assert exc_info.value.expected == 2
    assert exc_info.value.actual == 3


def test_ragged_collection_is_unsupported(engine):
    with pytest.raises(UnsupportedNormalization):
        engine.search([1.0, 0.0], [[1.0, 0.0], [1.0, 0.0, 0.0]])


def test_nested_candidates_are_unsupported(engine):
    with pytest.raises(UnsupportedNormalization):
        engine.search([1.0, 0.0], [[[1.0, 0.0]], [[0.0, 1.0]]])


def test_non_numeric_candidates_are_unsupported(engine):
    with pytest.raises(UnsupportedNormalization):
        engine.search([1.0, 0.0], [["a", "b"]])


def test_accepts_numpy_inputs(engine):
    candidates = np.array([[0.0, 1.0], [1.0, 0.0]])

    results = engine.search(np.array([1.0, 0.0]), candidates)

    assert [r.index for r in results] == [1, 0]


def test_results_unpack_as_pairs(engine):
    results = engine.search([1.0, 0.0], [[0.6, 0.8]])
    index, score = results[0]

    assert index == 0
    assert score == pytest.approx(0.6)


class TestCosineSimilarity:
    """Cosine similarity including the non-unit path."""

    def test_parallel_vectors(self):
        assert cosine_similarity([3.0, 4.0], [6.0, 8.0]) == pytest.approx(1.0)

    def test_orthogonal_vectors(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 2.0]) == pytest.approx(0.0)

    def test_opposite_vectors(self):
        assert cosine_similarity([1.0, 0.0], [-2.0, 0.0]) == pytest.approx(-1.0)

    def test_zero_vector_scores_zero(self):
        assert cosine_similarity([0.0, 0.0], [1.0, 0.0]) == 0.0

    def test_overshoot_is_clamped(self):
        """Near-unit vectors skip the division, so the dot product is clamped."""
        a = [1.0 + 1e-7, 0.0]

        assert cosine_similarity(a, a) == 1.0

    def test_batched_overshoot_is_clamped(self):
        a = [1.0 + 1e-7, 0.0]
        results = SimilaritySearchEngine(optimization_threshold=0).search(a, [a, a])

        assert [r.score for r in results] == [1.0, 1.0]

    def test_mismatched_lengths(self):
        with pytest.raises(DimensionMismatch):
            cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
