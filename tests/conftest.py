"""
Shared fixtures for encoder and search tests.
"""

import itertools

import numpy as np
import pytest

from nl_embeddings.vector.token_sources import ITokenVectorSource, DeterministicHashTokenSource


class FixedTokenSource(ITokenVectorSource):
    """Token source that yields a fixed list of vectors for every sentence."""

    model_identifier = "fixed"

    def __init__(self, vectors, dimension=None, available=True):
        self.vectors = [list(v) for v in vectors]
        self._dimension = dimension if dimension is not None else (len(self.vectors[0]) if self.vectors else 0)
        self._available = available
        self.calls = 0
        self.assets_requested = 0
        self.languages = ["en"]
        self.scripts = ["latin"]

    @property
    def dimension(self):
        return self._dimension

    @property
    def has_available_assets(self):
        return self._available

    def request_assets(self):
        self.assets_requested += 1
        self._available = True

    def token_vectors(self, sentence, language=None):
        self.calls += 1
        for vector in self.vectors:
            yield vector


_SUBJECTS = ["The engineer", "A carpenter", "My neighbour", "The old sailor", "Our manager", "The young artist"]
_VERBS = ["repaired", "painted", "described", "ignored", "celebrated"]
_OBJECTS = ["the broken bridge", "a quiet garden", "the morning market", "an empty stadium", "the winter harbour"]


def make_corpus(size):
    """Distinct, deterministic sentences for collection-size tests."""
    sentences = [
        f"{s} {v} {o}"
        for s, v, o in itertools.product(_SUBJECTS, _VERBS, _OBJECTS)
    ]
    assert size <= len(sentences)
    return sentences[:size]


def random_unit_vectors(count, dimension, seed=42):
    rng = np.random.default_rng(seed)
    vectors = rng.normal(size=(count, dimension))
    vectors /= np.linalg.norm(vectors, axis=1, keepdims=True)
    return [v.tolist() for v in vectors]


@pytest.fixture
def hash_source():
    return DeterministicHashTokenSource(dimension=384)


@pytest.fixture
def fixed_source_factory():
    return FixedTokenSource
