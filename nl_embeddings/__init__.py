"""
nl_embeddings - mean-pooled sentence embeddings and cosine similarity search.

Example usage:
    >>> from nl_embeddings import EmbeddingService
    >>> service = EmbeddingService()
    >>> docs = [service.generate_embeddings(t) for t in ["reset my password", "shipping times"]]
    >>> service.search("forgot password", docs, minimum_similarity=0.5)
"""

from .core.config import VERSION as __version__
from .core.errors import (
    EmbeddingError,
    ModelUnavailable,
    MissingAssets,
    EmptyInput,
    InvalidDimension,
    NoTokensProduced,
    DimensionMismatch,
    UnsupportedNormalization,
)
from .vector import (
    SearchResult,
    SearchStrategy,
    ModelSpec,
    EmbeddingService,
    SimilaritySearchEngine,
    encode,
)

__all__ = [
    # Errors
    "EmbeddingError",
    "ModelUnavailable",
    "MissingAssets",
    "EmptyInput",
    "InvalidDimension",
    "NoTokensProduced",
    "DimensionMismatch",
    "UnsupportedNormalization",
    # Core
    "SearchResult",
    "SearchStrategy",
    "ModelSpec",
    "EmbeddingService",
    "SimilaritySearchEngine",
    "encode",
]
