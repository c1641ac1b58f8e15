"""
Embedding service: one token-vector model plus one search engine.
Provides sentence encoding and sentence-to-collection search for callers.
"""

from typing import Any, Dict, List, Optional, Sequence

from ..core import config
from ..core.errors import EmbeddingError, ModelUnavailable
from ..util.logging import logger
from .pooling import encode
from .search import SimilaritySearchEngine
from .token_sources import ITokenVectorSource
from .types import ModelSpec, SearchResult


class EmbeddingService:
    """
    Generate and search sentence embeddings.

    The model handle and optimization threshold are fixed after construction,
    so one instance can be shared across threads without locking.
    """

    def __init__(
        self,
        source: Optional[ITokenVectorSource] = None,
        spec: Optional[ModelSpec] = None,
        optimization_threshold: Optional[int] = None,
    ):
        """
        Initialize the embedding service.

        Args:
            source: Token-vector source; built from config (and spec) when omitted
            spec: Model to load when no source is given
            optimization_threshold: Point-wise/batched switch point, defaults to config
        """
        if source is None:
            try:
                source = config.get_token_source(spec)
            except EmbeddingError:
                raise
            except Exception as e:
                raise ModelUnavailable(f"Could not construct token source: {e}") from e

        if not source.has_available_assets:
            logger.log_model_assets(source.model_identifier, "requesting")
            try:
                source.request_assets()
            except EmbeddingError as e:
                logger.log_model_assets(source.model_identifier, "failed", {"error": str(e)})
                raise
            logger.log_model_assets(source.model_identifier, "available")

        if optimization_threshold is None:
            optimization_threshold = config.get_optimization_threshold()

        self.source = source
        self.engine = SimilaritySearchEngine(optimization_threshold)
        self.epsilon = config.get_norm_epsilon()

    @property
    def is_model_available(self) -> bool:
        """Indicates if the embedding model has its assets available."""
        return self.source.has_available_assets

    @property
    def dimension(self) -> int:
        return self.source.dimension

    @property
    def optimization_threshold(self) -> int:
        return self.engine.optimization_threshold

    def generate_embeddings(self, sentence: str, language: Optional[str] = None) -> List[float]:
        """Generate a normalized embedding for a sentence (mean pooling + L2 normalization)."""
        return encode(sentence, self.source, language=language, epsilon=self.epsilon)

    def search(
        self,
        query: str,
        embeddings: Sequence[Sequence[float]],
        minimum_similarity: Optional[float] = None,
        language: Optional[str] = None,
    ) -> List[SearchResult]:
        """
        Search for the embeddings most similar to a query sentence.

        Args:
            query: The query sentence
            embeddings: Pre-computed embeddings to search through
            minimum_similarity: Only return results with similarity >= this value.
                Around 0.85 keeps relevant results, 0.90 high-confidence matches.
            language: Optional language hint for embedding the query

        Returns:
            SearchResults sorted by similarity (descending)
        """
        if len(embeddings) == 0:
            return []

        query_embedding = self.generate_embeddings(query, language=language)
        return self.engine.search(query_embedding, embeddings, minimum_similarity)

    def model_info(self) -> Dict[str, Any]:
        """Provides information about the loaded embedding model."""
        return {
            "model_identifier": self.source.model_identifier,
            "dimension": self.source.dimension,
            "available_assets": self.source.has_available_assets,
            "languages": list(self.source.languages),
            "scripts": list(self.source.scripts),
            "optimization_threshold": self.engine.optimization_threshold,
        }

    def format_model_info(self) -> str:
        info = self.model_info()
        return "\n".join([
            f"Model Identifier: {info['model_identifier']}",
            f"Dimension: {info['dimension']}",
            f"Available Assets: {info['available_assets']}",
            f"Languages: {info['languages']}",
            f"Scripts: {info['scripts']}",
        ])
