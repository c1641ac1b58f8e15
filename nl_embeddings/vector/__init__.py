"""
Sentence embeddings: token-vector sources, pooling encoder and similarity search.
"""

# Package initialization for vector module
from .types import SearchResult, SearchStrategy, ModelSpec
from .token_sources import ITokenVectorSource, DeterministicHashTokenSource, SentenceTransformerTokenSource
from .pooling import encode, mean_pool, l2_normalize
from .search import SimilaritySearchEngine, cosine_similarity
from .service import EmbeddingService

__all__ = [
    'SearchResult',
    'SearchStrategy',
    'ModelSpec',
    'ITokenVectorSource',
    'DeterministicHashTokenSource',
    'SentenceTransformerTokenSource',
    'encode',
    'mean_pool',
    'l2_normalize',
    'SimilaritySearchEngine',
    'cosine_similarity',
    'EmbeddingService'
]
