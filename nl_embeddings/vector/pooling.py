"""
Pooling/normalization encoder.

Turns the per-token vectors of one sentence into a single embedding by mean
pooling followed by L2 normalization. Pooled vectors whose norm is at or below
epsilon are returned unnormalized instead of dividing by a near-zero norm, so
unit length is guaranteed only for non-degenerate sentences.
"""

from typing import Iterable, List, Optional, Sequence

import numpy as np

from ..core.errors import EmptyInput, InvalidDimension, MissingAssets, NoTokensProduced
from ..util.logging import logger
from .token_sources import ITokenVectorSource

DEFAULT_EPSILON = 1e-10


def mean_pool(token_vectors: Iterable[Sequence[float]], dimension: int) -> np.ndarray:
    """
    Average a stream of token vectors element-wise.

    The stream is consumed fully and only once; vectors are accumulated in
    place rather than stored.

    Args:
        token_vectors: Per-token vectors, each of length `dimension`
        dimension: Expected vector dimension

    Returns:
        Mean-pooled vector as a float64 array

    Raises:
        InvalidDimension: dimension is not positive or a token vector has the wrong length
        NoTokensProduced: the stream was empty
    """
    if dimension <= 0:
        raise InvalidDimension(f"Model dimension must be positive, got {dimension}")

    accumulator = np.zeros(dimension, dtype=np.float64)
    token_count = 0

    for token_vector in token_vectors:
        vector = np.asarray(token_vector, dtype=np.float64)
        if vector.shape != (dimension,):
            raise InvalidDimension(
                f"Token {token_count} has shape {vector.shape}, expected ({dimension},)"
            )
        accumulator += vector
        token_count += 1

    if token_count == 0:
        raise NoTokensProduced("Tokenization produced no token vectors")

    return accumulator / token_count


def l2_normalize(vector: np.ndarray, epsilon: float = DEFAULT_EPSILON) -> np.ndarray:
    """Scale a vector to unit length; near-zero vectors are returned as-is."""
    norm = np.linalg.norm(vector)
    if norm <= epsilon:
        return vector
    return vector / norm


def encode(
    sentence: str,
    source: ITokenVectorSource,
    language: Optional[str] = None,
    epsilon: float = DEFAULT_EPSILON,
) -> List[float]:
    """
    Generate a normalized sentence embedding using mean pooling and L2 normalization.

    Preconditions are checked before the source is asked for any token.

    Args:
        sentence: Text to embed
        source: Token-vector source (external model)
        language: Optional language hint passed through to the source
        epsilon: Norm at or below which the pooled vector is left unnormalized

    Returns:
        Embedding of length source.dimension

    Raises:
        EmptyInput, MissingAssets, InvalidDimension, NoTokensProduced
    """
    if not sentence:
        raise EmptyInput("Cannot embed an empty sentence")

    if not source.has_available_assets:
        raise MissingAssets(f"Assets for model {source.model_identifier} are not available")

    dimension = source.dimension
    if dimension <= 0:
        raise InvalidDimension(f"Model {source.model_identifier} reports dimension {dimension}")

    token_count = 0

    def counted(vectors):
        nonlocal token_count
        for vector in vectors:
            token_count += 1
            yield vector

    try:
        pooled = mean_pool(counted(source.token_vectors(sentence, language=language)), dimension)
    except (InvalidDimension, NoTokensProduced) as e:
        logger.log_encode(token_count, dimension, status="failed", details={"error": str(e)})
        raise

    normalized = l2_normalize(pooled, epsilon)
    logger.log_encode(token_count, dimension, degenerate=normalized is pooled)

    return normalized.tolist()
