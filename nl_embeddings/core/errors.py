"""
Error taxonomy for embedding generation and similarity search.
All failures are local and synchronous; nothing here is retried.
"""


class EmbeddingError(Exception):
    """Base exception for embedding and search operations."""
    pass


class ModelUnavailable(EmbeddingError):
    """The token-vector model could not be constructed or located."""
    pass


class MissingAssets(EmbeddingError):
    """The model exists but its assets have not been provisioned."""
    pass


class EmptyInput(EmbeddingError):
    """An empty sentence was passed for encoding."""
    pass


class InvalidDimension(EmbeddingError):
    """The model reports (or yields) vectors of an unusable dimension."""
    pass


class NoTokensProduced(EmbeddingError):
    """A non-empty sentence tokenized into zero token vectors."""
    pass


class DimensionMismatch(EmbeddingError):
    """Query and candidate embeddings differ in dimension."""

    def __init__(self, expected: int, actual: int, index: int = 0):
        self.expected = expected
        self.actual = actual
        self.index = index
        super().__init__(
            f"Candidate {index} has dimension {actual}, query has dimension {expected}"
        )


class UnsupportedNormalization(EmbeddingError):
    """The candidate set is heterogeneous or not a collection of flat vectors."""
    pass
