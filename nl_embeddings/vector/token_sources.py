"""
Token-vector sources: the models that turn a sentence into one vector per token.
The encoder treats these as opaque, ordered, finite streams.
"""

from abc import ABC, abstractmethod
import hashlib
import re
from typing import Iterator, List, Optional, Sequence

import numpy as np
from sentence_transformers import SentenceTransformer

from ..core.errors import MissingAssets, ModelUnavailable
from ..util.logging import logger
from .types import ModelSpec

# Models used when a ModelSpec names a language or script instead of a model
LATIN_MODEL = "all-MiniLM-L6-v2"
MULTILINGUAL_MODEL = "paraphrase-multilingual-MiniLM-L12-v2"

_TOKEN_PATTERN = re.compile(r"\w+|[^\w\s]", re.UNICODE)


class ITokenVectorSource(ABC):
    """Abstract interface for per-token contextual embedding models."""

    model_identifier: str = "unknown"
    languages: Sequence[str] = ()
    scripts: Sequence[str] = ()

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Dimension of every token vector this source yields."""
        pass

    @property
    @abstractmethod
    def has_available_assets(self) -> bool:
        """Whether the model can produce vectors right now."""
        pass

    @abstractmethod
    def request_assets(self) -> None:
        """Provision model assets (download, load). Raises MissingAssets on failure."""
        pass

    @abstractmethod
    def token_vectors(self, sentence: str, language: Optional[str] = None) -> Iterator[List[float]]:
        """Yield one vector per token of the sentence, in token order."""
        pass


class DeterministicHashTokenSource(ITokenVectorSource):
    """Deterministic hash-based token vectors for testing and offline use.

    Each word or punctuation token is hashed into a reproducible vector, so
    identical sentences pool to identical embeddings and sentences sharing
    tokens score higher than unrelated ones. No model download is needed.
    """

    model_identifier = "deterministic-hash"

    def __init__(self, dimension: int = 384):
        self._dimension = dimension
        self.languages = []
        self.scripts = []

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def has_available_assets(self) -> bool:
        return True

    def request_assets(self) -> None:
        # Nothing to provision
        return None

    def tokenize(self, sentence: str) -> List[str]:
        return _TOKEN_PATTERN.findall(sentence.lower())

    def token_vector(self, token: str) -> List[float]:
        """Generate the deterministic vector for a single token."""
        vector = []
        block = 0
        while len(vector) < self._dimension:
            hex_dig = hashlib.md5(f"{token}:{block}".encode()).hexdigest()

            # Each 8-hex chunk becomes one value mapped into [-1, 1]
            for i in range(0, len(hex_dig), 8):
                if len(vector) >= self._dimension:
                    break
                value = int(hex_dig[i:i + 8], 16) % (2**32)
                vector.append((value / (2**32)) * 2 - 1)
            block += 1

        return vector

    def token_vectors(self, sentence: str, language: Optional[str] = None) -> Iterator[List[float]]:
        for token in self.tokenize(sentence):
            yield self.token_vector(token)


class SentenceTransformerTokenSource(ITokenVectorSource):
    """Token vectors from a sentence-transformers model.

    Uses the transformer's last hidden state per token
    (``output_value="token_embeddings"``), leaving pooling to the encoder.
    The model is loaded by request_assets().
    """

    def __init__(self, spec: Optional[ModelSpec] = None):
        self.spec = spec or ModelSpec()
        self.model_identifier = self.resolve_model_name(self.spec)
        self.languages = [self.spec.language] if self.spec.language else []
        self.scripts = []
        if self.spec.language is None and self.spec.model_identifier is None:
            self.scripts = [self.spec.script or "latin"]
        self._model = None

    @staticmethod
    def resolve_model_name(spec: ModelSpec) -> str:
        """Map a ModelSpec onto a concrete sentence-transformers model name."""
        if spec.model_identifier is not None:
            if not spec.model_identifier.strip():
                raise ModelUnavailable("Empty model identifier")
            return spec.model_identifier
        if spec.language is not None:
            return LATIN_MODEL if spec.language.lower() in ("en", "english") else MULTILINGUAL_MODEL
        script = (spec.script or "latin").lower()
        return LATIN_MODEL if script == "latin" else MULTILINGUAL_MODEL

    @property
    def model(self):
        if self._model is None:
            raise MissingAssets(f"Assets for model {self.model_identifier} have not been requested")
        return self._model

    @property
    def dimension(self) -> int:
        if self._model is None:
            return 0
        # Token embeddings come from the first (Transformer) module, before any
        # Dense projection changes the sentence embedding size
        first_module = self._model[0]
        if not hasattr(first_module, "get_word_embedding_dimension"):
            return 0
        return first_module.get_word_embedding_dimension() or 0

    @property
    def has_available_assets(self) -> bool:
        return self._model is not None

    def request_assets(self) -> None:
        if self._model is not None:
            return

        try:
            self._model = SentenceTransformer(self.model_identifier)
        except OSError as e:
            # Download or cache lookup failed
            raise MissingAssets(f"Could not fetch assets for model {self.model_identifier}: {e}") from e
        except Exception as e:
            raise ModelUnavailable(f"Could not load model {self.model_identifier}: {e}") from e

    def token_vectors(self, sentence: str, language: Optional[str] = None) -> Iterator[List[float]]:
        if language is not None:
            logger.debug(f"Language hint '{language}' for model {self.model_identifier}")

        token_embeddings = self.model.encode(sentence, output_value="token_embeddings")

        # Torch tensors come back for token output; move them to numpy
        if hasattr(token_embeddings, "detach"):
            token_embeddings = token_embeddings.detach().cpu().numpy()

        for row in np.asarray(token_embeddings, dtype=np.float64):
            yield row.tolist()
