"""
Value types shared by the encoder, the search engine and their callers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class SearchResult:
    """Represents one ranked candidate from a similarity search."""

    index: int
    """Position of the candidate in the searched collection"""

    score: float
    """Cosine similarity to the query, clamped to [-1, 1]"""

    def __iter__(self):
        # Allows `for index, score in results`
        yield self.index
        yield self.score


class SearchStrategy(str, Enum):
    """How the search engine computes similarities."""

    AUTO = "auto"
    POINTWISE = "pointwise"
    BATCHED = "batched"


@dataclass(frozen=True)
class ModelSpec:
    """Which contextual embedding model to load.

    Exactly one of language, script or model_identifier should be set.
    With nothing set the Latin-script model is used.
    """

    language: Optional[str] = None
    script: Optional[str] = None
    model_identifier: Optional[str] = None

    def __post_init__(self):
        given = [v for v in (self.language, self.script, self.model_identifier) if v is not None]
        if len(given) > 1:
            raise ValueError("ModelSpec takes only one of language, script or model_identifier")

    @classmethod
    def for_language(cls, language: str) -> "ModelSpec":
        return cls(language=language)

    @classmethod
    def for_script(cls, script: str) -> "ModelSpec":
        return cls(script=script)

    @classmethod
    def for_model(cls, model_identifier: str) -> "ModelSpec":
        return cls(model_identifier=model_identifier)

    def describe(self) -> str:
        if self.model_identifier is not None:
            return f"model:{self.model_identifier}"
        if self.language is not None:
            return f"language:{self.language}"
        return f"script:{self.script or 'latin'}"
