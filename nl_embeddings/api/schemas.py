"""
Request and response models for the embedding HTTP API.
"""

from pydantic import BaseModel, field_validator
from typing import List, Optional


class EmbedRequest(BaseModel):
    sentence: str
    language: Optional[str] = None

    @field_validator('sentence')
    @classmethod
    def sentence_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('sentence cannot be empty')
        return v


class EmbedResponse(BaseModel):
    embedding: List[float]
    dimension: int


class SearchRequest(BaseModel):
    """Search a query sentence against caller-supplied embeddings."""
    query: str
    embeddings: List[List[float]]
    minimum_similarity: Optional[float] = None
    language: Optional[str] = None

    @field_validator('query')
    @classmethod
    def query_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('query cannot be empty')
        return v

    @field_validator('minimum_similarity')
    @classmethod
    def minimum_similarity_in_range(cls, v):
        if v is not None and not -1.0 <= v <= 1.0:
            raise ValueError('minimum_similarity must be between -1 and 1')
        return v


class SearchResultItem(BaseModel):
    index: int
    score: float


class SearchResponse(BaseModel):
    results: List[SearchResultItem]
    count: int


class ModelInfoResponse(BaseModel):
    model_identifier: str
    dimension: int
    available_assets: bool
    languages: List[str]
    scripts: List[str]
    optimization_threshold: int


class HealthResponse(BaseModel):
    status: str
    version: str
    model_available: bool
    dimension: int


class ErrorResponse(BaseModel):
    error: str
    detail: str
