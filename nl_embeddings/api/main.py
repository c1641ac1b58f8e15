"""
HTTP API over the embedding service: encode sentences and search collections.
"""

import threading

from fastapi import FastAPI, Depends
from fastapi.responses import JSONResponse

from .schemas import (
    EmbedRequest,
    EmbedResponse,
    SearchRequest,
    SearchResponse,
    SearchResultItem,
    ModelInfoResponse,
    HealthResponse,
    ErrorResponse,
)
from ..core.config import VERSION, debug_enabled
from ..core.errors import (
    EmbeddingError,
    ModelUnavailable,
    MissingAssets,
)
from ..util.logging import logger
from ..vector.service import EmbeddingService

# Model problems are the server's; everything else is about the request
_UNAVAILABLE_ERRORS = (ModelUnavailable, MissingAssets)

_service = None
_service_lock = threading.Lock()


def get_service() -> EmbeddingService:
    """Shared service instance, created once on first use."""
    global _service
    if _service is None:
        with _service_lock:
            if _service is None:
                _service = EmbeddingService()
    return _service


# Initialize the FastAPI application
app = FastAPI(
    title="Sentence Embeddings API",
    version=VERSION,
    description="Mean-pooled sentence embeddings and cosine similarity search",
    docs_url="/docs" if debug_enabled() else None,
    redoc_url="/redoc" if debug_enabled() else None
)


@app.get("/health", response_model=HealthResponse)
def health_check_endpoint(service: EmbeddingService = Depends(get_service)):
    """Check model health."""
    available = service.is_model_available
    return HealthResponse(
        status="healthy" if available else "unhealthy",
        version=VERSION,
        model_available=available,
        dimension=service.dimension
    )


@app.get("/model", response_model=ModelInfoResponse)
def model_info_endpoint(service: EmbeddingService = Depends(get_service)):
    """Describe the loaded embedding model."""
    return ModelInfoResponse(**service.model_info())


@app.post("/embed", response_model=EmbedResponse)
def embed_endpoint(request: EmbedRequest, service: EmbeddingService = Depends(get_service)):
    """Generate a normalized embedding for one sentence."""
    embedding = service.generate_embeddings(request.sentence, language=request.language)
    return EmbedResponse(embedding=embedding, dimension=len(embedding))


@app.post("/search", response_model=SearchResponse)
def search_endpoint(request: SearchRequest, service: EmbeddingService = Depends(get_service)):
    """Rank the supplied embeddings against a query sentence."""
    results = service.search(
        request.query,
        request.embeddings,
        minimum_similarity=request.minimum_similarity,
        language=request.language
    )
    return SearchResponse(
        results=[SearchResultItem(index=r.index, score=r.score) for r in results],
        count=len(results)
    )


@app.exception_handler(EmbeddingError)
async def embedding_error_handler(request, exc):
    """Map embedding failures onto HTTP status codes."""
    status_code = 503 if isinstance(exc, _UNAVAILABLE_ERRORS) else 422
    logger.warning(f"Embedding request failed: {type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=type(exc).__name__, detail=str(exc)).model_dump(),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Handle all unhandled exceptions."""
    logger.error(f"Unhandled exception: {exc}")
    content = {"detail": "Internal server error"}
    if debug_enabled():
        content["debug"] = str(exc)
    return JSONResponse(
        status_code=500,
        content=content,
    )
