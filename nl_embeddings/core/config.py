"""
Configuration for the embedding encoder and similarity search engine.
Values come from the environment (optionally a .env file).
"""

import os

from dotenv import load_dotenv

load_dotenv()

# Token-vector source selection
EMBED_PROVIDER = os.getenv("EMBED_PROVIDER", "hash")  # hash|sentence_transformers
EMBED_MODEL_NAME = os.getenv("EMBED_MODEL_NAME", "all-MiniLM-L6-v2")
EMBED_DIM = int(os.getenv("EMBED_DIM", "384"))

# Search engine: collections smaller than this use the point-wise loop
OPTIMIZATION_THRESHOLD = int(os.getenv("EMBED_OPTIMIZATION_THRESHOLD", "100"))

# Pooled vectors with a norm at or below this are returned unnormalized
NORM_EPSILON = float(os.getenv("EMBED_NORM_EPSILON", "1e-10"))

DEBUG = os.getenv("DEBUG", "false").lower() == "true"

# Version string
VERSION = "0.3.0"

VALID_PROVIDERS = ["hash", "sentence_transformers"]


def get_embed_provider():
    """Get the configured token-vector provider name (read at call time)."""
    return os.getenv("EMBED_PROVIDER", EMBED_PROVIDER)


def get_optimization_threshold():
    """Get the point-wise/batched switch point for the search engine."""
    return int(os.getenv("EMBED_OPTIMIZATION_THRESHOLD", str(OPTIMIZATION_THRESHOLD)))


def get_norm_epsilon():
    """Get the degenerate-norm epsilon used by L2 normalization."""
    return float(os.getenv("EMBED_NORM_EPSILON", str(NORM_EPSILON)))


def get_token_source(spec=None):
    """Get configured token-vector source implementation.

    An explicit ModelSpec always selects the sentence-transformers source,
    since the hash source has no notion of models.
    """
    provider = get_embed_provider()

    if spec is not None or provider == "sentence_transformers":
        from ..vector.token_sources import SentenceTransformerTokenSource
        from ..vector.types import ModelSpec
        if spec is None:
            spec = ModelSpec(model_identifier=os.getenv("EMBED_MODEL_NAME", EMBED_MODEL_NAME))
        return SentenceTransformerTokenSource(spec)

    from ..vector.token_sources import DeterministicHashTokenSource
    return DeterministicHashTokenSource(dimension=int(os.getenv("EMBED_DIM", str(EMBED_DIM))))


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def validate_config():
    """Validate embedding configuration and return any issues."""
    issues = []

    provider = get_embed_provider()
    if provider not in VALID_PROVIDERS:
        issues.append(f"Invalid EMBED_PROVIDER: {provider}")

    try:
        if get_optimization_threshold() < 0:
            issues.append("EMBED_OPTIMIZATION_THRESHOLD must be >= 0")
    except ValueError:
        issues.append("EMBED_OPTIMIZATION_THRESHOLD must be an integer")

    try:
        if int(os.getenv("EMBED_DIM", str(EMBED_DIM))) < 1:
            issues.append("EMBED_DIM must be >= 1")
    except ValueError:
        issues.append("EMBED_DIM must be an integer")

    try:
        if get_norm_epsilon() <= 0:
            issues.append("EMBED_NORM_EPSILON must be > 0")
    except ValueError:
        issues.append("EMBED_NORM_EPSILON must be a number")

    return issues
