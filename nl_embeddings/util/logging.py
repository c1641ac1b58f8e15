"""
Structured operation logging for encoding and similarity search.
"""

import logging
from typing import Any, Dict, Optional


class StructuredLogger:
    """Structured logger for encode, search and model asset operations."""

    def __init__(self, name: str = "nl_embeddings"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None, level: int = logging.INFO):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        self.logger.log(level, message)

    def log_encode(self, token_count: int, dimension: int, degenerate: bool = False, status: str = "success", details: Dict[str, Any] = None):
        """Log a pooling/normalization pass."""
        log_details = {
            "token_count": token_count,
            "dimension": dimension,
            "degenerate": degenerate
        }
        if details:
            log_details.update(details)

        # Degenerate vectors are returned unnormalized, callers should know
        level = logging.WARNING if degenerate or status != "success" else logging.DEBUG
        self.log_operation("encode", status, log_details, level=level)

    def log_search(self, candidate_count: int, strategy: str, returned: int, threshold: Optional[float] = None, status: str = "success"):
        """Log a similarity search."""
        log_details = {
            "candidate_count": candidate_count,
            "strategy": strategy,
            "returned": returned
        }
        if threshold is not None:
            log_details["minimum_similarity"] = threshold

        level = logging.DEBUG if status == "success" else logging.WARNING
        self.log_operation("search", status, log_details, level=level)

    def log_model_assets(self, model_identifier: str, status: str, details: Dict[str, Any] = None):
        """Log model asset provisioning."""
        log_details = {"model_identifier": model_identifier}
        if details:
            log_details.update(details)

        level = logging.ERROR if status == "failed" else logging.INFO
        self.log_operation("model.assets", status, log_details, level=level)

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


# Global logger instance
logger = StructuredLogger()
