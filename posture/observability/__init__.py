"""Observability: structured logging.

Provides standardized logging primitives using structlog.
"""

from posture.observability.logging import configure_logging, get_logger, setup_logging

__all__ = ["configure_logging", "get_logger", "setup_logging"]
