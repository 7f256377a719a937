"""Configuration model exports.

    from posture.config.models import EngineConfig, ObservabilityConfig
"""

from posture.config.models.engine import EngineConfig
from posture.config.models.observability import LoggingConfig, ObservabilityConfig

__all__ = [
    "EngineConfig",
    "LoggingConfig",
    "ObservabilityConfig",
]
