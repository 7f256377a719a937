"""Assessment engine configuration models."""

from pydantic import BaseModel, Field


class EngineConfig(BaseModel):
    """Behaviour of the gating engine and its expiration queries."""

    validate_content: bool = Field(
        default=True,
        description="Run dependency-cycle detection when a resolver is built",
    )
    default_expiration_days: int = Field(
        default=90,
        ge=1,
        description="Days until an answer without a specific policy goes stale",
    )
    expiring_within_days: int = Field(
        default=7,
        ge=0,
        description="Window used by the session when listing soon-to-expire answers",
    )
    default_fact_confidence: float = Field(
        default=0.95,
        ge=0.0,
        le=1.0,
        description="Confidence assigned to injected facts when none is given",
    )
