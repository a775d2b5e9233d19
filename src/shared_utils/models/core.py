"""
Core data models for the shared utilities.

This module defines the status enumerations and the result objects returned
by environment validation and client introspection. Result models are frozen
Pydantic models so callers cannot mutate them once returned.
"""

from enum import Enum
from typing import Any, Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class CheckStatus(str, Enum):
    """Status of a single health sub-check."""
    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


class HealthStatus(str, Enum):
    """Overall health status, ordered healthy < degraded < unhealthy."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    @classmethod
    def worst(cls, current: "HealthStatus", candidate: "HealthStatus") -> "HealthStatus":
        """Return the more severe of two statuses. Never upgrades."""
        return candidate if candidate.severity > current.severity else current

    @classmethod
    def from_check_status(cls, status: CheckStatus) -> "HealthStatus":
        """Map a sub-check status onto the overall severity lattice."""
        if status == CheckStatus.ERROR:
            return cls.UNHEALTHY
        if status == CheckStatus.WARNING:
            return cls.DEGRADED
        return cls.HEALTHY


_SEVERITY = {
    HealthStatus.HEALTHY: 0,
    HealthStatus.DEGRADED: 1,
    HealthStatus.UNHEALTHY: 2,
}


class ClientKind(str, Enum):
    """Kinds of AWS client handles managed by the registry."""
    COGNITO = "cognito"
    DYNAMODB = "dynamodb"


class EnvironmentValidationResult(BaseModel):
    """Result of checking required environment variables."""
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True
    )

    valid: bool = Field(..., description="True when no required variable is missing")
    missing: Tuple[str, ...] = Field(default=(), description="Missing variables in input order")
    warnings: Tuple[str, ...] = Field(default=(), description="Warning messages emitted")
    service_name: str = Field(default="unknown-service", description="Service that was validated")

    @model_validator(mode="after")
    def check_valid_matches_missing(self) -> "EnvironmentValidationResult":
        """Ensure valid is true exactly when nothing is missing."""
        if self.valid != (len(self.missing) == 0):
            raise ValueError("valid must be true exactly when missing is empty")
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-ready dictionary with camelCase keys."""
        data = self.model_dump(by_alias=True)
        data["missing"] = list(self.missing)
        data["warnings"] = list(self.warnings)
        return data


class EnvironmentInfo(BaseModel):
    """Snapshot of the runtime environment at a point in time."""
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True
    )

    runtime_mode: str
    region: str
    is_test: bool
    is_production: bool
    is_development: bool
    service_version: str
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-ready dictionary with camelCase keys."""
        return self.model_dump(by_alias=True)


class ClientHealth(BaseModel):
    """Initialization state of one registry slot."""
    model_config = ConfigDict(frozen=True)

    initialized: bool = False
    is_mock: bool = False
