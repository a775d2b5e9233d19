# Data models package

from shared_utils.models.core import (
    CheckStatus,
    HealthStatus,
    ClientKind,
    EnvironmentValidationResult,
    EnvironmentInfo,
    ClientHealth,
)

__all__ = [
    "CheckStatus",
    "HealthStatus",
    "ClientKind",
    "EnvironmentValidationResult",
    "EnvironmentInfo",
    "ClientHealth",
]
