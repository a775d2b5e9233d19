"""
Shared utilities for AWS Lambda microservices.

Memoized AWS clients, environment validation and standardized health
check responses, shared by every service in the platform.
"""

from shared_utils.clients import (
    ClientRegistry,
    ClientSettings,
    DocumentStoreClient,
    MarshallOptions,
    create_client_registry,
)
from shared_utils.errors import (
    SharedUtilsError,
    ConfigurationError,
    ExternalClientError,
    RegistryError,
)
from shared_utils.models import ClientKind, CheckStatus, HealthStatus
from shared_utils.utils.environment import (
    validate_environment,
    validate_service_environment,
    get_environment_info,
)
from shared_utils.utils.health import (
    perform_health_check,
    create_health_response,
    health_check_middleware,
)

__version__ = "1.0.0"

__all__ = [
    "ClientRegistry",
    "ClientSettings",
    "DocumentStoreClient",
    "MarshallOptions",
    "create_client_registry",
    "SharedUtilsError",
    "ConfigurationError",
    "ExternalClientError",
    "RegistryError",
    "ClientKind",
    "CheckStatus",
    "HealthStatus",
    "validate_environment",
    "validate_service_environment",
    "get_environment_info",
    "perform_health_check",
    "create_health_response",
    "health_check_middleware",
]
