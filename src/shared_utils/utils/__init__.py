# Environment and health utilities

from shared_utils.utils.environment import (
    SERVICE_ENV_VARS,
    STANDARD_ENV_VARS,
    validate_environment,
    validate_service_environment,
    get_environment_info,
    is_test_environment,
    is_production_environment,
    is_development_environment,
    get_env_var,
    mask_sensitive_env_vars,
)
from shared_utils.utils.health import (
    create_health_check_response,
    perform_health_check,
    basic_health_check,
    check_aws_client_health,
    create_health_response,
    health_check_middleware,
    status_code_for,
)

__all__ = [
    # Environment
    "SERVICE_ENV_VARS",
    "STANDARD_ENV_VARS",
    "validate_environment",
    "validate_service_environment",
    "get_environment_info",
    "is_test_environment",
    "is_production_environment",
    "is_development_environment",
    "get_env_var",
    "mask_sensitive_env_vars",
    # Health
    "create_health_check_response",
    "perform_health_check",
    "basic_health_check",
    "check_aws_client_health",
    "create_health_response",
    "health_check_middleware",
    "status_code_for",
]
