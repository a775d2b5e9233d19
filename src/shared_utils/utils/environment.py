"""
Environment validation utilities for Lambda services.

Validation is meant to run once per execution context, at cold start. In
production it is skipped by default so misconfiguration never adds startup
latency; health checks force it on to report the truth.
"""

import os
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Mapping, Optional

from aws_lambda_powertools import Logger

from shared_utils.errors import ConfigurationError
from shared_utils.models.core import EnvironmentInfo, EnvironmentValidationResult


logger = Logger(child=True)

RUNTIME_MODE_VAR = "ENVIRONMENT"
REGION_VAR = "AWS_REGION"
SERVICE_VERSION_VAR = "SERVICE_VERSION"
TEST_WORKER_VAR = "PYTEST_XDIST_WORKER"
LIFECYCLE_EVENT_VAR = "PYTEST_CURRENT_TEST"

DEFAULT_SERVICE_NAME = "unknown-service"
DEFAULT_RUNTIME_MODE = "unknown"
DEFAULT_REGION = "us-east-1"
DEFAULT_SERVICE_VERSION = "1.0.0"

MASKED_VALUE = "***MASKED***"

# Standard environment variables required by most services
STANDARD_ENV_VARS: Dict[str, str] = {
    "AWS_REGION": "AWS region for service deployment",
    "DYNAMODB_TABLE_NAME": "Primary DynamoDB table name",
    "COGNITO_USER_POOL_ID": "Cognito User Pool ID for authentication",
    "COGNITO_USER_POOL_CLIENT_ID": "Cognito User Pool Client ID",
}

# Service-specific required variables. Add services here, never branch on
# the service name elsewhere.
SERVICE_ENV_VARS: Dict[str, List[str]] = {
    "auth-service": [
        "DYNAMODB_TABLE_NAME",
        "COGNITO_USER_POOL_ID",
        "COGNITO_USER_POOL_CLIENT_ID",
    ],
    "user-management-service": [
        "DYNAMODB_TABLE_NAME",
        "COGNITO_USER_POOL_ID",
        "COGNITO_USER_POOL_CLIENT_ID",
    ],
    "organizations-service": [
        "DYNAMODB_TABLE",
        "COGNITO_USER_POOL_ID",
        "COGNITO_USER_POOL_CLIENT_ID",
    ],
}

SENSITIVE_KEYS = (
    "COGNITO_USER_POOL_CLIENT_SECRET",
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "DATABASE_PASSWORD",
    "API_KEY",
    "SECRET",
)


def _runtime_mode() -> str:
    return os.environ.get(RUNTIME_MODE_VAR) or DEFAULT_RUNTIME_MODE


def validate_environment(
    required_vars: Iterable[str] = (),
    service_name: str = DEFAULT_SERVICE_NAME,
    skip_in_production: bool = True,
    throw_on_missing: bool = False
) -> EnvironmentValidationResult:
    """
    Validate that required environment variables are set.

    Args:
        required_vars: Variable names to check, in the order to report them
        service_name: Service name used in the warning message
        skip_in_production: Skip all checks when running in production
        throw_on_missing: Raise instead of returning when anything is missing

    Returns:
        EnvironmentValidationResult with missing variables and warnings

    Raises:
        ConfigurationError: If throw_on_missing is set and variables are missing
    """
    if skip_in_production and is_production_environment():
        return EnvironmentValidationResult(valid=True, service_name=service_name)

    missing: List[str] = []
    for var_name in required_vars:
        if not os.environ.get(var_name) and var_name not in missing:
            missing.append(var_name)

    warnings: List[str] = []
    if missing:
        warning_message = f"{service_name}: Missing environment variables: {', '.join(missing)}"
        warnings.append(warning_message)
        logger.warning(
            warning_message,
            extra={"service_name": service_name, "missing": missing}
        )

        if throw_on_missing:
            raise ConfigurationError(warning_message, missing=missing)

    return EnvironmentValidationResult(
        valid=not missing,
        missing=tuple(missing),
        warnings=tuple(warnings),
        service_name=service_name
    )


def validate_service_environment(service_name: str, **options) -> EnvironmentValidationResult:
    """
    Validate the environment for a named service.

    Unknown services have no required variables and are always valid.

    Args:
        service_name: Key into SERVICE_ENV_VARS
        **options: skip_in_production and throw_on_missing, as for validate_environment

    Returns:
        EnvironmentValidationResult for the service
    """
    required_vars = SERVICE_ENV_VARS.get(service_name, [])
    return validate_environment(required_vars, service_name=service_name, **options)


def get_environment_info() -> EnvironmentInfo:
    """Get a snapshot of the current runtime environment."""
    runtime_mode = _runtime_mode()
    return EnvironmentInfo(
        runtime_mode=runtime_mode,
        region=os.environ.get(REGION_VAR) or DEFAULT_REGION,
        is_test=runtime_mode == "test",
        is_production=runtime_mode == "production",
        is_development=runtime_mode in ("development", "dev"),
        service_version=os.environ.get(SERVICE_VERSION_VAR) or DEFAULT_SERVICE_VERSION,
        timestamp=datetime.now(timezone.utc).isoformat()
    )


def is_test_environment() -> bool:
    """Check whether the process is running under a test harness."""
    return (
        _runtime_mode() == "test"
        or bool(os.environ.get(TEST_WORKER_VAR))
        or "test" in os.environ.get(LIFECYCLE_EVENT_VAR, "")
    )


def is_production_environment() -> bool:
    return _runtime_mode() == "production"


def is_development_environment() -> bool:
    return _runtime_mode() in ("development", "dev")


def get_env_var(
    var_name: str,
    default: Optional[str] = None,
    required: bool = False
) -> Optional[str]:
    """
    Get an environment variable with an optional default.

    Args:
        var_name: Environment variable name
        default: Value returned when the variable is unset or empty
        required: Raise when neither the variable nor a default resolves

    Returns:
        The variable value, or the default

    Raises:
        ConfigurationError: If required and nothing resolves
    """
    value = os.environ.get(var_name)
    if value:
        return value

    if required and default is None:
        raise ConfigurationError(
            f"Required environment variable {var_name} is not set",
            missing=[var_name]
        )

    return default


def mask_sensitive_env_vars(env: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """
    Mask sensitive values for logging.

    Args:
        env: Mapping to mask, defaults to os.environ

    Returns:
        Shallow copy with sensitive values replaced by MASKED_VALUE
    """
    source = os.environ if env is None else env
    masked = dict(source)

    for key in masked:
        upper_key = key.upper()
        if any(sensitive in upper_key for sensitive in SENSITIVE_KEYS):
            masked[key] = MASKED_VALUE

    return masked
