"""
Health check utilities for Lambda services.

Builds a consistent health payload across services: environment validation,
per-client checks and optional process metrics are folded into one overall
status using the severity order healthy < degraded < unhealthy.
"""

import json
import os
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional

import psutil
from aws_lambda_powertools import Logger

from shared_utils.models.core import CheckStatus, HealthStatus
from shared_utils.utils.environment import (
    DEFAULT_SERVICE_VERSION,
    RUNTIME_MODE_VAR,
    get_environment_info,
    validate_service_environment,
)


logger = Logger(child=True)

API_VERSION = "v1"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,X-Amz-Date,Authorization,X-Api-Key,X-Amz-Security-Token",
    "Access-Control-Allow-Methods": "GET,OPTIONS",
}

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}

HealthMiddleware = Callable[..., Optional[Dict[str, Any]]]


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_health_check_response(
    service_name: str,
    additional_checks: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    Create a standardized health summary without running any checks.

    Args:
        service_name: Name of the service
        additional_checks: Service-specific checks merged over the base checks

    Returns:
        Health payload with status "healthy"
    """
    env_info = get_environment_info()

    checks = {
        "environment": CheckStatus.OK.value,
        "timestamp": env_info.timestamp,
        "version": env_info.service_version,
        "runtimeMode": env_info.runtime_mode,
        "region": env_info.region,
    }
    checks.update(additional_checks or {})

    return {
        "status": HealthStatus.HEALTHY.value,
        "service": service_name,
        "version": env_info.service_version,
        "timestamp": env_info.timestamp,
        "environment": env_info.runtime_mode,
        "checks": checks,
    }


def _check_environment(service_name: str) -> Dict[str, Any]:
    try:
        validation = validate_service_environment(service_name, skip_in_production=False)
    except Exception as e:
        logger.error(
            "Environment check failed",
            extra={"service_name": service_name, "error": str(e)}
        )
        return {"status": CheckStatus.ERROR.value, "error": str(e)}

    return {
        "status": CheckStatus.OK.value if validation.valid else CheckStatus.WARNING.value,
        "missing": list(validation.missing),
        "warnings": list(validation.warnings),
    }


def _check_client(client_name: str, client: Any) -> Dict[str, Any]:
    try:
        reporter = getattr(client, "get_client_health", None) if client is not None else None
        if callable(reporter):
            return dict(reporter())

        if client is not None:
            return {"status": CheckStatus.OK.value, "initialized": True}

        return {
            "status": CheckStatus.WARNING.value,
            "initialized": False,
            "message": "Client not initialized",
        }
    except Exception as e:
        logger.warning(
            f"Client health check failed for {client_name}",
            extra={"client_name": client_name, "error": str(e)}
        )
        return {"status": CheckStatus.ERROR.value, "error": str(e)}


def _status_of(check: Mapping[str, Any]) -> HealthStatus:
    # Self-reported checks may use either vocabulary; anything else is degraded
    status = check.get("status")
    try:
        return HealthStatus.from_check_status(CheckStatus(status))
    except ValueError:
        pass
    try:
        return HealthStatus(status)
    except ValueError:
        return HealthStatus.DEGRADED


def get_performance_metrics() -> Dict[str, Any]:
    """Snapshot process uptime, memory and CPU usage."""
    process = psutil.Process()
    memory = process.memory_info()
    cpu = process.cpu_times()

    return {
        "uptime": time.time() - process.create_time(),
        "memory_usage": {
            "rss": memory.rss,
            "vms": memory.vms,
        },
        "cpu_usage": {
            "user": cpu.user,
            "system": cpu.system,
        },
    }


def perform_health_check(
    service_name: str,
    clients: Optional[Mapping[str, Any]] = None,
    check_environment: bool = True,
    check_clients: bool = True,
    include_metrics: bool = False
) -> Dict[str, Any]:
    """
    Perform a full readiness check for a service.

    Args:
        service_name: Name of the service, used for environment validation
        clients: Mapping of check name to client handle (or None)
        check_environment: Validate the service's required variables
        check_clients: Check every supplied client
        include_metrics: Attach process metrics under checks["performance"]

    Returns:
        Health payload with the overall status, environment snapshot and checks
    """
    checks: Dict[str, Any] = {}
    overall_status = HealthStatus.HEALTHY

    if check_environment:
        checks["environment"] = _check_environment(service_name)
        overall_status = HealthStatus.worst(overall_status, _status_of(checks["environment"]))

    if check_clients and clients:
        for client_name, client in clients.items():
            checks[client_name] = _check_client(client_name, client)
            overall_status = HealthStatus.worst(overall_status, _status_of(checks[client_name]))

    if include_metrics:
        checks["performance"] = get_performance_metrics()

    logger.debug(
        "Health check complete",
        extra={"service_name": service_name, "overall_status": overall_status.value}
    )

    return {
        "status": overall_status.value,
        "service": service_name,
        **get_environment_info().to_dict(),
        "checks": checks,
    }


def basic_health_check(service_name: str) -> Dict[str, Any]:
    """Liveness payload with no sub-checks."""
    return {
        "status": HealthStatus.HEALTHY.value,
        "service": service_name,
        "timestamp": _utc_now(),
    }


def check_aws_client_health(client: Any, client_type: str = "unknown") -> Dict[str, Any]:
    """
    Check an AWS client's configuration.

    Args:
        client: boto3 client, DocumentStoreClient, or any object with a config
        client_type: Label reported as "type"

    Returns:
        Client health details
    """
    if client is None:
        return {
            "status": CheckStatus.ERROR.value,
            "type": client_type,
            "initialized": False,
            "message": "Client not initialized",
        }

    try:
        meta = getattr(client, "meta", None)
        if meta is not None and hasattr(meta, "config"):
            retries = meta.config.retries or {}
            region = meta.region_name
            max_attempts = retries.get("total_max_attempts", retries.get("max_attempts"))
            timeout = meta.config.read_timeout
        else:
            config = getattr(client, "config", None) or {}
            region = config.get("region")
            max_attempts = config.get("max_attempts")
            timeout = config.get("timeout")

        return {
            "status": CheckStatus.OK.value,
            "type": client_type,
            "initialized": True,
            "region": region or "unknown",
            "max_attempts": max_attempts or "default",
            "timeout": timeout or "default",
        }
    except Exception as e:
        return {
            "status": CheckStatus.ERROR.value,
            "type": client_type,
            "initialized": True,
            "error": str(e),
        }


def status_code_for(status: str) -> int:
    """HTTP status for an overall health status."""
    if status in (HealthStatus.HEALTHY.value, HealthStatus.DEGRADED.value):
        return 200
    return 503


def create_health_response(health_data: Dict[str, Any], status_code: int = 200) -> Dict[str, Any]:
    """
    Wrap a health payload in an API Gateway proxy response.

    Args:
        health_data: Payload from perform_health_check or basic_health_check
        status_code: HTTP status code

    Returns:
        Lambda proxy response with no-cache and CORS headers
    """
    version = (
        health_data.get("version")
        or health_data.get("serviceVersion")
        or DEFAULT_SERVICE_VERSION
    )

    return {
        "statusCode": status_code,
        "headers": {
            "Content-Type": "application/json",
            **NO_CACHE_HEADERS,
            **CORS_HEADERS,
        },
        "body": json.dumps({
            "data": health_data,
            "meta": {
                "service": health_data.get("service") or "unknown-service",
                "version": version,
                "apiVersion": API_VERSION,
                "timestamp": _utc_now(),
                "environment": os.environ.get(RUNTIME_MODE_VAR) or "unknown",
            },
        }, default=str),
    }


def _request_path(event: Mapping[str, Any]) -> str:
    path = event.get("path") or event.get("rawPath")
    return path if isinstance(path, str) else ""


def health_check_middleware(
    service_name: str,
    clients: Optional[Mapping[str, Any]] = None
) -> HealthMiddleware:
    """
    Create a middleware that answers health check requests.

    The returned callable takes (event, context) and returns None for any
    path without "/health" so the caller continues dispatching. It never
    raises; failures become a 503 unhealthy response.

    Args:
        service_name: Name of the service
        clients: Mapping of check name to client handle

    Returns:
        Middleware callable
    """
    def middleware(event: Mapping[str, Any], context: Any = None) -> Optional[Dict[str, Any]]:
        path = _request_path(event) if isinstance(event, Mapping) else ""
        if "/health" not in path:
            return None

        try:
            query = event.get("queryStringParameters") or {}
            health_data = perform_health_check(
                service_name,
                clients,
                check_environment=True,
                check_clients=True,
                include_metrics=query.get("metrics") == "true"
            )
            return create_health_response(health_data, status_code_for(health_data["status"]))
        except Exception as e:
            logger.exception(
                "Health check failed",
                extra={"service_name": service_name, "error": str(e)}
            )
            error_health = {
                "status": HealthStatus.UNHEALTHY.value,
                "service": service_name,
                "error": str(e),
                "timestamp": _utc_now(),
            }
            return create_health_response(error_health, 503)

    return middleware
