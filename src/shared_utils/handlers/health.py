"""
Health Check Lambda Handler.

Drop-in handler for a service's GET /health route. The execution context
owns one ClientRegistry, validates the service environment once at cold
start, and reports every request's overall status as a CloudWatch metric.
"""

import json
import os
from typing import Any, Dict

from aws_lambda_powertools import Logger, Metrics
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext

from shared_utils.clients.registry import ClientRegistry, create_client_registry
from shared_utils.models.core import ClientKind, HealthStatus
from shared_utils.utils.environment import validate_service_environment
from shared_utils.utils.health import (
    basic_health_check,
    check_aws_client_health,
    create_health_response,
    health_check_middleware,
)


SERVICE_NAME = (
    os.environ.get("SERVICE_NAME")
    or os.environ.get("POWERTOOLS_SERVICE_NAME")
    or "unknown-service"
)
METRICS_NAMESPACE = os.environ.get("POWERTOOLS_METRICS_NAMESPACE", "SharedUtils")

logger = Logger(service=SERVICE_NAME)
metrics = Metrics(namespace=METRICS_NAMESPACE, service=SERVICE_NAME)

# Cold start: validate once, build clients once
validate_service_environment(SERVICE_NAME)
registry = create_client_registry()


class RegistryClientCheck:
    """Health reporter that resolves its client from the registry on demand."""

    def __init__(self, client_registry: ClientRegistry, kind: ClientKind):
        self.registry = client_registry
        self.kind = kind

    def get_client_health(self) -> Dict[str, Any]:
        client = self.registry.get_client(self.kind)
        health = check_aws_client_health(client, self.kind.value)
        health["is_mock"] = self.registry.get_health()[self.kind.value]["is_mock"]
        return health


def build_client_checks(client_registry: ClientRegistry) -> Dict[str, RegistryClientCheck]:
    """One health reporter per client kind."""
    return {kind.value: RegistryClientCheck(client_registry, kind) for kind in ClientKind}


@metrics.log_metrics
@logger.inject_lambda_context
def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    """
    Lambda handler for health check requests.

    Args:
        event: API Gateway proxy event
        context: Lambda context

    Returns:
        Health response envelope. /health paths run the full readiness
        check; any other path gets the liveness payload.
    """
    middleware = health_check_middleware(SERVICE_NAME, build_client_checks(registry))
    response = middleware(event, context)

    if response is None:
        response = create_health_response(basic_health_check(SERVICE_NAME))

    status = json.loads(response["body"])["data"]["status"]
    metrics.add_metric(
        name="HealthCheckStatus",
        unit=MetricUnit.Count,
        value=1 if status == HealthStatus.HEALTHY.value else 0
    )

    logger.info(
        "Health check request served",
        extra={"status_code": response["statusCode"], "overall_status": status}
    )

    return response
