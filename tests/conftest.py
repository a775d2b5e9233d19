"""
Pytest configuration and fixtures for the shared utilities tests.
"""

import os
from dataclasses import dataclass
from unittest.mock import MagicMock

import boto3
import pytest
from moto import mock_aws

from shared_utils.utils.environment import SERVICE_ENV_VARS, STANDARD_ENV_VARS


@pytest.fixture(scope="session")
def aws_credentials():
    """Mocked AWS Credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every variable the validators and test-mode detection read."""
    names = set(STANDARD_ENV_VARS)
    for required_vars in SERVICE_ENV_VARS.values():
        names.update(required_vars)
    names.update([
        "ENVIRONMENT",
        "SERVICE_VERSION",
        "PYTEST_XDIST_WORKER",
        "PYTEST_CURRENT_TEST",
    ])

    for name in names:
        monkeypatch.delenv(name, raising=False)

    return monkeypatch


@pytest.fixture
def auth_service_env(clean_env):
    """Complete environment for auth-service in test mode."""
    clean_env.setenv("ENVIRONMENT", "test")
    clean_env.setenv("DYNAMODB_TABLE_NAME", "T")
    clean_env.setenv("COGNITO_USER_POOL_ID", "P")
    clean_env.setenv("COGNITO_USER_POOL_CLIENT_ID", "C")
    return clean_env


@pytest.fixture
def mock_cognito_client():
    """Substitute Cognito handle."""
    client = MagicMock(name="cognito", spec=["send", "config"])
    client.config = {"region": "us-east-1", "max_attempts": 3, "timeout": 30}
    return client


@pytest.fixture
def mock_document_client():
    """Substitute DynamoDB document handle."""
    client = MagicMock(name="dynamodb", spec=["put_item", "get_item", "query", "config"])
    client.config = {"region": "us-east-1", "max_attempts": 3, "timeout": 30}
    return client


@pytest.fixture
def mock_aws_services(aws_credentials):
    """Mock AWS services for testing."""
    with mock_aws():
        yield


@pytest.fixture
def dynamodb_client(mock_aws_services):
    """DynamoDB client for testing."""
    return boto3.client("dynamodb", region_name="us-east-1")


@pytest.fixture
def users_table(dynamodb_client):
    """Create a test users table."""
    dynamodb_client.create_table(
        TableName="shared-utils-users-test",
        KeySchema=[
            {"AttributeName": "user_id", "KeyType": "HASH"},
            {"AttributeName": "created_at", "KeyType": "RANGE"}
        ],
        AttributeDefinitions=[
            {"AttributeName": "user_id", "AttributeType": "S"},
            {"AttributeName": "created_at", "AttributeType": "S"}
        ],
        BillingMode="PAY_PER_REQUEST"
    )
    return "shared-utils-users-test"


@dataclass
class FakeLambdaContext:
    function_name: str = "health-check"
    memory_limit_in_mb: int = 128
    invoked_function_arn: str = "arn:aws:lambda:us-east-1:123456789012:function:health-check"
    aws_request_id: str = "52fdfc07-2182-154f-163f-5f0f9a621d72"


@pytest.fixture
def lambda_context():
    """Minimal Lambda context for powertools decorators."""
    return FakeLambdaContext()
