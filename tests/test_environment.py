"""
Tests for environment validation utilities.
"""

import os

import pytest
from pydantic import ValidationError

from shared_utils.errors import ConfigurationError
from shared_utils.models.core import EnvironmentValidationResult
from shared_utils.utils.environment import (
    SERVICE_ENV_VARS,
    MASKED_VALUE,
    validate_environment,
    validate_service_environment,
    get_environment_info,
    is_test_environment,
    is_production_environment,
    is_development_environment,
    get_env_var,
    mask_sensitive_env_vars,
)


class TestValidateEnvironment:
    """Tests for validate_environment."""

    def test_valid_when_all_present(self, clean_env):
        """Test validation passes when every variable is set."""
        clean_env.setenv("TEST_VAR", "test-value")

        result = validate_environment(["TEST_VAR"])

        assert result.valid is True
        assert result.missing == ()
        assert result.warnings == ()
        assert result.service_name == "unknown-service"

    def test_invalid_when_missing(self, clean_env):
        """Test missing variables are reported with the service name."""
        result = validate_environment(["MISSING_VAR"], service_name="test-service")

        assert result.valid is False
        assert result.missing == ("MISSING_VAR",)
        assert result.service_name == "test-service"
        assert result.warnings == ("test-service: Missing environment variables: MISSING_VAR",)

    def test_empty_value_counts_as_missing(self, clean_env):
        """Test that an empty string is treated as unset."""
        clean_env.setenv("EMPTY_VAR", "")

        result = validate_environment(["EMPTY_VAR"])

        assert result.missing == ("EMPTY_VAR",)

    def test_missing_preserves_order_and_collapses_duplicates(self, clean_env):
        """Test first-occurrence order with no duplicates."""
        clean_env.setenv("PRESENT", "yes")

        result = validate_environment(["B_VAR", "PRESENT", "A_VAR", "B_VAR", "C_VAR", "A_VAR"])

        assert result.missing == ("B_VAR", "A_VAR", "C_VAR")
        assert result.warnings == ("unknown-service: Missing environment variables: B_VAR, A_VAR, C_VAR",)

    def test_skips_in_production(self, clean_env):
        """Test production short-circuit ignores the actual environment."""
        clean_env.setenv("ENVIRONMENT", "production")

        result = validate_environment(["MISSING_VAR"], skip_in_production=True)

        assert result.valid is True
        assert result.missing == ()
        assert result.warnings == ()

    def test_checks_production_when_not_skipping(self, clean_env):
        """Test production is validated when skipping is disabled."""
        clean_env.setenv("ENVIRONMENT", "production")

        result = validate_environment(["MISSING_VAR"], skip_in_production=False)

        assert result.valid is False

    def test_throw_on_missing(self, clean_env):
        """Test ConfigurationError carries the warning message."""
        with pytest.raises(ConfigurationError) as exc_info:
            validate_environment(
                ["MISSING_VAR"],
                service_name="test-service",
                throw_on_missing=True
            )

        assert str(exc_info.value) == "test-service: Missing environment variables: MISSING_VAR"
        assert exc_info.value.missing == ["MISSING_VAR"]

    def test_throw_on_missing_does_nothing_when_valid(self, clean_env):
        """Test throw_on_missing returns normally when nothing is missing."""
        clean_env.setenv("TEST_VAR", "value")

        result = validate_environment(["TEST_VAR"], throw_on_missing=True)

        assert result.valid is True

    def test_result_is_immutable(self, clean_env):
        """Test returned results cannot be modified."""
        result = validate_environment(["MISSING_VAR"])

        with pytest.raises(ValidationError):
            result.valid = True

    def test_result_enforces_valid_invariant(self):
        """Test a result cannot claim validity with missing variables."""
        with pytest.raises(ValidationError):
            EnvironmentValidationResult(valid=True, missing=("X",))

    def test_to_dict_uses_camel_case(self, clean_env):
        """Test serialization keys."""
        result = validate_environment(["MISSING_VAR"], service_name="svc")

        assert result.to_dict() == {
            "valid": False,
            "missing": ["MISSING_VAR"],
            "warnings": ["svc: Missing environment variables: MISSING_VAR"],
            "serviceName": "svc",
        }


class TestValidateServiceEnvironment:
    """Tests for catalog-driven validation."""

    def test_auth_service_valid(self, clean_env):
        """Test auth-service passes with its catalog variables."""
        clean_env.setenv("DYNAMODB_TABLE_NAME", "test-table")
        clean_env.setenv("COGNITO_USER_POOL_ID", "test-pool")
        clean_env.setenv("COGNITO_USER_POOL_CLIENT_ID", "test-client")

        result = validate_service_environment("auth-service")

        assert result.valid is True
        assert result.service_name == "auth-service"

    def test_user_management_service_missing(self, clean_env):
        """Test missing catalog variables are reported in catalog order."""
        clean_env.setenv("COGNITO_USER_POOL_ID", "test-pool")

        result = validate_service_environment("user-management-service")

        assert result.missing == ("DYNAMODB_TABLE_NAME", "COGNITO_USER_POOL_CLIENT_ID")

    def test_unknown_service_is_valid(self, clean_env):
        """Test unrecognized services have no requirements."""
        result = validate_service_environment("unknown-service")

        assert result.valid is True
        assert result.missing == ()

    def test_options_are_forwarded(self, clean_env):
        """Test throw_on_missing reaches validate_environment."""
        with pytest.raises(ConfigurationError):
            validate_service_environment("auth-service", throw_on_missing=True)

    def test_organizations_service_uses_different_table_key(self, clean_env):
        """
        Known inconsistency: organizations-service requires DYNAMODB_TABLE
        while the other services require DYNAMODB_TABLE_NAME.
        """
        assert "DYNAMODB_TABLE" in SERVICE_ENV_VARS["organizations-service"]
        assert "DYNAMODB_TABLE_NAME" not in SERVICE_ENV_VARS["organizations-service"]

        clean_env.setenv("DYNAMODB_TABLE_NAME", "test-table")
        clean_env.setenv("COGNITO_USER_POOL_ID", "test-pool")
        clean_env.setenv("COGNITO_USER_POOL_CLIENT_ID", "test-client")

        result = validate_service_environment("organizations-service")

        assert result.missing == ("DYNAMODB_TABLE",)


class TestEnvironmentInfo:
    """Tests for get_environment_info."""

    def test_returns_environment_snapshot(self, clean_env):
        """Test every field is derived from the environment."""
        clean_env.setenv("ENVIRONMENT", "test")
        clean_env.setenv("AWS_REGION", "us-west-2")
        clean_env.setenv("SERVICE_VERSION", "2.0.0")

        info = get_environment_info()

        assert info.runtime_mode == "test"
        assert info.region == "us-west-2"
        assert info.is_test is True
        assert info.is_production is False
        assert info.is_development is False
        assert info.service_version == "2.0.0"
        assert info.timestamp

    def test_defaults(self, clean_env):
        """Test fallbacks when nothing is configured."""
        info = get_environment_info()

        assert info.runtime_mode == "unknown"
        assert info.region == "us-east-1"
        assert info.service_version == "1.0.0"

    @pytest.mark.parametrize("mode", ["development", "dev"])
    def test_development_aliases(self, clean_env, mode):
        """Test both development spellings are recognized."""
        clean_env.setenv("ENVIRONMENT", mode)

        assert get_environment_info().is_development is True
        assert is_development_environment() is True

    def test_to_dict_keys(self, clean_env):
        """Test serialized keys."""
        data = get_environment_info().to_dict()

        assert set(data) == {
            "runtimeMode",
            "region",
            "isTest",
            "isProduction",
            "isDevelopment",
            "serviceVersion",
            "timestamp",
        }


class TestEnvironmentDetection:
    """Tests for test and production mode detection."""

    def test_detects_runtime_mode(self, clean_env):
        clean_env.setenv("ENVIRONMENT", "test")

        assert is_test_environment() is True

    def test_detects_test_worker(self, clean_env):
        clean_env.setenv("PYTEST_XDIST_WORKER", "gw0")

        assert is_test_environment() is True

    def test_detects_lifecycle_event(self, clean_env):
        clean_env.setenv("PYTEST_CURRENT_TEST", "tests/test_environment.py::test_x (call)")

        assert is_test_environment() is True

    def test_not_test_environment(self, clean_env):
        """Test production mode is not detected as a test run."""
        # pytest sets this again after fixture setup
        clean_env.delenv("PYTEST_CURRENT_TEST", raising=False)
        clean_env.setenv("ENVIRONMENT", "production")

        assert is_test_environment() is False
        assert is_production_environment() is True


class TestGetEnvVar:
    """Tests for get_env_var."""

    def test_returns_value(self, clean_env):
        clean_env.setenv("TEST_VAR", "test-value")

        assert get_env_var("TEST_VAR") == "test-value"

    def test_returns_default(self, clean_env):
        assert get_env_var("MISSING_VAR", "default-value") == "default-value"

    def test_returns_none_without_default(self, clean_env):
        assert get_env_var("MISSING_VAR") is None

    def test_required_with_default_uses_default(self, clean_env):
        assert get_env_var("MISSING_VAR", "fallback", required=True) == "fallback"

    def test_required_missing_raises(self, clean_env):
        with pytest.raises(ConfigurationError, match="Required environment variable MISSING_VAR is not set"):
            get_env_var("MISSING_VAR", None, True)


class TestMaskSensitiveEnvVars:
    """Tests for mask_sensitive_env_vars."""

    def test_masks_sensitive_keys(self):
        """Test denylisted keys are masked and others kept."""
        env = {
            "PUBLIC_VAR": "public-value",
            "COGNITO_USER_POOL_CLIENT_SECRET": "sensitive-secret",
            "AWS_SECRET_ACCESS_KEY": "sensitive-key",
            "AWS_ACCESS_KEY_ID": "AKIA",
            "DATABASE_PASSWORD": "hunter2",
            "NORMAL_VAR": "normal-value",
        }

        masked = mask_sensitive_env_vars(env)

        assert masked["PUBLIC_VAR"] == "public-value"
        assert masked["NORMAL_VAR"] == "normal-value"
        assert masked["COGNITO_USER_POOL_CLIENT_SECRET"] == MASKED_VALUE
        assert masked["AWS_SECRET_ACCESS_KEY"] == MASKED_VALUE
        assert masked["AWS_ACCESS_KEY_ID"] == MASKED_VALUE
        assert masked["DATABASE_PASSWORD"] == MASKED_VALUE

    def test_does_not_mutate_input(self):
        """Test input mapping is left untouched."""
        env = {"API_KEY": "x", "NORMAL": "y"}

        masked = mask_sensitive_env_vars(env)

        assert masked == {"API_KEY": "***MASKED***", "NORMAL": "y"}
        assert env == {"API_KEY": "x", "NORMAL": "y"}

    def test_case_insensitive(self):
        """Test lower-case keys are matched."""
        masked = mask_sensitive_env_vars({"stripe_api_key": "sk", "client_secret": "s"})

        assert masked == {"stripe_api_key": MASKED_VALUE, "client_secret": MASKED_VALUE}

    def test_defaults_to_process_environment(self, clean_env):
        """Test os.environ is used when no mapping is given."""
        clean_env.setenv("MY_SECRET_TOKEN", "value")

        masked = mask_sensitive_env_vars()

        assert masked["MY_SECRET_TOKEN"] == MASKED_VALUE
        assert os.environ["MY_SECRET_TOKEN"] == "value"
