"""
DynamoDB document client.

Wraps a low-level boto3 DynamoDB client so callers read and write plain
Python values instead of attribute-value maps. Marshalling follows
MarshallOptions; botocore failures are re-raised as ExternalClientError.
"""

from contextlib import contextmanager
from dataclasses import asdict
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Mapping, Optional

from aws_lambda_powertools import Logger
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError

from shared_utils.clients.config import MarshallOptions
from shared_utils.errors import ExternalClientError


logger = Logger(child=True)

_PLAIN_TYPES = (str, bytes, bytearray, bool, int, Decimal)


class DocumentStoreClient:
    """
    Document-style wrapper around a low-level DynamoDB client.

    Example:
        client = DocumentStoreClient(boto3.client("dynamodb"))
        client.put_item("users", {"user_id": "u-1", "age": 42, "nickname": None})
        client.get_item("users", {"user_id": "u-1"})
        # {"user_id": "u-1", "age": 42}

    Attributes:
        client: The wrapped low-level DynamoDB client
        options: Marshalling options applied to every call
    """

    def __init__(self, client: Any, options: Optional[MarshallOptions] = None):
        self.client = client
        self.options = options or MarshallOptions()
        self._serializer = TypeSerializer()
        self._deserializer = TypeDeserializer()

    @property
    def config(self) -> Dict[str, Any]:
        """Configuration of the wrapped client."""
        boto_config = self.client.meta.config
        retries = boto_config.retries or {}
        return {
            "region": self.client.meta.region_name,
            "max_attempts": retries.get("total_max_attempts", retries.get("max_attempts")),
            "timeout": boto_config.read_timeout,
        }

    def get_client_health(self) -> Dict[str, Any]:
        """Report health from local configuration only, without calling AWS."""
        return {
            "status": "ok",
            "type": "dynamodb",
            "initialized": True,
            **self.config,
            "marshall_options": asdict(self.options),
        }

    # ------------------------------------------------------------------
    # Marshalling
    # ------------------------------------------------------------------

    def marshall(self, item: Mapping[str, Any]) -> Dict[str, Dict[str, Any]]:
        """Convert a plain mapping into a DynamoDB attribute-value map."""
        prepared = self._prepare(item)
        return {key: self._serializer.serialize(value) for key, value in prepared.items()}

    def unmarshall(self, item: Mapping[str, Dict[str, Any]]) -> Dict[str, Any]:
        """Convert a DynamoDB attribute-value map into plain Python values."""
        return {
            key: self._convert_numbers(self._deserializer.deserialize(value))
            for key, value in item.items()
        }

    def _prepare(self, value: Any) -> Any:
        if value is None or isinstance(value, bool):
            return value

        if isinstance(value, float):
            return Decimal(str(value))

        if isinstance(value, Mapping):
            prepared = {}
            for key, nested in value.items():
                if nested is None and self.options.remove_undefined_values:
                    continue
                prepared[key] = self._prepare(nested)
            return prepared

        if isinstance(value, (list, tuple)):
            return [self._prepare(nested) for nested in value]

        if isinstance(value, (set, frozenset)):
            if not value and self.options.convert_empty_values:
                return None
            return {self._prepare(nested) for nested in value}

        if isinstance(value, (str, bytes, bytearray)):
            if not value and self.options.convert_empty_values:
                return None
            return value

        if isinstance(value, _PLAIN_TYPES):
            return value

        if self.options.convert_class_instance_to_map and hasattr(value, "__dict__"):
            return self._prepare(vars(value))

        raise TypeError(
            f"Unsupported type {type(value).__name__} for DynamoDB marshalling; "
            "enable convert_class_instance_to_map to store objects as maps"
        )

    def _convert_numbers(self, value: Any) -> Any:
        if self.options.wrap_numbers:
            return value

        if isinstance(value, Decimal):
            if value == value.to_integral_value():
                return int(value)
            return float(value)

        if isinstance(value, dict):
            return {key: self._convert_numbers(nested) for key, nested in value.items()}

        if isinstance(value, list):
            return [self._convert_numbers(nested) for nested in value]

        if isinstance(value, set):
            return {self._convert_numbers(nested) for nested in value}

        return value

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    @contextmanager
    def _translate_errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.warning(
                f"DynamoDB {operation} failed",
                extra={"error_code": error_code, "operation": operation}
            )
            raise ExternalClientError(str(e), error_code=error_code, operation=operation) from e
        except BotoCoreError as e:
            logger.error(
                f"DynamoDB {operation} failed before reaching the service",
                extra={"error": str(e), "operation": operation}
            )
            raise ExternalClientError(str(e), operation=operation) from e

    def put_item(self, table_name: str, item: Mapping[str, Any], **kwargs) -> Dict[str, Any]:
        """
        Write an item.

        Args:
            table_name: Target table
            item: Plain Python mapping to store
            **kwargs: Extra PutItem parameters, passed through unchanged

        Returns:
            The raw PutItem response
        """
        with self._translate_errors("PutItem"):
            return self.client.put_item(TableName=table_name, Item=self.marshall(item), **kwargs)

    def get_item(self, table_name: str, key: Mapping[str, Any], **kwargs) -> Optional[Dict[str, Any]]:
        """Read one item by key. Returns None when the item does not exist."""
        with self._translate_errors("GetItem"):
            response = self.client.get_item(TableName=table_name, Key=self.marshall(key), **kwargs)

        item = response.get("Item")
        return self.unmarshall(item) if item is not None else None

    def delete_item(self, table_name: str, key: Mapping[str, Any], **kwargs) -> Dict[str, Any]:
        with self._translate_errors("DeleteItem"):
            return self.client.delete_item(TableName=table_name, Key=self.marshall(key), **kwargs)

    def query(
        self,
        table_name: str,
        key_condition_expression: str,
        expression_attribute_values: Mapping[str, Any],
        **kwargs
    ) -> List[Dict[str, Any]]:
        """
        Run a single-page query.

        Args:
            table_name: Target table
            key_condition_expression: KeyConditionExpression string
            expression_attribute_values: Plain values for the expression placeholders
            **kwargs: Extra Query parameters, passed through unchanged

        Returns:
            Unmarshalled items from the first page
        """
        with self._translate_errors("Query"):
            response = self.client.query(
                TableName=table_name,
                KeyConditionExpression=key_condition_expression,
                ExpressionAttributeValues=self.marshall(expression_attribute_values),
                **kwargs
            )

        return [self.unmarshall(item) for item in response.get("Items", [])]
