"""
AWS client configuration.

Settings shared by every client the registry builds, plus the marshalling
options applied by the document-store wrapper.
"""

import os
from dataclasses import dataclass, asdict
from typing import Any, Dict

from botocore.config import Config as BotoConfig


DEFAULT_REGION = "us-east-1"


@dataclass(frozen=True)
class ClientSettings:
    """Connection settings for AWS SDK clients."""

    region: str = DEFAULT_REGION
    max_attempts: int = 3
    request_timeout_ms: int = 30000
    keep_alive: bool = True
    max_sockets: int = 50

    @classmethod
    def from_environment(cls) -> "ClientSettings":
        """Create settings with the region taken from AWS_REGION."""
        return cls(region=os.environ.get("AWS_REGION") or DEFAULT_REGION)

    @property
    def request_timeout_seconds(self) -> float:
        return self.request_timeout_ms / 1000

    def to_boto_config(self) -> BotoConfig:
        """Convert to a botocore Config."""
        return BotoConfig(
            region_name=self.region,
            retries={"total_max_attempts": self.max_attempts, "mode": "standard"},
            connect_timeout=self.request_timeout_seconds,
            read_timeout=self.request_timeout_seconds,
            tcp_keepalive=self.keep_alive,
            max_pool_connections=self.max_sockets,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for serialization."""
        return asdict(self)


@dataclass(frozen=True)
class MarshallOptions:
    """Conversion rules between Python values and DynamoDB attribute values."""

    # Write side
    remove_undefined_values: bool = True
    convert_empty_values: bool = False
    convert_class_instance_to_map: bool = False

    # Read side
    wrap_numbers: bool = False
