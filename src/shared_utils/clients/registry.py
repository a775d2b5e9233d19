"""
AWS client registry.

Holds at most one live client per kind for the lifetime of an execution
context, so warm Lambda invocations reuse connections instead of building
new clients. The registry is an explicit object owned by the service's
composition root; tests inject substitute handles through the constructor.
"""

import threading
from typing import Any, Callable, Dict, Mapping, Optional, Union

import boto3
from aws_lambda_powertools import Logger

from shared_utils.clients.config import ClientSettings, MarshallOptions
from shared_utils.clients.document_client import DocumentStoreClient
from shared_utils.errors import RegistryError
from shared_utils.models.core import ClientHealth, ClientKind
from shared_utils.utils.environment import is_test_environment


logger = Logger(child=True)

SubstituteProvider = Union[
    Callable[[ClientKind], Optional[Any]],
    Mapping[Union[ClientKind, str], Any],
]


class ClientRegistry:
    """
    Memoizing factory for the Cognito and DynamoDB clients.

    Example:
        registry = ClientRegistry()
        cognito = registry.get_client(ClientKind.COGNITO)
        documents = registry.get_dynamodb_client()

        # In tests
        fake = MagicMock()
        registry = ClientRegistry(substitute_provider={"cognito": fake}, allow_reset=True)
        assert registry.get_cognito_client() is fake

    Attributes:
        settings: Connection settings shared by every client
        marshall_options: Options for the document-store wrapper
        allow_reset: Whether reset_all may be called
    """

    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        substitute_provider: Optional[SubstituteProvider] = None,
        allow_reset: bool = False,
        session: Optional[boto3.session.Session] = None,
        marshall_options: Optional[MarshallOptions] = None
    ):
        self.settings = settings or ClientSettings.from_environment()
        self.marshall_options = marshall_options or MarshallOptions()
        self.allow_reset = allow_reset
        self._substitute_provider = substitute_provider
        self._session = session
        self._lock = threading.Lock()
        self._clients: Dict[ClientKind, Any] = {}
        self._substitutes: Dict[ClientKind, Any] = {}
        self._dynamodb_low_level: Any = None

    def get_client(self, kind: Union[ClientKind, str]) -> Any:
        """
        Get the client for a kind, constructing it on first use.

        Args:
            kind: ClientKind or its string value

        Returns:
            The shared client handle. Callers must not mutate it.

        Raises:
            RegistryError: If the kind is unknown
        """
        kind = self._coerce_kind(kind)

        client = self._clients.get(kind)
        if client is not None:
            return client

        with self._lock:
            client = self._clients.get(kind)
            if client is None:
                client = self._substitute_for(kind)
                if client is None:
                    client = self._construct(kind)
                else:
                    self._substitutes[kind] = client
                self._clients[kind] = client
            return client

    def get_cognito_client(self) -> Any:
        return self.get_client(ClientKind.COGNITO)

    def get_dynamodb_client(self) -> Any:
        return self.get_client(ClientKind.DYNAMODB)

    def initialize(self) -> Dict[str, Dict[str, bool]]:
        """
        Eagerly construct every client kind.

        Construction failures are logged and left for the first real call to
        raise, so a bad region or missing credentials never breaks cold start.

        Returns:
            The get_health snapshot after initialization
        """
        for kind in ClientKind:
            try:
                self.get_client(kind)
            except Exception as e:
                logger.warning(
                    f"Deferred {kind.value} client initialization",
                    extra={"error": str(e), "error_type": type(e).__name__}
                )

        logger.info(
            "AWS clients initialized for execution context reuse",
            extra={"settings": self.settings.to_dict()}
        )
        return self.get_health()

    def reset_all(self) -> None:
        """
        Drop every memoized client. Test isolation only.

        Raises:
            RegistryError: If the registry was not created with allow_reset=True
        """
        if not self.allow_reset:
            raise RegistryError("reset_all is only available when allow_reset=True")

        with self._lock:
            self._clients.clear()
            self._substitutes.clear()
            self._dynamodb_low_level = None

    def get_health(self) -> Dict[str, Dict[str, bool]]:
        """Report whether each kind is initialized and whether it is a substitute."""
        health = {}
        for kind in ClientKind:
            client = self._clients.get(kind)
            is_mock = client is not None and client is self._substitutes.get(kind)
            health[kind.value] = ClientHealth(
                initialized=client is not None,
                is_mock=is_mock
            ).model_dump()
        return health

    def _coerce_kind(self, kind: Union[ClientKind, str]) -> ClientKind:
        try:
            return ClientKind(kind)
        except ValueError:
            raise RegistryError(f"Unknown client kind: {kind}") from None

    def _substitute_for(self, kind: ClientKind) -> Optional[Any]:
        provider = self._substitute_provider
        if provider is None:
            return None
        if isinstance(provider, Mapping):
            substitute = provider.get(kind)
            return substitute if substitute is not None else provider.get(kind.value)
        return provider(kind)

    def _boto_client(self, service_name: str) -> Any:
        factory = self._session or boto3
        return factory.client(service_name, config=self.settings.to_boto_config())

    def _construct(self, kind: ClientKind) -> Any:
        logger.debug(f"Constructing {kind.value} client", extra={"region": self.settings.region})

        if kind == ClientKind.COGNITO:
            return self._boto_client("cognito-idp")

        if self._dynamodb_low_level is None:
            self._dynamodb_low_level = self._boto_client("dynamodb")
        return DocumentStoreClient(self._dynamodb_low_level, self.marshall_options)


def create_client_registry(eager: Optional[bool] = None, **kwargs) -> ClientRegistry:
    """
    Build the registry for a service's composition root.

    Args:
        eager: Construct clients immediately. Defaults to True outside tests.
        **kwargs: Passed to ClientRegistry

    Returns:
        A ClientRegistry, initialized when eager
    """
    registry = ClientRegistry(**kwargs)

    if eager is None:
        eager = not is_test_environment()

    if eager:
        registry.initialize()

    return registry
