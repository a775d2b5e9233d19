# AWS clients package

from shared_utils.clients.config import ClientSettings, MarshallOptions
from shared_utils.clients.document_client import DocumentStoreClient
from shared_utils.clients.registry import ClientRegistry, create_client_registry

__all__ = [
    "ClientSettings",
    "MarshallOptions",
    "DocumentStoreClient",
    "ClientRegistry",
    "create_client_registry",
]
