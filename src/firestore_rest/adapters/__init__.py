"""External service adapters."""

from firestore_rest.adapters.firestore_client import FirestoreClient, create_firestore_client
from firestore_rest.adapters.token_client import (
    ServiceAccountTokenClient,
    TokenProvider,
    create_jwt,
)

__all__ = [
    "FirestoreClient",
    "ServiceAccountTokenClient",
    "TokenProvider",
    "create_firestore_client",
    "create_jwt",
]
