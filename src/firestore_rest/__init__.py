"""Firestore REST client for runtimes that cannot use the gRPC client."""

from firestore_rest.adapters.firestore_client import FirestoreClient, create_firestore_client
from firestore_rest.adapters.token_client import ServiceAccountTokenClient, create_jwt
from firestore_rest.codec import decode_document, decode_value, encode_document, encode_value
from firestore_rest.config.settings import FirestoreConfig, format_private_key
from firestore_rest.exceptions import (
    AuthenticationError,
    ConfigurationError,
    FirestoreAPIError,
    FirestoreError,
    InvalidPathError,
)
from firestore_rest.paths import FirestorePath, get_document_id, get_firestore_base_path
from firestore_rest.query import FieldFilter, QueryConstraints, compile_query
from firestore_rest.references import (
    CollectionGroup,
    CollectionReference,
    DocumentReference,
    DocumentSnapshot,
    Query,
    QuerySnapshot,
    WriteResult,
)

__all__ = [
    "AuthenticationError",
    "CollectionGroup",
    "CollectionReference",
    "ConfigurationError",
    "DocumentReference",
    "DocumentSnapshot",
    "FieldFilter",
    "FirestoreAPIError",
    "FirestoreClient",
    "FirestoreConfig",
    "FirestoreError",
    "FirestorePath",
    "InvalidPathError",
    "Query",
    "QueryConstraints",
    "QuerySnapshot",
    "ServiceAccountTokenClient",
    "WriteResult",
    "compile_query",
    "create_firestore_client",
    "create_jwt",
    "decode_document",
    "decode_value",
    "encode_document",
    "encode_value",
    "format_private_key",
    "get_document_id",
    "get_firestore_base_path",
]
