"""Firestore database client over the REST API."""

import time
from collections.abc import Mapping
from typing import Any

import httpx
import structlog

from firestore_rest.adapters.token_client import ServiceAccountTokenClient, TokenProvider
from firestore_rest.codec import decode_document, encode_document
from firestore_rest.config.settings import FirestoreConfig
from firestore_rest.exceptions import ConfigurationError, FirestoreAPIError, InvalidPathError
from firestore_rest.merge import merge_update, without_id
from firestore_rest.paths import FirestorePath
from firestore_rest.query import QueryConstraints, compile_query
from firestore_rest.references import CollectionGroup, CollectionReference, DocumentReference

logger = structlog.get_logger(__name__)

# Tokens live 60 minutes; refresh well before that
TOKEN_TTL_SECONDS = 50 * 60
EMULATOR_TOKEN = "owner"


class FirestoreClient:
    """Client for Firestore CRUD operations and queries over REST.

    Connects to the emulator when ``config.use_emulator`` is set. The
    configuration is validated on the first operation, not in the
    constructor.
    """

    def __init__(
        self,
        config: FirestoreConfig,
        token_provider: TokenProvider | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize Firestore client.

        Args:
            config: Connection settings.
            token_provider: Source of bearer tokens. Defaults to a service
                account token client built from ``config``.
            http_client: Optional shared HTTP client. Not closed by aclose().
        """
        self._config = config
        self._paths = FirestorePath.from_config(config)
        self._token_provider = token_provider
        self._http = http_client if http_client is not None else httpx.AsyncClient()
        self._owns_http = http_client is None

        self._token: str | None = None
        self._token_expiry = 0.0
        self._config_checked = False

    @property
    def config(self) -> FirestoreConfig:
        return self._config

    @property
    def paths(self) -> FirestorePath:
        return self._paths

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "FirestoreClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # -------------------------------------------------------------------------
    # Configuration and auth
    # -------------------------------------------------------------------------

    def _check_config(self) -> None:
        if self._config_checked:
            return

        required = ["project_id"]
        if not self._config.use_emulator and self._token_provider is None:
            required += ["private_key", "client_email"]

        missing = [name for name in required if not getattr(self._config, name)]
        if missing:
            logger.warning("firestore_config_invalid", missing=missing)
            raise ConfigurationError(missing)

        self._config_checked = True

    async def get_token(self) -> str:
        """Get a bearer token, reusing the cached one until it goes stale.

        Returns:
            Access token. In emulator mode a fixed placeholder.
        """
        self._check_config()

        if self._config.use_emulator:
            return EMULATOR_TOKEN

        now = time.monotonic()
        if self._token is None or now >= self._token_expiry:
            if self._token_provider is None:
                self._token_provider = ServiceAccountTokenClient(
                    client_email=self._config.client_email,
                    private_key=self._config.private_key,
                    http_client=self._http,
                )
            self._token = await self._token_provider.fetch_token()
            self._token_expiry = now + TOKEN_TTL_SECONDS
            logger.info("token_refreshed", project_id=self._config.project_id)
        return self._token

    async def _request(
        self,
        method: str,
        url: str,
        body: dict[str, Any] | None = None,
        not_found_ok: bool = False,
    ) -> Any:
        """Send one authenticated request.

        Returns:
            Parsed JSON body, ``{}`` for an empty body, or None when the
            resource is missing and ``not_found_ok`` is set.

        Raises:
            FirestoreAPIError: On any other non-2xx status.
        """
        token = await self.get_token()
        if self._config.debug:
            logger.debug("firestore_request", method=method, url=url)

        response = await self._http.request(
            method,
            url,
            headers={"Authorization": f"Bearer {token}"},
            json=body,
        )

        if response.status_code == 404 and not_found_ok:
            return None
        if not response.is_success:
            logger.warning(
                "firestore_api_error",
                method=method,
                url=url,
                status=response.status_code,
            )
            raise FirestoreAPIError(response.status_code, response.text)

        if not response.content:
            return {}
        return response.json()

    # -------------------------------------------------------------------------
    # References
    # -------------------------------------------------------------------------

    def collection(self, path: str) -> CollectionReference:
        """Get a reference to a collection, e.g. ``"users"`` or ``"users/uid/posts"``."""
        return CollectionReference(self, path.strip("/"))

    def doc(self, path: str) -> DocumentReference:
        """Get a reference to a document from its full path.

        Raises:
            InvalidPathError: If the path does not have an even number of segments.
        """
        parts = path.strip("/").split("/")
        if len(parts) % 2 != 0:
            raise InvalidPathError(
                "Invalid document path. Document path must point to a document, "
                "not a collection.",
                path=path,
            )
        return DocumentReference(self, "/".join(parts[:-1]), parts[-1])

    def collection_group(self, collection_id: str) -> CollectionGroup:
        """Query every collection with this ID, at any depth."""
        return CollectionGroup(self, collection_id)

    # -------------------------------------------------------------------------
    # Document operations
    # -------------------------------------------------------------------------

    async def add(self, collection_path: str, data: Mapping[str, Any]) -> dict[str, Any]:
        """Create a document with a server-assigned ID.

        Args:
            collection_path: Collection path.
            data: Document data.

        Returns:
            The created document including its new ``id``.
        """
        self._check_config()
        url = self._paths.collection_path(collection_path)
        result = await self._request("POST", url, encode_document(data))
        return decode_document(result)

    create = add

    async def get(self, collection_path: str, document_id: str) -> dict[str, Any] | None:
        """Get a document by ID.

        Args:
            collection_path: Collection path.
            document_id: Document ID.

        Returns:
            Document data with ``id``, or None if not found.
        """
        self._check_config()
        url = self._paths.document_path(collection_path, document_id)
        result = await self._request("GET", url, not_found_ok=True)
        if result is None:
            return None
        return decode_document(result)

    async def update(
        self, collection_path: str, document_id: str, data: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Merge fields into a document.

        The REST PATCH replaces the whole document, so the current document
        is read first and ``data`` is merged onto it (see merge_update).
        When the document does not exist, ``data`` is written as given.

        Args:
            collection_path: Collection path.
            document_id: Document ID.
            data: Fields to update; dotted keys address nested fields.

        Returns:
            The document as written.
        """
        self._check_config()
        existing = await self.get(collection_path, document_id)
        if existing is not None:
            payload = merge_update(without_id(existing), data)
        else:
            payload = dict(data)

        url = self._paths.document_path(collection_path, document_id)
        result = await self._request("PATCH", url, encode_document(payload))
        return decode_document(result)

    async def create_with_id(
        self, collection_path: str, document_id: str, data: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Create or replace a document at a chosen ID.

        Args:
            collection_path: Collection path.
            document_id: Document ID.
            data: Complete document data.

        Returns:
            The document as written.
        """
        self._check_config()
        url = self._paths.document_path(collection_path, document_id)
        result = await self._request("PATCH", url, encode_document(data))
        return decode_document(result)

    async def delete(self, collection_path: str, document_id: str) -> bool:
        """Delete a document. Deleting a missing document succeeds.

        Args:
            collection_path: Collection path.
            document_id: Document ID.

        Returns:
            True once the document is gone.
        """
        self._check_config()
        url = self._paths.document_path(collection_path, document_id)
        await self._request("DELETE", url, not_found_ok=True)
        return True

    async def query(
        self,
        collection_path: str,
        constraints: QueryConstraints | None = None,
        all_descendants: bool = False,
    ) -> list[dict[str, Any]]:
        """Query documents in a collection.

        Args:
            collection_path: Collection path, or a bare collection ID for a
                collection group query.
            constraints: Filters, ordering and pagination.
            all_descendants: Match the collection ID at any depth.

        Returns:
            Matching documents in the order returned by the server.
        """
        self._check_config()
        query_path = self._paths.query_path(collection_path)
        structured = compile_query(
            query_path.collection_id, constraints, all_descendants=all_descendants
        )

        results = await self._request(
            "POST", query_path.url, {"structuredQuery": structured}
        )
        if isinstance(results, dict):
            results = [results]

        # runQuery streams entries without a document (e.g. only readTime)
        return [
            decode_document(item["document"])
            for item in results
            if item.get("document")
        ]


def create_firestore_client(config: FirestoreConfig, **kwargs: Any) -> FirestoreClient:
    """Create a FirestoreClient from a configuration.

    Args:
        config: Connection settings.
        **kwargs: Passed through to FirestoreClient.
    """
    return FirestoreClient(config, **kwargs)
