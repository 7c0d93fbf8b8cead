"""Build Firestore REST resource URLs.

Handles production and emulator hosts, collection and document URLs, and
the ``:runQuery`` endpoints for top-level and nested collections.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from firestore_rest.config.settings import DEFAULT_DATABASE_ID

if TYPE_CHECKING:
    from firestore_rest.config.settings import FirestoreConfig

logger = structlog.get_logger(__name__)

PRODUCTION_HOST = "https://firestore.googleapis.com"


def _clean(path: str) -> str:
    return path.strip("/")


def get_document_id(resource_name: str | None) -> str:
    """Extract the document ID from a resource name.

    Args:
        resource_name: e.g. ``projects/p/databases/(default)/documents/users/abc``.

    Returns:
        The last path segment, or an empty string for empty input.
    """
    if not resource_name:
        return ""
    return resource_name.split("/")[-1]


@dataclass(frozen=True)
class QueryPath:
    """Where a structured query for a collection path must be sent."""

    url: str
    collection_id: str
    parent_path: str | None = None


class FirestorePath:
    """Builds URLs for one project and database.

    Example:
        paths = FirestorePath(project_id="demo")
        paths.document_path("users", "abc")
        # https://firestore.googleapis.com/v1/projects/demo/databases/(default)/documents/users/abc
    """

    def __init__(
        self,
        project_id: str,
        database_id: str | None = None,
        use_emulator: bool = False,
        emulator_host: str = "localhost",
        emulator_port: int = 8080,
        debug: bool = False,
    ) -> None:
        self._project_id = project_id
        self._database_id = database_id or DEFAULT_DATABASE_ID
        self._use_emulator = use_emulator
        self._emulator_host = emulator_host or "localhost"
        self._emulator_port = emulator_port or 8080
        self._debug = debug

    @classmethod
    def from_config(cls, config: FirestoreConfig) -> FirestorePath:
        """Create a path builder from a client configuration."""
        return cls(
            project_id=config.project_id,
            database_id=config.database_id,
            use_emulator=config.use_emulator,
            emulator_host=config.emulator_host,
            emulator_port=config.emulator_port,
            debug=config.debug,
        )

    def _trace(self, event: str, **kwargs: object) -> None:
        if self._debug:
            logger.debug(event, **kwargs)

    def base_path(self) -> str:
        """Firestore documents root URL, without any document path."""
        if self._use_emulator:
            host = f"http://{self._emulator_host}:{self._emulator_port}"
        else:
            host = PRODUCTION_HOST
        path = (
            f"{host}/v1/projects/{self._project_id}"
            f"/databases/{self._database_id}/documents"
        )
        self._trace("generated_base_path", path=path)
        return path

    def collection_path(self, path: str) -> str:
        """URL of a collection.

        Args:
            path: Collection path, e.g. ``"users"`` or ``"users/uid/posts"``.
        """
        full_path = f"{self.base_path()}/{_clean(path)}"
        self._trace("generated_collection_path", path=full_path)
        return full_path

    def document_path(self, collection_path: str, document_id: str) -> str:
        """URL of a document inside a collection."""
        full_path = f"{self.base_path()}/{_clean(collection_path)}/{document_id}"
        self._trace("generated_document_path", path=full_path)
        return full_path

    def query_path(self, path: str) -> QueryPath:
        """Resolve the runQuery endpoint for a collection path.

        A top-level collection is queried at the database root. A nested
        collection is queried under its parent document, with only the last
        segment as the collection ID.

        Args:
            path: Collection path, e.g. ``"users"`` or ``"users/uid/posts"``.

        Returns:
            QueryPath with the URL, collection ID and optional parent path.
        """
        segments = _clean(path).split("/")

        if len(segments) == 1:
            url = f"{self.base_path()}:runQuery"
            self._trace("generated_query_path", url=url, collection_id=segments[0])
            return QueryPath(url=url, collection_id=segments[0])

        collection_id = segments[-1]
        parent_path = "/".join(segments[:-1])
        root = self.base_path().removesuffix("/documents")
        url = f"{root}/documents/{parent_path}:runQuery"
        self._trace(
            "generated_query_path",
            url=url,
            collection_id=collection_id,
            parent_path=parent_path,
        )
        return QueryPath(url=url, collection_id=collection_id, parent_path=parent_path)

    def run_query_path(self, collection_path: str) -> str:
        """URL for executing runQuery against a collection path."""
        return self.query_path(collection_path).url

    def parent_reference(self, parent_path: str) -> str:
        """Resource name of a parent document, as used inside queries."""
        return (
            f"projects/{self._project_id}/databases/{self._database_id}"
            f"/documents/{_clean(parent_path)}"
        )


def get_firestore_base_path(
    project_id: str,
    database_id: str | None = None,
    config: FirestoreConfig | None = None,
) -> str:
    """Firestore documents root URL for a project.

    Args:
        project_id: GCP project ID.
        database_id: Database ID, defaults to ``(default)``.
        config: Optional configuration supplying emulator settings.

    Returns:
        Base URL without a document path.
    """
    if config is not None and config.use_emulator:
        return FirestorePath(
            project_id,
            database_id,
            use_emulator=True,
            emulator_host=config.emulator_host,
            emulator_port=config.emulator_port,
        ).base_path()
    return FirestorePath(project_id, database_id).base_path()
