"""Chainable references, queries and snapshots.

Mirrors the official client's surface: references and queries are cheap,
immutable handles and only ``get``/``set``/``update``/``delete``/``add``
touch the network.
"""

from __future__ import annotations

import random
import string
from collections.abc import Callable, Iterator, Mapping
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from firestore_rest.exceptions import InvalidPathError
from firestore_rest.merge import merge_update, without_id
from firestore_rest.query import QueryConstraints

if TYPE_CHECKING:
    from firestore_rest.adapters.firestore_client import FirestoreClient

AUTO_ID_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits
AUTO_ID_LENGTH = 20


def generate_document_id() -> str:
    """Random 20 character alphanumeric document ID.

    Not guaranteed unique; a collision shows up as a failed write.
    """
    return "".join(random.choice(AUTO_ID_ALPHABET) for _ in range(AUTO_ID_LENGTH))


def _segments(path: str) -> list[str]:
    return [s for s in path.strip("/").split("/") if s]


class WriteResult:
    """Result of a write; ``write_time`` is when the call completed locally."""

    def __init__(self, write_time: datetime | None = None) -> None:
        self.write_time = write_time or datetime.now(UTC)

    def __repr__(self) -> str:
        return f"WriteResult(write_time={self.write_time.isoformat()})"


class DocumentSnapshot:
    """A document as read at one point in time."""

    def __init__(self, doc_id: str, data: Mapping[str, Any] | None) -> None:
        self._id = doc_id
        self._data = without_id(data) if data is not None else None

    @property
    def id(self) -> str:
        return self._id

    @property
    def exists(self) -> bool:
        return self._data is not None

    def data(self) -> dict[str, Any] | None:
        """Document fields, or None if the document does not exist."""
        return self._data

    def get(self, field_path: str) -> Any:
        """Read one field; dotted paths walk into maps."""
        value: Any = self._data
        for key in field_path.split("."):
            if not isinstance(value, dict):
                return None
            value = value.get(key)
        return value

    def __repr__(self) -> str:
        return f"DocumentSnapshot(id={self._id!r}, exists={self.exists})"


class QuerySnapshot:
    """Results of a query, in the order returned by the server."""

    def __init__(self, results: list[dict[str, Any]]) -> None:
        self._docs = [DocumentSnapshot(doc.get("id", ""), doc) for doc in results]

    @property
    def docs(self) -> list[DocumentSnapshot]:
        return list(self._docs)

    @property
    def empty(self) -> bool:
        return not self._docs

    @property
    def size(self) -> int:
        return len(self._docs)

    def for_each(self, callback: Callable[[DocumentSnapshot], Any]) -> None:
        for doc in self._docs:
            callback(doc)

    def __iter__(self) -> Iterator[DocumentSnapshot]:
        return iter(self._docs)

    def __len__(self) -> int:
        return len(self._docs)


class Query:
    """An immutable query over a collection or collection group.

    Every builder method returns a new Query; the receiver is unchanged, so
    a partially built query can be reused as a base for several others.
    """

    def __init__(
        self,
        client: FirestoreClient,
        path: str,
        constraints: QueryConstraints | None = None,
        all_descendants: bool = False,
    ) -> None:
        self._client = client
        self._path = path
        self._constraints = constraints or QueryConstraints()
        self._all_descendants = all_descendants

    @property
    def constraints(self) -> QueryConstraints:
        return self._constraints

    @property
    def all_descendants(self) -> bool:
        return self._all_descendants

    def _with(self, constraints: QueryConstraints) -> Query:
        return Query(self._client, self._path, constraints, self._all_descendants)

    def where(self, field_path: str, op: str, value: Any) -> Query:
        """Add a filter; multiple filters are combined with AND.

        Args:
            field_path: Field to compare.
            op: One of ``==``, ``!=``, ``<``, ``<=``, ``>``, ``>=``,
                ``array-contains``, ``in``, ``array-contains-any``, ``not-in``.
            value: Value to compare against.
        """
        return self._with(self._constraints.with_filter(field_path, op, value))

    def order_by(self, field_path: str, direction: str = "asc") -> Query:
        """Order results by a field, ``asc`` or ``desc``. Replaces any previous ordering."""
        return self._with(self._constraints.with_order_by(field_path, direction))

    def limit(self, count: int) -> Query:
        return self._with(self._constraints.with_limit(count))

    def offset(self, count: int) -> Query:
        return self._with(self._constraints.with_offset(count))

    async def get(self) -> QuerySnapshot:
        """Run the query."""
        results = await self._client.query(
            self._path, self._constraints, all_descendants=self._all_descendants
        )
        return QuerySnapshot(results)


class CollectionReference(Query):
    """Reference to a collection such as ``users`` or ``users/uid/posts``."""

    def __init__(self, client: FirestoreClient, path: str) -> None:
        segments = _segments(path)
        if not segments or len(segments) % 2 == 0:
            raise InvalidPathError(
                "Invalid collection path. Collection path must have an odd "
                "number of segments.",
                path=path,
            )
        super().__init__(client, "/".join(segments))

    @property
    def id(self) -> str:
        return self._path.split("/")[-1]

    @property
    def path(self) -> str:
        return self._path

    @property
    def parent(self) -> DocumentReference | None:
        """The document holding this subcollection, or None at the top level."""
        segments = self._path.split("/")
        if len(segments) == 1:
            return None
        return DocumentReference(self._client, "/".join(segments[:-2]), segments[-2])

    def doc(self, document_id: str | None = None) -> DocumentReference:
        """Reference a document in this collection; a random ID is used if omitted."""
        if document_id is None:
            document_id = generate_document_id()
        return DocumentReference(self._client, self._path, document_id)

    async def add(self, data: Mapping[str, Any]) -> DocumentReference:
        """Create a document with a server-assigned ID."""
        result = await self._client.add(self._path, data)
        return DocumentReference(self._client, self._path, result["id"])


class CollectionGroup(Query):
    """All collections with the same ID, at any depth."""

    def __init__(self, client: FirestoreClient, collection_id: str) -> None:
        collection_id = collection_id.strip("/")
        if not collection_id or "/" in collection_id:
            raise InvalidPathError(
                "Invalid collection group. Collection ID must not contain '/'.",
                path=collection_id,
            )
        super().__init__(client, collection_id, all_descendants=True)

    @property
    def id(self) -> str:
        return self._path


class DocumentReference:
    """Reference to a single document."""

    def __init__(self, client: FirestoreClient, collection_path: str, doc_id: str) -> None:
        collection_segments = _segments(collection_path)
        if (
            not doc_id
            or "/" in doc_id
            or not collection_segments
            or len(collection_segments) % 2 == 0
        ):
            raise InvalidPathError(
                "Invalid document path. Document path must have an even number "
                "of segments.",
                path=f"{collection_path}/{doc_id}",
            )
        self._client = client
        self._collection_path = "/".join(collection_segments)
        self._id = doc_id

    @property
    def id(self) -> str:
        return self._id

    @property
    def path(self) -> str:
        return f"{self._collection_path}/{self._id}"

    @property
    def parent(self) -> CollectionReference:
        return CollectionReference(self._client, self._collection_path)

    def collection(self, collection_path: str) -> CollectionReference:
        """Reference a subcollection of this document."""
        return CollectionReference(self._client, f"{self.path}/{collection_path.strip('/')}")

    async def get(self) -> DocumentSnapshot:
        data = await self._client.get(self._collection_path, self._id)
        return DocumentSnapshot(self._id, data)

    async def set(self, data: Mapping[str, Any], merge: bool = False) -> WriteResult:
        """Create or overwrite the document.

        Args:
            data: Document data.
            merge: Merge into an existing document instead of replacing it.
        """
        existing = await self._client.get(self._collection_path, self._id)

        if existing is not None and merge:
            merged = merge_update(without_id(existing), data)
            await self._client.create_with_id(self._collection_path, self._id, merged)
        else:
            await self._client.create_with_id(self._collection_path, self._id, data)

        return WriteResult()

    async def update(self, data: Mapping[str, Any]) -> WriteResult:
        """Merge fields into the document; dotted keys address nested fields."""
        await self._client.update(self._collection_path, self._id, data)
        return WriteResult()

    async def delete(self) -> WriteResult:
        await self._client.delete(self._collection_path, self._id)
        return WriteResult()

    def __repr__(self) -> str:
        return f"DocumentReference(path={self.path!r})"
