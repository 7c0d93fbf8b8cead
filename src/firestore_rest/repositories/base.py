"""Base repository for typed Firestore data access.

Maps pydantic models onto a collection through FirestoreClient.
"""

from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel

from firestore_rest.adapters.firestore_client import FirestoreClient
from firestore_rest.query import QueryConstraints

# Pydantic model type variable
T = TypeVar("T", bound=BaseModel)


class BaseRepository(Generic[T]):
    """Firestore repository base class.

    Subclasses define ``collection_name`` and ``model_class``. Models must
    have an ``id`` field; it is used as the document ID and is not stored
    as a field.

    Example:
        class UserRepository(BaseRepository[User]):
            collection_name = "users"
            model_class = User
    """

    collection_name: ClassVar[str]
    model_class: ClassVar[type[BaseModel]]

    def __init__(self, firestore_client: FirestoreClient) -> None:
        """Initialize repository with Firestore client.

        Args:
            firestore_client: Firestore client instance.
        """
        self._db = firestore_client

    async def get_by_id(self, doc_id: str) -> T | None:
        """Get a model by document ID.

        Args:
            doc_id: Document ID.

        Returns:
            Model instance or None.
        """
        data = await self._db.get(self.collection_name, doc_id)
        if data is None:
            return None
        return self.model_class(**data)  # type: ignore[return-value]

    async def create(self, model: T) -> None:
        """Create (or replace) the document for a model.

        Args:
            model: Model instance to store.
        """
        await self._db.create_with_id(
            self.collection_name,
            model.id,  # type: ignore[attr-defined]
            self._model_to_dict(model),
        )

    async def update(self, model: T) -> None:
        """Replace the document for a model.

        Args:
            model: Model instance to store.
        """
        await self._db.create_with_id(
            self.collection_name,
            model.id,  # type: ignore[attr-defined]
            self._model_to_dict(model),
        )

    async def delete(self, doc_id: str) -> None:
        """Delete a document.

        Args:
            doc_id: Document ID.
        """
        await self._db.delete(self.collection_name, doc_id)

    async def find_by(self, filters: list[tuple[str, str, Any]]) -> list[T]:
        """Find models matching all filters.

        Args:
            filters: List of (field, operator, value) tuples.

        Returns:
            Matching model instances.
        """
        constraints = QueryConstraints()
        for field_path, op, value in filters:
            constraints = constraints.with_filter(field_path, op, value)

        results = await self._db.query(self.collection_name, constraints)
        return [self.model_class(**data) for data in results]  # type: ignore[misc]

    async def find_all(self) -> list[T]:
        """Get every model in the collection."""
        return await self.find_by([])

    async def exists(self, doc_id: str) -> bool:
        """Check whether a document exists.

        Args:
            doc_id: Document ID.
        """
        data = await self._db.get(self.collection_name, doc_id)
        return data is not None

    async def count(self, filters: list[tuple[str, str, Any]] | None = None) -> int:
        """Count models matching the filters.

        Args:
            filters: Optional filter conditions.
        """
        results = await self.find_by(filters or [])
        return len(results)

    def _model_to_dict(self, model: T) -> dict[str, Any]:
        # mode='python' keeps datetime objects so they are stored as timestamps
        data = model.model_dump(mode="python")
        data.pop("id", None)
        return data
