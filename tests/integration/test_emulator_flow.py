"""Integration tests against the Firestore emulator.

Each test runs in its own project ID so data never leaks between tests.
"""

import uuid
from collections.abc import AsyncIterator
from datetime import UTC, datetime

import pytest
import pytest_asyncio

from firestore_rest import FirestoreClient, FirestoreConfig
from tests.utils import emulator_address, is_emulator_available

# Skip when no emulator is listening
pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        not is_emulator_available(),
        reason="Firestore emulator not available at FIRESTORE_EMULATOR_HOST",
    ),
]


@pytest_asyncio.fixture
async def firestore_client() -> AsyncIterator[FirestoreClient]:
    """Emulator client isolated per test."""
    host, port = emulator_address()
    config = FirestoreConfig(
        project_id=f"test-project-{uuid.uuid4().hex[:8]}",
        use_emulator=True,
        emulator_host=host,
        emulator_port=port,
    )
    async with FirestoreClient(config) as client:
        yield client


class TestDocumentFlow:
    """Create, read, update and delete."""

    @pytest.mark.asyncio
    async def test_create_read_delete(self, firestore_client: FirestoreClient) -> None:
        created = await firestore_client.add("c", {"name": "Item", "value": 1})
        assert created["id"]

        loaded = await firestore_client.get("c", created["id"])
        assert loaded == {"name": "Item", "value": 1, "id": created["id"]}

        await firestore_client.delete("c", created["id"])
        assert await firestore_client.get("c", created["id"]) is None

    @pytest.mark.asyncio
    async def test_update_nested_field(self, firestore_client: FirestoreClient) -> None:
        created = await firestore_client.add(
            "users", {"name": "Kim", "profile": {"age": 30, "job": "Engineer"}}
        )

        await firestore_client.update("users", created["id"], {"profile.age": 31})

        loaded = await firestore_client.get("users", created["id"])
        assert loaded is not None
        assert loaded["profile"] == {"age": 31, "job": "Engineer"}

    @pytest.mark.asyncio
    async def test_value_types_survive_storage(self, firestore_client: FirestoreClient) -> None:
        data = {
            "text": "hello",
            "count": 42,
            "ratio": 0.25,
            "flag": False,
            "nothing": None,
            "when": datetime(2025, 1, 2, 3, 4, 5, 678000, tzinfo=UTC),
            "tags": ["a", "b"],
            "nested": {"deep": {"value": 1}},
        }

        created = await firestore_client.add("types", data)
        loaded = await firestore_client.get("types", created["id"])

        assert loaded == {**data, "id": created["id"]}

    @pytest.mark.asyncio
    async def test_delete_missing_document(self, firestore_client: FirestoreClient) -> None:
        assert await firestore_client.delete("c", "does-not-exist") is True


class TestQueryFlow:
    """Queries through references."""

    @pytest.mark.asyncio
    async def test_equality_and_membership(self, firestore_client: FirestoreClient) -> None:
        products = firestore_client.collection("products")
        for category in ["A", "B", "A", "C", "A"]:
            await products.add({"category": category})

        equal = await products.where("category", "==", "A").get()
        in_list = await products.where("category", "in", ["A", "B"]).get()
        not_in = await products.where("category", "not-in", ["A", "B"]).get()

        assert equal.size == 3
        assert in_list.size == 4
        assert [doc.get("category") for doc in not_in] == ["C"]

    @pytest.mark.asyncio
    async def test_order_by_and_limit(self, firestore_client: FirestoreClient) -> None:
        products = firestore_client.collection("products")
        for price in [300, 100, 200]:
            await products.add({"price": price})

        snapshot = await products.order_by("price", "desc").limit(2).get()

        assert [doc.get("price") for doc in snapshot] == [300, 200]

    @pytest.mark.asyncio
    async def test_subcollection_and_collection_group(
        self, firestore_client: FirestoreClient
    ) -> None:
        await firestore_client.doc("users/u1").set({"name": "One"})
        await firestore_client.collection("users/u1/posts").add({"title": "first"})
        await firestore_client.collection("users/u2/posts").add({"title": "second"})

        own_posts = await firestore_client.doc("users/u1").collection("posts").get()
        all_posts = await firestore_client.collection_group("posts").get()

        assert [doc.get("title") for doc in own_posts] == ["first"]
        assert sorted(doc.get("title") for doc in all_posts) == ["first", "second"]
