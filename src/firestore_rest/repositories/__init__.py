"""Typed data access on top of FirestoreClient."""

from firestore_rest.repositories.base import BaseRepository

__all__ = [
    "BaseRepository",
]
