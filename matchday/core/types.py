"""Core data types for the matchday application."""

from typing import Any, TypedDict


class _FirestoreDocumentBase(TypedDict):
    id: str
    createdAt: Any


class FirestoreDocument(_FirestoreDocumentBase, total=False):
    """Generic Firestore document structure."""

    path: str
    updatedAt: Any


class ParticipantRef(TypedDict):
    """An opaque bracket slot: a Team or Player id plus its display name."""

    id: str
    name: str

