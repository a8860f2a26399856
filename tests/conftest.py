"""Common utilities for tests."""

import unittest
import unittest.mock
from typing import Any, Iterator, Optional

from mockfirestore import CollectionReference, MockFirestore, Query
from mockfirestore.document import DocumentReference

# Modules that talk to Firestore through ``firebase_admin.firestore``.
FIRESTORE_MODULES = (
    "matchday.tournament.services",
    "matchday.tournament.registry",
    "matchday.tournament.utils",
    "matchday.teams.services",
    "matchday.match.services",
)

MOCK_SERVER_TIMESTAMP = "2024-01-01T00:00:00+00:00"


class MockArrayUnion:
    def __init__(self, values: list[Any]) -> None:
        self.values = values

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)


class MockArrayRemove:
    def __init__(self, values: list[Any]) -> None:
        self.values = values

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)


class MockFieldFilter:
    def __init__(self, field_path: str, op_string: str, value: Any) -> None:
        self.field_path = field_path
        self.op_string = op_string
        self.value = value


def patch_mockfirestore() -> None:
    """Apply monkeypatches to mockfirestore to support FieldFilter and transforms."""

    def collection_where(
        self: Any,
        field_path: Optional[str] = None,
        op_string: Optional[str] = None,
        value: Any = None,
        filter: Any = None,
    ) -> Any:  # noqa: E501
        if filter:
            return self._where(filter.field_path, filter.op_string, filter.value)
        return self._where(field_path, op_string, value)

    if not hasattr(CollectionReference, "_where"):
        CollectionReference._where = CollectionReference.where
        CollectionReference.where = collection_where

    def query_where(
        self: Any,
        field_path: Optional[str] = None,
        op_string: Optional[str] = None,
        value: Any = None,
        filter: Any = None,
    ) -> Any:
        if filter:
            return self._where(filter.field_path, filter.op_string, filter.value)
        return self._where(field_path, op_string, value)

    if not hasattr(Query, "_where"):
        Query._where = Query.where
        Query.where = query_where

    # Transactional reads pass ``transaction=``.
    if not hasattr(DocumentReference, "_orig_get"):
        DocumentReference._orig_get = DocumentReference.get

        def patched_get(self: Any, *args: Any, **kwargs: Any) -> Any:
            return self._orig_get()

        DocumentReference.get = patched_get

    if not hasattr(DocumentReference, "_orig_update"):
        DocumentReference._orig_update = DocumentReference.update

        def patched_update(self: Any, data: dict[str, Any]) -> Any:
            current_data = self.get().to_dict() or {}
            new_data = {}
            for k, v in data.items():
                if isinstance(v, MockArrayUnion):
                    existing = current_data.get(k, [])
                    if not isinstance(existing, list):
                        existing = []
                    merged = list(existing)
                    for item in v.values:
                        if item not in merged:
                            merged.append(item)
                    new_data[k] = merged
                elif isinstance(v, MockArrayRemove):
                    existing = current_data.get(k, [])
                    if not isinstance(existing, list):
                        existing = []
                    new_data[k] = [i for i in existing if i not in v.values]
                else:
                    new_data[k] = v
            return self._orig_update(new_data)

        DocumentReference.update = patched_update


def _apply_write(op: str, ref: Any, data: Any, merge: bool) -> None:
    if op == "delete":
        ref.delete()
    elif op == "update":
        ref.update(data)
    elif merge and ref.get().exists:
        ref.update(data)
    else:
        ref.set(data)


class MockBatch:
    def __init__(self, db: Any) -> None:
        self.db = db
        self.writes: list[tuple[str, Any, Any, bool]] = []
        self.commit = unittest.mock.MagicMock(side_effect=self._real_commit)

    def update(self, ref: Any, data: Any) -> None:
        self.writes.append(("update", ref, data, False))

    def set(self, ref: Any, data: Any, merge: bool = False) -> None:
        self.writes.append(("set", ref, data, merge))

    def delete(self, ref: Any) -> None:
        self.writes.append(("delete", ref, None, False))

    def _real_commit(self) -> None:
        for op, ref, data, merge in self.writes:
            _apply_write(op, ref, data, merge)


class MockTransaction(MockBatch):
    """Buffers writes until the transactional function returns."""

    def __init__(self, db: Any = None) -> None:
        super().__init__(db)


def mock_transactional(func: Any) -> Any:
    """Stand-in for ``firestore.transactional``: commit only on success."""

    def run(transaction: Any, *args: Any, **kwargs: Any) -> Any:
        result = func(transaction, *args, **kwargs)
        transaction.commit()
        return result

    return run


def build_mock_db() -> MockFirestore:
    """A MockFirestore whose batches and transactions apply their writes."""
    patch_mockfirestore()
    db = MockFirestore()
    db.batch = unittest.mock.MagicMock(side_effect=lambda: MockBatch(db))
    db.transaction = unittest.mock.MagicMock(side_effect=lambda: MockTransaction(db))
    return db


def build_firestore_module(db: Any) -> unittest.mock.MagicMock:
    """A stand-in for ``firebase_admin.firestore`` bound to ``db``."""
    module = unittest.mock.MagicMock()
    module.client.return_value = db
    module.FieldFilter = MockFieldFilter
    module.ArrayUnion = MockArrayUnion
    module.ArrayRemove = MockArrayRemove
    module.SERVER_TIMESTAMP = MOCK_SERVER_TIMESTAMP
    module.transactional = mock_transactional
    return module


class FirestoreTestCase(unittest.TestCase):
    """Base test case with every service module pointed at a MockFirestore."""

    def setUp(self) -> None:
        self.db = build_mock_db()
        self.mock_firestore_module = build_firestore_module(self.db)
        for target in FIRESTORE_MODULES:
            patcher = unittest.mock.patch(
                f"{target}.firestore", new=self.mock_firestore_module
            )
            patcher.start()
            self.addCleanup(patcher.stop)

    # Fixture helpers

    def add_user(self, uid: str, unique_id: str, role: str = "manager") -> None:
        self.db.collection("users").document(uid).set(
            {"uniqueId": unique_id, "role": role, "username": uid}
        )

    def add_tournament(self, tournament_id: str = "t1", **fields: Any) -> str:
        data = {
            "name": "Spring Cup",
            "sport": "football",
            "format": "round-robin",
            "participantsType": "Player",
            "maxParticipants": 4,
            "playersPerTeam": None,
            "status": "pending",
            "venueType": "single",
            "venues": ["Main Ground"],
            "registeredParticipants": [],
            "winner": None,
        }
        data.update(fields)
        self.db.collection("tournaments").document(tournament_id).set(data)
        return tournament_id

    def add_team(self, team_id: str, name: str, **fields: Any) -> str:
        data = {
            "name": name,
            "managerId": f"mgr-{team_id}",
            "roster": [],
            "isReady": True,
            "tournamentIds": [],
        }
        data.update(fields)
        self.db.collection("teams").document(team_id).set(data)
        return team_id

    def tournament(self, tournament_id: str = "t1") -> dict[str, Any]:
        return self.db.collection("tournaments").document(tournament_id).get().to_dict()

    def matches(self, tournament_id: str = "t1") -> list[dict[str, Any]]:
        docs = (
            self.db.collection("matches")
            .where("tournamentId", "==", tournament_id)
            .stream()
        )
        result = []
        for doc in docs:
            data = doc.to_dict()
            data["id"] = doc.id
            result.append(data)
        return sorted(
            result, key=lambda m: (m.get("roundNumber", 0), m.get("matchNumber", 0))
        )


def refs(*names: str) -> list[dict[str, str]]:
    """Participant refs whose ids are the lower-cased names."""
    return [{"id": name.lower(), "name": name} for name in names]
