"""
In-memory stand-in for the Firestore client used when USE_MOCK_DB is set.

Implements only the surface the services and the seed script call:
- client: collection(), collections(), batch()
- collection/query: document(), where(), stream(), get()
- document: get(), set(), create(), update(), delete()
- write batch: set(), update(), commit()
- field transforms: ArrayUnion

All operations run under one lock, so ArrayUnion appends and batch commits are
atomic the same way they are on the server. Missing documents raise the same
google.api_core exceptions the real client raises.

When a path is given, the whole database is written to a JSON file after each
commit and reloaded on startup (datetimes are tagged so they round-trip).
"""

import copy
import json
import logging
import os
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional, Tuple

from firebase_admin import firestore
from google.api_core import exceptions as gcloud_exceptions

logger = logging.getLogger(__name__)

_DATETIME_TAG = "__datetime__"
_MISSING = object()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _get_path(data: Dict, field_path: str) -> Any:
    current: Any = data
    for part in field_path.split("."):
        if not isinstance(current, dict) or part not in current:
            return _MISSING
        current = current[part]
    return current


def _set_path(data: Dict, field_path: str, value: Any) -> None:
    parts = field_path.split(".")
    current = data
    for part in parts[:-1]:
        nxt = current.get(part)
        if not isinstance(nxt, dict):
            nxt = {}
            current[part] = nxt
        current = nxt
    current[parts[-1]] = value


def _apply_transform(existing: Any, value: Any) -> Any:
    """Resolve ArrayUnion transforms (at any depth) against the stored value."""
    if isinstance(value, firestore.ArrayUnion):
        current = list(existing) if isinstance(existing, list) else []
        for item in value.values:
            if item not in current:
                current.append(copy.deepcopy(item))
        return current
    if isinstance(value, dict):
        nested_existing = existing if isinstance(existing, dict) else {}
        return {
            key: _apply_transform(nested_existing.get(key, _MISSING), item)
            for key, item in value.items()
        }
    return copy.deepcopy(value)


def _compare(op: str, left: Any, right: Any) -> bool:
    if left is _MISSING:
        return False
    try:
        if op == "==":
            return left == right
        if op == "!=":
            return left != right
        if op == "<":
            return left < right
        if op == "<=":
            return left <= right
        if op == ">":
            return left > right
        if op == ">=":
            return left >= right
        if op == "in":
            return left in right
        if op == "not-in":
            return left not in right
        if op == "array_contains":
            return isinstance(left, list) and right in left
        if op == "array_contains_any":
            return isinstance(left, list) and any(r in left for r in right)
    except TypeError:
        return False
    raise ValueError(f"Unsupported operator for mock Firestore: {op}")


def _encode(value: Any) -> Any:
    if isinstance(value, datetime):
        return {_DATETIME_TAG: value.isoformat()}
    if isinstance(value, dict):
        return {k: _encode(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_encode(v) for v in value]
    return value


def _decode(value: Any) -> Any:
    if isinstance(value, dict):
        if set(value.keys()) == {_DATETIME_TAG}:
            return datetime.fromisoformat(value[_DATETIME_TAG])
        return {k: _decode(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_decode(v) for v in value]
    return value


class MockDocumentSnapshot:
    def __init__(self, reference: "MockDocumentReference", data: Optional[Dict]):
        self.reference = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[Dict]:
        if self._data is None:
            return None
        return copy.deepcopy(self._data)

    def get(self, field_path: str) -> Any:
        if self._data is None:
            return None
        value = _get_path(self._data, field_path)
        return None if value is _MISSING else copy.deepcopy(value)


class MockDocumentReference:
    def __init__(self, client: "MockFirestore", collection: str, doc_id: str):
        self._client = client
        self._collection = collection
        self.id = doc_id

    @property
    def path(self) -> str:
        return f"{self._collection}/{self.id}"

    def get(self, **kwargs) -> MockDocumentSnapshot:
        with self._client._lock:
            data = self._client._store.get(self._collection, {}).get(self.id)
            return MockDocumentSnapshot(self, copy.deepcopy(data) if data is not None else None)

    def set(self, document_data: Dict, merge: bool = False, **kwargs) -> None:
        self._client._commit([("set", self, document_data, merge)])

    def create(self, document_data: Dict, **kwargs) -> None:
        self._client._commit([("create", self, document_data, False)])

    def update(self, field_updates: Dict, **kwargs) -> None:
        self._client._commit([("update", self, field_updates, False)])

    def delete(self, **kwargs) -> None:
        self._client._commit([("delete", self, None, False)])


class MockQuery:
    def __init__(self, client: "MockFirestore", collection: str, filters: Tuple = ()):
        self._client = client
        self._collection = collection
        self._filters = filters

    def where(self, field_path: Optional[str] = None, op_string: Optional[str] = None, value: Any = None, filter=None) -> "MockQuery":
        if filter is not None:
            field_path, op_string, value = filter.field_path, filter.op_string, filter.value
        return MockQuery(self._client, self._collection, self._filters + ((field_path, op_string, value),))

    def stream(self, **kwargs) -> Iterator[MockDocumentSnapshot]:
        with self._client._lock:
            docs = [
                (doc_id, copy.deepcopy(data))
                for doc_id, data in self._client._store.get(self._collection, {}).items()
            ]

        for field_path, op, value in self._filters:
            docs = [(i, d) for i, d in docs if _compare(op, _get_path(d, field_path), value)]

        for doc_id, data in docs:
            ref = MockDocumentReference(self._client, self._collection, doc_id)
            yield MockDocumentSnapshot(ref, data)

    def get(self, **kwargs) -> List[MockDocumentSnapshot]:
        return list(self.stream(**kwargs))


class MockCollectionReference(MockQuery):
    def __init__(self, client: "MockFirestore", name: str):
        super().__init__(client, name)
        self.id = name

    def document(self, document_id: Optional[str] = None) -> MockDocumentReference:
        return MockDocumentReference(self._client, self._collection, document_id or uuid.uuid4().hex[:20])


class MockWriteBatch:
    def __init__(self, client: "MockFirestore"):
        self._client = client
        self._ops: List[Tuple] = []

    def set(self, reference: MockDocumentReference, document_data: Dict, merge: bool = False) -> "MockWriteBatch":
        self._ops.append(("set", reference, document_data, merge))
        return self

    def update(self, reference: MockDocumentReference, field_updates: Dict) -> "MockWriteBatch":
        self._ops.append(("update", reference, field_updates, False))
        return self

    def commit(self, **kwargs) -> List:
        ops, self._ops = self._ops, []
        self._client._commit(ops)
        return [_now() for _ in ops]

    def __len__(self) -> int:
        return len(self._ops)


class MockFirestore:
    """Firestore-compatible in-memory client."""

    def __init__(self, path: Optional[str] = None):
        self._lock = threading.RLock()
        self._store: Dict[str, Dict[str, Dict]] = {}
        self._path = path or None
        if self._path and os.path.exists(self._path):
            with open(self._path, "r", encoding="utf-8") as f:
                self._store = _decode(json.load(f))
            logger.info(f"[MOCK FIRESTORE] Loaded {self._path}")

    def collection(self, name: str) -> MockCollectionReference:
        return MockCollectionReference(self, name)

    def collections(self, **kwargs) -> List[MockCollectionReference]:
        with self._lock:
            return [MockCollectionReference(self, name) for name in self._store]

    def batch(self) -> MockWriteBatch:
        return MockWriteBatch(self)

    def _commit(self, ops: List[Tuple]) -> None:
        with self._lock:
            # Validate every op before applying any, like a server-side batch.
            pending_creates = set()
            for kind, ref, _, _ in ops:
                exists = ref.id in self._store.get(ref._collection, {}) or ref.path in pending_creates
                if kind == "create":
                    if exists:
                        raise gcloud_exceptions.AlreadyExists(f"Document already exists: {ref.path}")
                    pending_creates.add(ref.path)
                elif kind == "update" and not exists:
                    raise gcloud_exceptions.NotFound(f"No document to update: {ref.path}")

            for kind, ref, data, merge in ops:
                collection = self._store.setdefault(ref._collection, {})
                if kind == "delete":
                    collection.pop(ref.id, None)
                    continue
                if kind in ("set", "create") and not merge:
                    collection[ref.id] = _apply_transform({}, data)
                    continue
                # update() takes dotted field paths; set(merge=True) merges top-level keys
                current = collection.setdefault(ref.id, {})
                for field_path, value in data.items():
                    if kind == "update":
                        _set_path(current, field_path, _apply_transform(_get_path(current, field_path), value))
                    else:
                        current[field_path] = _apply_transform(current.get(field_path, _MISSING), value)

            self._persist()

    def _persist(self) -> None:
        if not self._path:
            return
        try:
            with open(self._path, "w", encoding="utf-8") as f:
                json.dump(_encode(self._store), f, indent=2)
        except OSError as e:
            logger.warning(f"[MOCK FIRESTORE] Could not persist to {self._path}: {e}")


_instances: Dict[str, MockFirestore] = {}


def get_mock_db(path: Optional[str] = None) -> MockFirestore:
    """Return the shared mock client for ``path`` (empty/None = memory only)."""
    key = path or ""
    if key not in _instances:
        _instances[key] = MockFirestore(path)
    return _instances[key]
