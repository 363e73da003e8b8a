# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================
"""Test doubles shared by the function and handler tests."""

from types import SimpleNamespace
from typing import Any, Dict, List, Optional
from uuid import uuid4

from google.api_core import exceptions
from google.cloud.firestore_v1 import DELETE_FIELD, Increment


def _copy(value: Any) -> Any:
    # Sentinels and timestamps are kept by identity.
    if isinstance(value, dict):
        return {key: _copy(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_copy(item) for item in value]
    return value


def _apply_writes(existing: dict, data: dict) -> dict:
    result = _copy(existing)
    for key, value in data.items():
        if value is DELETE_FIELD:
            result.pop(key, None)
        elif isinstance(value, Increment):
            result[key] = result.get(key, 0) + value.value
        else:
            result[key] = _copy(value)
    return result


def _get_field(data: dict, field_path: str) -> Any:
    value: Any = data
    for part in field_path.split("."):
        if not isinstance(value, dict) or part not in value:
            return None
        value = value[part]
    return value


def _matches(data: dict, field_path: str, op: str, expected: Any) -> bool:
    actual = _get_field(data, field_path)
    if op == "==":
        return actual == expected
    if op == "array_contains":
        return isinstance(actual, list) and expected in actual
    if op == "in":
        return actual in expected
    if actual is None:
        return False
    if op == ">=":
        return actual >= expected
    if op == ">":
        return actual > expected
    if op == "<=":
        return actual <= expected
    if op == "<":
        return actual < expected
    raise ValueError(f"Unsupported operator: {op}")


class FakeDocumentSnapshot:
    def __init__(self, reference: "FakeDocumentReference", data: Optional[dict]):
        self.reference = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[dict]:
        return _copy(self._data) if self._data is not None else None


class FakeDocumentReference:
    def __init__(self, store: "FakeFirestore", path: str):
        self._store = store
        self.path = path
        self.id = path.rsplit("/", 1)[-1]

    def get(self) -> FakeDocumentSnapshot:
        return FakeDocumentSnapshot(self, self._store.documents.get(self.path))

    def set(self, data: dict, merge: bool = False) -> None:
        existing = self._store.documents.get(self.path, {}) if merge else {}
        self._store.documents[self.path] = _apply_writes(existing, data)

    def update(self, data: dict) -> None:
        if self.path not in self._store.documents:
            raise exceptions.NotFound(f"No document to update: {self.path}")
        self._store.documents[self.path] = _apply_writes(
            self._store.documents[self.path], data
        )

    def delete(self) -> None:
        self._store.documents.pop(self.path, None)

    def collection(self, name: str) -> "FakeCollectionReference":
        return FakeCollectionReference(self._store, f"{self.path}/{name}")


class FakeQuery:
    def __init__(self, store: "FakeFirestore", path: str, filters=(), limit=None):
        self._store = store
        self._path = path
        self._filters = tuple(filters)
        self._limit = limit

    def where(self, field_path=None, op_string=None, value=None, *, filter=None):
        if filter is not None:
            field_path, op_string, value = (
                filter.field_path,
                filter.op_string,
                filter.value,
            )
        return FakeQuery(
            self._store,
            self._path,
            self._filters + ((field_path, op_string, value),),
            self._limit,
        )

    def limit(self, count: int) -> "FakeQuery":
        return FakeQuery(self._store, self._path, self._filters, count)

    def stream(self):
        returned = 0
        for path, data in list(self._store.documents.items()):
            if path.rsplit("/", 1)[0] != self._path:
                continue
            if not all(_matches(data, *f) for f in self._filters):
                continue
            if self._limit is not None and returned >= self._limit:
                return
            returned += 1
            yield FakeDocumentSnapshot(FakeDocumentReference(self._store, path), data)

    def get(self) -> List[FakeDocumentSnapshot]:
        return list(self.stream())


class FakeCollectionReference(FakeQuery):
    def __init__(self, store: "FakeFirestore", path: str):
        super().__init__(store, path)

    def document(self, document_id: Optional[str] = None) -> FakeDocumentReference:
        return FakeDocumentReference(
            self._store, f"{self._path}/{document_id or uuid4().hex}"
        )

    def add(self, data: dict):
        ref = self.document()
        ref.set(data)
        return None, ref


class FakeWriteBatch:
    def __init__(self):
        self._writes = []

    def set(self, ref: FakeDocumentReference, data: dict, merge: bool = False):
        self._writes.append(lambda: ref.set(data, merge=merge))

    def update(self, ref: FakeDocumentReference, data: dict):
        self._writes.append(lambda: ref.update(data))

    def delete(self, ref: FakeDocumentReference):
        self._writes.append(ref.delete)

    def commit(self):
        for write in self._writes:
            write()
        self._writes = []


class FakeFirestore:
    """
    In-memory stand-in for `firestore.client()`.

    Supports the document, collection, query and batch calls the Spark
    functions make. Documents are kept as plain dicts keyed by path.
    """

    def __init__(self, documents: Optional[Dict[str, dict]] = None):
        self.documents: Dict[str, dict] = {}
        for path, data in (documents or {}).items():
            self.documents[path] = _copy(data)

    def collection(self, name: str) -> FakeCollectionReference:
        return FakeCollectionReference(self, name)

    def batch(self) -> FakeWriteBatch:
        return FakeWriteBatch()

    def docs_in(self, collection_path: str) -> Dict[str, dict]:
        """Returns {doc_id: data} for the direct children of a collection."""
        return {
            path.rsplit("/", 1)[-1]: data
            for path, data in self.documents.items()
            if path.rsplit("/", 1)[0] == collection_path
        }


def make_batch_response(errors: List[Optional[Exception]]):
    """Builds a multicast result; None marks a successful send."""
    responses = [
        SimpleNamespace(success=error is None, exception=error) for error in errors
    ]
    success_count = sum(1 for r in responses if r.success)
    return SimpleNamespace(
        responses=responses,
        success_count=success_count,
        failure_count=len(responses) - success_count,
    )
