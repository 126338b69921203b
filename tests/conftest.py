"""
Shared fixtures: an in-memory stand-in for the Motor collections.

Only the query and update operators used by the repositories are supported.
Aggregation pipelines run against mongomock-motor through the mongo_db fixture.
"""

import copy
import itertools
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
from mongomock_motor import AsyncMongoMockClient

from libs.db.database import set_database

_MISSING = object()


def _get_path(doc: Dict[str, Any], path: str) -> Any:
    value: Any = doc
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def _set_path(doc: Dict[str, Any], path: str, value: Any) -> None:
    parts = path.split(".")
    for part in parts[:-1]:
        doc = doc.setdefault(part, {})
    doc[parts[-1]] = value


def _unset_path(doc: Dict[str, Any], path: str) -> None:
    parts = path.split(".")
    for part in parts[:-1]:
        doc = doc.get(part)
        if not isinstance(doc, dict):
            return
    doc.pop(parts[-1], None)


def _matches_condition(value: Any, condition: Any) -> bool:
    if isinstance(condition, dict) and condition and all(key.startswith("$") for key in condition):
        for op, operand in condition.items():
            present = value is not _MISSING
            actual = value if present else None
            if op == "$in":
                if actual not in operand:
                    return False
            elif op == "$ne":
                if actual == operand:
                    return False
            elif op == "$exists":
                if present != bool(operand):
                    return False
            elif op == "$lte":
                if not present or actual > operand:
                    return False
            elif op == "$gte":
                if not present or actual < operand:
                    return False
            elif op == "$lt":
                if not present or actual >= operand:
                    return False
            else:
                raise NotImplementedError(op)
        return True
    if value is _MISSING:
        return condition is None
    return value == condition


def matches(doc: Dict[str, Any], query: Optional[Dict[str, Any]]) -> bool:
    return all(_matches_condition(_get_path(doc, key), cond) for key, cond in (query or {}).items())


class FakeCursor:

    def __init__(self, docs: List[Dict[str, Any]]) -> None:
        self._docs = docs

    def sort(self, key: str, direction: int = 1) -> "FakeCursor":
        self._docs.sort(key=lambda d: _get_path(d, key), reverse=direction < 0)
        return self

    def limit(self, count: int) -> "FakeCursor":
        if count:
            self._docs = self._docs[:count]
        return self

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for doc in self._docs:
            yield doc

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        return self._docs[:length] if length else list(self._docs)


class FakeCollection:

    def __init__(self) -> None:
        self.docs: List[Dict[str, Any]] = []
        self._ids = itertools.count(1)

    def _project(self, doc: Dict[str, Any], projection: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        doc = copy.deepcopy(doc)
        if not projection:
            return doc
        keep = {key for key, flag in projection.items() if flag}
        keep.add("_id")
        return {key: value for key, value in doc.items() if key in keep}

    async def find_one(self, query=None, projection=None):
        for doc in self.docs:
            if matches(doc, query):
                return self._project(doc, projection)
        return None

    def find(self, query=None, projection=None) -> FakeCursor:
        return FakeCursor([self._project(doc, projection) for doc in self.docs if matches(doc, query)])

    async def insert_one(self, doc):
        doc = copy.deepcopy(doc)
        doc.setdefault("_id", next(self._ids))
        self.docs.append(doc)
        return SimpleNamespace(inserted_id=doc["_id"])

    async def count_documents(self, query):
        return sum(1 for doc in self.docs if matches(doc, query))

    async def delete_many(self, query):
        before = len(self.docs)
        self.docs = [doc for doc in self.docs if not matches(doc, query)]
        return SimpleNamespace(deleted_count=before - len(self.docs))

    def _apply(self, doc: Dict[str, Any], update: Dict[str, Any], inserting: bool) -> None:
        for path, value in update.get("$set", {}).items():
            _set_path(doc, path, copy.deepcopy(value))
        if inserting:
            for path, value in update.get("$setOnInsert", {}).items():
                _set_path(doc, path, copy.deepcopy(value))
        for path in update.get("$unset", {}):
            _unset_path(doc, path)
        for path, value in update.get("$addToSet", {}).items():
            current = _get_path(doc, path)
            items = [] if current is _MISSING else current
            if value not in items:
                items.append(copy.deepcopy(value))
            _set_path(doc, path, items)
        for path, condition in update.get("$pull", {}).items():
            current = _get_path(doc, path)
            if current is _MISSING:
                continue
            if isinstance(condition, dict):
                kept = [item for item in current if not matches(item, condition)]
            else:
                kept = [item for item in current if item != condition]
            _set_path(doc, path, kept)

    async def update_one(self, query, update, upsert=False):
        for doc in self.docs:
            if matches(doc, query):
                before = copy.deepcopy(doc)
                self._apply(doc, update, inserting=False)
                return SimpleNamespace(
                    matched_count=1, modified_count=int(before != doc), upserted_id=None
                )

        if not upsert:
            return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=None)

        doc = {
            key: copy.deepcopy(value)
            for key, value in query.items()
            if not key.startswith("$") and not (isinstance(value, dict) and any(k.startswith("$") for k in value))
        }
        self._apply(doc, update, inserting=True)
        doc.setdefault("_id", next(self._ids))
        self.docs.append(doc)
        return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=doc["_id"])


class FakeDatabase:

    def __init__(self) -> None:
        self._collections: Dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        return self._collections.setdefault(name, FakeCollection())


@pytest.fixture
def fake_db():
    db = FakeDatabase()
    set_database(db)
    yield db
    set_database(None)


@pytest.fixture
def mongo_db():
    db = AsyncMongoMockClient()["leetcode_test"]
    set_database(db)
    yield db
    set_database(None)
