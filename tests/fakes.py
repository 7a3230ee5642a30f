"""
In-memory stand-ins for the pymongo and redis objects the app touches.

Only the query and update operators the registries use are understood:
equality, $ne, $in, $exists, $gte, $gt, $lte, $lt for filters and
$set (dotted keys included) / $setOnInsert for updates.
"""
import copy
import threading
import time
from types import SimpleNamespace

from pymongo.errors import DuplicateKeyError


_MISSING = object()


def _get_path(document, path):
    value = document
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def _set_path(document, path, value):
    parts = path.split(".")
    target = document
    for part in parts[:-1]:
        target = target.setdefault(part, {})
    target[parts[-1]] = value


def _matches_condition(value, condition):
    if isinstance(condition, dict) and any(key.startswith("$") for key in condition):
        for op, expected in condition.items():
            if op == "$exists":
                if (value is not _MISSING) != bool(expected):
                    return False
            elif op == "$ne":
                if value is not _MISSING and value == expected:
                    return False
            elif op == "$in":
                # null in the list also matches a missing field
                if value is _MISSING:
                    if None not in expected:
                        return False
                elif value not in expected:
                    return False
            elif op in ("$gte", "$gt", "$lte", "$lt"):
                if value is _MISSING or value is None:
                    return False
                if op == "$gte" and not value >= expected:
                    return False
                if op == "$gt" and not value > expected:
                    return False
                if op == "$lte" and not value <= expected:
                    return False
                if op == "$lt" and not value < expected:
                    return False
            else:
                raise NotImplementedError(op)
        return True
    return value is not _MISSING and value == condition


def matches(document, query):
    return all(_matches_condition(_get_path(document, key), cond) for key, cond in (query or {}).items())


class FakeCursor:
    def __init__(self, documents):
        self._documents = documents

    def sort(self, key_or_list, direction=1):
        keys = key_or_list if isinstance(key_or_list, list) else [(key_or_list, direction)]
        for key, order in reversed(keys):
            self._documents.sort(
                key=lambda d: (d.get(key) is not None, d.get(key) if d.get(key) is not None else 0),
                reverse=order < 0,
            )
        return self

    def limit(self, count):
        if count:
            self._documents = self._documents[:count]
        return self

    def __iter__(self):
        return iter(self._documents)


class FakeChangeStream:
    def __init__(self, collection):
        self._collection = collection
        self._changes = []
        self.alive = True
        self.error = None

    def push(self, change):
        self._changes.append(change)

    def try_next(self):
        if self.error is not None:
            raise self.error
        if self._changes:
            return self._changes.pop(0)
        time.sleep(0.01)
        return None

    def close(self):
        self.alive = False
        self._collection._streams = [s for s in self._collection._streams if s is not self]


class FakeCollection:
    def __init__(self, name):
        self.name = name
        self._documents = []
        self._streams = []
        self._lock = threading.RLock()
        self.indexes = []

    # ---- reads ----
    def find(self, query=None, projection=None):
        with self._lock:
            return FakeCursor([copy.deepcopy(d) for d in self._documents if matches(d, query)])

    def find_one(self, query=None):
        with self._lock:
            for document in self._documents:
                if matches(document, query):
                    return copy.deepcopy(document)
        return None

    def count_documents(self, query):
        with self._lock:
            return sum(1 for d in self._documents if matches(d, query))

    # ---- writes ----
    def _notify(self, operation, document_id):
        for stream in list(self._streams):
            stream.push({"operationType": operation, "documentKey": {"_id": document_id}})

    def insert_one(self, document):
        with self._lock:
            if any(d["_id"] == document["_id"] for d in self._documents):
                raise DuplicateKeyError(f"duplicate _id {document['_id']}")
            self._documents.append(copy.deepcopy(document))
        self._notify("insert", document["_id"])
        return SimpleNamespace(inserted_id=document["_id"])

    def update_one(self, query, update, upsert=False):
        with self._lock:
            target = next((d for d in self._documents if matches(d, query)), None)
            if target is None:
                if not upsert:
                    return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=None)
                target = {key: value for key, value in query.items() if not isinstance(value, dict)}
                for path, value in (update.get("$setOnInsert") or {}).items():
                    _set_path(target, path, copy.deepcopy(value))
                for path, value in (update.get("$set") or {}).items():
                    _set_path(target, path, copy.deepcopy(value))
                self._documents.append(target)
                upserted = SimpleNamespace(matched_count=0, modified_count=0, upserted_id=target.get("_id"))
            else:
                before = copy.deepcopy(target)
                for path, value in (update.get("$set") or {}).items():
                    _set_path(target, path, copy.deepcopy(value))
                upserted = SimpleNamespace(
                    matched_count=1,
                    modified_count=int(before != target),
                    upserted_id=None,
                )
        self._notify("update", target.get("_id"))
        return upserted

    def delete_one(self, query):
        with self._lock:
            for index, document in enumerate(self._documents):
                if matches(document, query):
                    del self._documents[index]
                    break
            else:
                return SimpleNamespace(deleted_count=0)
        self._notify("delete", document["_id"])
        return SimpleNamespace(deleted_count=1)

    def create_index(self, keys, **kwargs):
        self.indexes.append((keys, kwargs))

    # ---- change streams ----
    def watch(self, pipeline=None, **kwargs):
        stream = FakeChangeStream(self)
        self._streams.append(stream)
        return stream

    # ---- test helpers ----
    def all(self):
        with self._lock:
            return copy.deepcopy(self._documents)


class FakeDatabase:
    def __init__(self):
        self._collections = {}

    def __getitem__(self, name):
        if name not in self._collections:
            self._collections[name] = FakeCollection(name)
        return self._collections[name]

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        return self[name]

    def collection_names(self):
        return sorted(self._collections)

    def reset(self):
        self._collections.clear()


class FakeRedis:
    def __init__(self):
        self.store = {}

    def get(self, key):
        value = self.store.get(key)
        return value.encode("utf-8") if isinstance(value, str) else value

    def set(self, key, value):
        self.store[key] = str(value)
        return True

    def setex(self, key, ttl, value):
        self.store[key] = str(value)
        return True

    def delete(self, *keys):
        return sum(1 for key in keys if self.store.pop(key, None) is not None)

    def reset(self):
        self.store.clear()
