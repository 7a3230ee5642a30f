# orderflow/models/base_model.py

from datetime import datetime
from bson.objectid import ObjectId

from ..services.live_query import LiveQuery
from ..utils.helpers import strip_none
from ..utils.tenant_path import collection_path, root_path_for_profile


class BaseModel:
    """
    Common CRUD for documents that live under one tenant namespace.

    A registry is bound to a database handle, the owning account uid and the
    tenant path. Every read and write is scoped by `owner_id`.
    """
    collection_name = None

    def __init__(self, database, owner_id, tenant_path):
        self.database = database
        self.owner_id = owner_id
        self.tenant_path = tenant_path

    @classmethod
    def for_profile(cls, database, profile):
        """Build a registry from a resolved profile (raises StoragePathError)."""
        return cls(database, profile.get("uid"), root_path_for_profile(profile))

    @property
    def collection(self):
        return self.database[collection_path(self.tenant_path, self.collection_name)]

    @staticmethod
    def new_id():
        return str(ObjectId())

    def _scope(self, extra=None):
        query = {"owner_id": self.owner_id}
        if extra:
            query.update(extra)
        return query

    def get_by_id(self, record_id):
        if not record_id:
            return None
        return self.collection.find_one(self._scope({"_id": str(record_id)}))

    def get_all(self):
        return list(self.collection.find(self._scope()).sort("created_at", -1))

    def count(self):
        return self.collection.count_documents(self._scope())

    def subscribe(self, on_snapshot, on_error=None):
        """Live list: current records now, then again after every change."""
        return LiveQuery(
            self.collection,
            self._scope(),
            sort=[("created_at", -1)],
        ).subscribe(on_snapshot, on_error)

    def insert(self, document):
        """Insert with a generated id unless one is supplied; timestamps default to now."""
        now = datetime.now()
        document = strip_none(document)
        document["_id"] = str(document.get("_id") or self.new_id())
        document["owner_id"] = self.owner_id
        document.setdefault("created_at", now)
        document.setdefault("updated_at", now)
        self.collection.insert_one(document)
        return document

    def upsert(self, record_id, document):
        """Insert-with-explicit-id using merge semantics (imports)."""
        now = datetime.now()
        document = strip_none(document)
        document.pop("_id", None)
        document["owner_id"] = self.owner_id
        created_at = document.pop("created_at", None) or now
        document.setdefault("updated_at", now)
        self.collection.update_one(
            {"_id": str(record_id)},
            {"$set": document, "$setOnInsert": {"created_at": created_at}},
            upsert=True,
        )
        return self.collection.find_one({"_id": str(record_id)})

    def update(self, record_id, **updates):
        """Apply only the supplied (non-None) fields and stamp updated_at."""
        updates = strip_none(updates)
        updates.pop("_id", None)
        updates.pop("owner_id", None)
        updates["updated_at"] = datetime.now()
        result = self.collection.update_one(
            self._scope({"_id": str(record_id)}),
            {"$set": updates},
        )
        return result.matched_count > 0

    def delete(self, record_id):
        result = self.collection.delete_one(self._scope({"_id": str(record_id)}))
        return result.deleted_count > 0
