# orderflow/models/activity_log_model.py

from datetime import datetime
from bson.objectid import ObjectId

from ..constants.service_code import COLLECTIONS


class ActivityLog:
    """Append-only audit trail of admin actions."""

    collection_name = COLLECTIONS["ACTIVITY_LOGS"]

    def __init__(self, database):
        self.database = database

    @property
    def collection(self):
        return self.database[self.collection_name]

    def record(self, admin, action, target=None, details=None):
        admin = admin or {}
        target = target or {}
        entry = {
            "_id": str(ObjectId()),
            "admin_id": admin.get("_id") or admin.get("uid"),
            "admin_email": admin.get("email"),
            "action": action,
            "target_user_id": target.get("_id") or target.get("uid"),
            "target_user_email": target.get("email"),
            "details": details or {},
            "timestamp": datetime.now(),
        }
        self.collection.insert_one(entry)
        return entry

    def recent(self, limit=20):
        return list(self.collection.find({}).sort("timestamp", -1).limit(int(limit)))
