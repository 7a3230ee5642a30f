# orderflow/models/account_model.py

import bcrypt
from datetime import datetime
from bson.objectid import ObjectId

from ..constants.service_code import (
    COLLECTIONS,
    SYSTEM_USERS,
    ACCOUNT_STATUS,
)
from ..utils.helpers import strip_none


class AccountModel:
    """
    Minimal principal records (`users`, _id = uid): credentials, role,
    status and the admin-controlled order-creation flag.
    """

    collection_name = COLLECTIONS["USERS"]

    def __init__(self, database):
        self.database = database

    @property
    def collection(self):
        return self.database[self.collection_name]

    @staticmethod
    def hash_password(password):
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")

    @staticmethod
    def check_password(account, password):
        hashed = (account or {}).get("password")
        if not hashed or not password:
            return False
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))

    @staticmethod
    def public(account):
        """Account without its password hash."""
        if not account:
            return None
        return {key: value for key, value in account.items() if key != "password"}

    def create(self, email, password, business_name=None, role=SYSTEM_USERS["BUSINESS"]):
        now = datetime.now()
        is_admin = role == SYSTEM_USERS["ADMIN"]
        document = strip_none({
            "_id": str(ObjectId()),
            "email": email.strip().lower(),
            "password": self.hash_password(password),
            "business_name": business_name,
            "role": role,
            "status": ACCOUNT_STATUS["ENABLED"],
            # business accounts wait for an admin to allow order creation
            "can_create_orders": is_admin,
            "plan": "paid" if is_admin else "free",
            "created_at": now,
            "updated_at": now,
        })
        self.collection.insert_one(document)
        return document

    def get_by_id(self, uid):
        if not uid:
            return None
        return self.collection.find_one({"_id": str(uid)})

    def get_by_email(self, email):
        if not email:
            return None
        return self.collection.find_one({"email": email.strip().lower()})

    def list_by_role(self, role):
        return list(self.collection.find({"role": role}).sort("created_at", -1))

    def update(self, uid, **updates):
        updates = strip_none(updates)
        updates.pop("_id", None)
        updates["updated_at"] = datetime.now()
        result = self.collection.update_one({"_id": str(uid)}, {"$set": updates})
        return result.matched_count > 0

    def set_password(self, uid, password):
        return self.update(uid, password=self.hash_password(password))


class BusinessAccountModel:
    """
    Rich business records (`BusinessAccounts`, _id = owner email): business
    info plus the plan snapshot and capabilities.
    """

    collection_name = COLLECTIONS["BUSINESS_ACCOUNTS"]

    INFO_FIELDS = (
        "business_name",
        "phone",
        "business_address",
        "business_url",
        "user_name",
        "social_links",
    )

    def __init__(self, database):
        self.database = database

    @property
    def collection(self):
        return self.database[self.collection_name]

    def get_by_email(self, email):
        if not email:
            return None
        return self.collection.find_one({"_id": email.strip().lower()})

    def get_by_tenant_path(self, tenant_path):
        return self.collection.find_one({"tenant_path": tenant_path})

    def list_all(self):
        return list(self.collection.find({}))

    def create(self, email, owner_id, tenant_path, business_info, plan_snapshot):
        now = datetime.now()
        document = {
            "_id": email.strip().lower(),
            "owner_id": owner_id,
            "tenant_path": tenant_path,
            "business_info": strip_none({
                field: business_info.get(field) for field in self.INFO_FIELDS
            }),
            "profile": plan_snapshot,
            "created_at": now,
            "updated_at": now,
        }
        self.collection.insert_one(document)
        return document

    def update_info(self, email, partial):
        updates = {
            f"business_info.{field}": value
            for field, value in strip_none(partial).items()
            if field in self.INFO_FIELDS
        }
        if not updates:
            return False
        updates["updated_at"] = datetime.now()
        result = self.collection.update_one({"_id": email.strip().lower()}, {"$set": updates})
        return result.matched_count > 0

    def apply_plan(self, email, plan_snapshot):
        result = self.collection.update_one(
            {"_id": email.strip().lower()},
            {"$set": {"profile": plan_snapshot, "updated_at": datetime.now()}},
        )
        return result.matched_count > 0
