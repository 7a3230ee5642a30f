# orderflow/models/plan_model.py

import copy
from datetime import datetime
from bson.objectid import ObjectId

from ..constants.service_code import COLLECTIONS, UNLIMITED_QUOTA
from ..utils.helpers import strip_none
from ..utils.plan.capability_enforcer import RESTRICTIVE_CAPABILITIES


DEFAULT_CURRENCY = "BDT"

# Templates written by seed_defaults(); prices in DEFAULT_CURRENCY.
DEFAULT_PLANS = [
    {
        "name": "Lite",
        "price": 0,
        "capabilities": {
            "can_add_order": True,
            "can_add_customer": True,
            "can_add_products": True,
            "has_export_import_option": False,
            "max_order_number": 50,
            "max_customer_number": 50,
            "max_product_number": 20,
        },
    },
    {
        "name": "Silver",
        "price": 499,
        "capabilities": {
            "can_add_order": True,
            "can_add_customer": True,
            "can_add_products": True,
            "has_export_import_option": False,
            "max_order_number": 500,
            "max_customer_number": 500,
            "max_product_number": 100,
        },
    },
    {
        "name": "Gold",
        "price": 999,
        "capabilities": {
            "can_add_order": True,
            "can_add_customer": True,
            "can_add_products": True,
            "has_export_import_option": True,
            "max_order_number": 5000,
            "max_customer_number": 5000,
            "max_product_number": 1000,
        },
    },
    {
        "name": "Elite",
        "price": 1999,
        "capabilities": {
            "can_add_order": True,
            "can_add_customer": True,
            "can_add_products": True,
            "has_export_import_option": True,
            "max_order_number": UNLIMITED_QUOTA,
            "max_customer_number": UNLIMITED_QUOTA,
            "max_product_number": UNLIMITED_QUOTA,
        },
    },
]


class PlanModel:
    """PlanDefinition templates (global `Plan` collection)."""

    collection_name = COLLECTIONS["PLANS"]

    def __init__(self, database):
        self.database = database

    @property
    def collection(self):
        return self.database[self.collection_name]

    @staticmethod
    def normalize_capabilities(capabilities):
        """Fill every capability key, restrictive where missing."""
        capabilities = capabilities or {}
        normalized = {}
        for key, default in RESTRICTIVE_CAPABILITIES.items():
            value = capabilities.get(key, default)
            normalized[key] = int(value) if key.startswith("max_") else bool(value)
        return normalized

    def list(self):
        return list(self.collection.find({}).sort("price", 1))

    def get_by_id(self, plan_id):
        return self.collection.find_one({"_id": str(plan_id)})

    def get_by_name(self, name):
        return self.collection.find_one({"name": name})

    def create(self, name, price, capabilities, currency=DEFAULT_CURRENCY):
        name = (name or "").strip()
        if not name:
            raise ValueError("Plan name is required")
        if float(price or 0) < 0:
            raise ValueError("Plan price cannot be negative")

        now = datetime.now()
        document = {
            "_id": str(ObjectId()),
            "name": name,
            "price": float(price or 0),
            "currency": currency or DEFAULT_CURRENCY,
            "capabilities": self.normalize_capabilities(capabilities),
            "created_at": now,
            "updated_at": now,
        }
        self.collection.insert_one(document)
        return document

    def update(self, plan_id, **updates):
        updates = strip_none(updates)
        updates.pop("_id", None)
        if "capabilities" in updates:
            current = (self.get_by_id(plan_id) or {}).get("capabilities") or {}
            updates["capabilities"] = self.normalize_capabilities({**current, **updates["capabilities"]})
        if "price" in updates:
            if float(updates["price"]) < 0:
                raise ValueError("Plan price cannot be negative")
            updates["price"] = float(updates["price"])
        updates["updated_at"] = datetime.now()
        result = self.collection.update_one({"_id": str(plan_id)}, {"$set": updates})
        return result.matched_count > 0

    def seed_defaults(self):
        """Insert any default template that does not exist yet (matched by name)."""
        created = []
        for template in DEFAULT_PLANS:
            if self.get_by_name(template["name"]):
                continue
            created.append(self.create(template["name"], template["price"], template["capabilities"]))
        return created

    @staticmethod
    def snapshot(plan):
        """
        What a tenant stores when a plan is assigned: a deep copy, so later
        template edits leave the tenant unchanged.
        """
        return {
            "business_plan": {
                "name": plan.get("name"),
                "price": plan.get("price", 0),
                "currency": plan.get("currency") or DEFAULT_CURRENCY,
            },
            "capabilities": copy.deepcopy(plan.get("capabilities") or {}),
        }
