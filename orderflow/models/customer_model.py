# orderflow/models/customer_model.py

from datetime import datetime

from .base_model import BaseModel
from ..constants.service_code import COLLECTIONS
from ..utils.helpers import digits_only
from ..utils.logger import Log

# suffix matching needs at least this many digits on both sides
MIN_SUFFIX_DIGITS = 8


class CustomerModel(BaseModel):
    """
    Tenant customers, keyed softly by phone number.

    Creating a customer whose phone already exists returns the stored record
    unchanged. The check is a read followed by a write, so two concurrent
    creators can still both insert.
    """
    collection_name = COLLECTIONS["CUSTOMERS"]

    def find_existing(self, phone):
        """Exact phone string first, then identical digits. No suffix matching."""
        existing = self.collection.find_one(self._scope({"phone": phone}))
        if existing:
            return existing
        digits = digits_only(phone)
        if not digits:
            return None
        return self.collection.find_one(self._scope({"phone_digits": digits}))

    def create(self, candidate: dict) -> dict:
        candidate = dict(candidate or {})
        phone = str(candidate.get("phone") or "").strip()
        if not phone:
            raise ValueError("Phone number is required")

        existing = self.find_existing(phone)
        if existing:
            Log.info(f"[customer_model.py][CustomerModel][create] existing customer {existing['_id']} for phone")
            return existing

        rating = int(candidate.get("rating") or 0)
        if rating < 0 or rating > 5:
            raise ValueError("Rating must be between 0 and 5")

        return self.insert({
            "_id": candidate.get("_id") or candidate.get("id"),
            "phone": phone,
            "phone_digits": digits_only(phone),
            "name": (candidate.get("name") or "").strip(),
            "email": candidate.get("email") or None,
            "address": candidate.get("address") or None,
            "rating": rating,
            "comment": candidate.get("comment") or "",
            "created_at": candidate.get("created_at"),
            "updated_at": candidate.get("updated_at"),
        })

    def update(self, record_id, **updates):
        if updates.get("rating") is not None:
            rating = int(updates["rating"])
            if rating < 0 or rating > 5:
                raise ValueError("Rating must be between 0 and 5")
            updates["rating"] = rating
        if updates.get("phone") is not None:
            updates["phone_digits"] = digits_only(updates["phone"])
        return super().update(record_id, **updates)

    def list(self):
        return self.get_all()

    def find_by_phone(self, phone_input, customers=None):
        """
        Match a typed phone number against the tenant's customers.

        Exact digit match wins; otherwise one number may end with the other
        (country-code prefixes) as long as both have at least 8 digits. The
        first match in list order is returned.
        """
        digits = digits_only(phone_input)
        if not digits:
            return None

        if customers is None:
            customers = self.get_all()

        for customer in customers:
            if digits_only(customer.get("phone")) == digits:
                return customer

        if len(digits) < MIN_SUFFIX_DIGITS:
            return None

        for customer in customers:
            stored = digits_only(customer.get("phone"))
            if len(stored) < MIN_SUFFIX_DIGITS:
                continue
            if stored.endswith(digits) or digits.endswith(stored):
                return customer
        return None

    @staticmethod
    def with_stats(customers, orders):
        """Attach order count, total spent and last order date to each customer."""
        by_customer = {}
        for order in orders or []:
            by_customer.setdefault(order.get("customer_id"), []).append(order)

        enriched = []
        for customer in customers or []:
            own = by_customer.get(customer.get("_id"), [])
            dates = [o.get("order_date") for o in own if isinstance(o.get("order_date"), datetime)]
            enriched.append({
                **customer,
                "order_count": len(own),
                "total_spent": sum(float(o.get("total_amount") or 0) for o in own),
                "last_order_date": max(dates) if dates else None,
            })
        return enriched
