# orderflow/models/order_model.py

from datetime import datetime, timedelta

from .base_model import BaseModel
from ..constants.service_code import (
    COLLECTIONS,
    ORDER_STATUS,
    ORDER_STATUS_TRANSITIONS,
    ORDER_SOURCES,
)
from ..utils.helpers import digits_only
from ..utils.logger import Log


class InvalidStatusTransition(Exception):
    def __init__(self, current, target):
        message = f"Cannot change order status from '{current}' to '{target}'"
        super().__init__(message)
        self.current = current
        self.target = target
        self.message = message


class OrderModel(BaseModel):
    """
    Tenant orders.

    total_amount is always recomputed from the line items and delivery
    charge before a write; a client-supplied total is ignored.
    Status moves pending -> processing|cancelled, processing -> completed|cancelled.
    """
    collection_name = COLLECTIONS["ORDERS"]

    # ---------------- Totals ----------------
    @staticmethod
    def compute_total(items, delivery_charge=0):
        subtotal = sum(float(item.get("price") or 0) * int(item.get("quantity") or 0) for item in items or [])
        return round(subtotal + float(delivery_charge or 0), 2)

    def _normalize_items(self, items):
        normalized = []
        for item in items or []:
            name = str(item.get("name") or "").strip()
            if not name:
                raise ValueError("Each line item needs a product name")
            try:
                price = float(item.get("price") or 0)
                quantity = int(item.get("quantity") if item.get("quantity") is not None else 1)
            except (TypeError, ValueError):
                raise ValueError(f"Invalid price or quantity for '{name}'")
            if price < 0:
                raise ValueError(f"Price cannot be negative for '{name}'")
            if quantity < 1:
                raise ValueError(f"Quantity must be at least 1 for '{name}'")

            line = {
                "product_id": str(item.get("product_id") or self.new_id()),
                "name": name,
                "price": price,
                "quantity": quantity,
            }
            if item.get("code"):
                line["code"] = item["code"]
            if item.get("description"):
                line["description"] = item["description"]
            normalized.append(line)
        return normalized

    @staticmethod
    def _validate_status(status):
        if status not in ORDER_STATUS.values():
            raise ValueError(f"Unknown order status: {status}")
        return status

    @staticmethod
    def _validate_source(source):
        if source not in ORDER_SOURCES:
            raise ValueError(f"Unknown order source: {source}")
        return source

    @staticmethod
    def validate_transition(current, target):
        if target not in ORDER_STATUS_TRANSITIONS.get(current, set()):
            raise InvalidStatusTransition(current, target)

    # ---------------- CRUD ----------------
    def list(self):
        return self.get_all()

    def create(self, order: dict) -> dict:
        order = dict(order or {})
        if not order.get("customer_id"):
            raise ValueError("Customer is required")

        items = self._normalize_items(order.get("products"))
        if not items:
            raise ValueError("An order needs at least one product")

        delivery_charge = float(order.get("delivery_charge") or 0)
        if delivery_charge < 0:
            raise ValueError("Delivery charge cannot be negative")

        record_id = order.get("_id") or order.get("id")
        existing = self.get_by_id(record_id) if record_id else None
        # a re-import without a status keeps the stored one
        status = order.get("status") or (existing or {}).get("status") or ORDER_STATUS["PENDING"]

        now = datetime.now()
        order_date = order.get("order_date") or now
        document = {
            "customer_id": str(order["customer_id"]),
            "products": items,
            "delivery_charge": delivery_charge,
            "total_amount": self.compute_total(items, delivery_charge),
            "order_date": order_date,
            "has_order_time": bool(order.get("has_order_time", False)),
            "delivery_date": order.get("delivery_date") or order_date,
            "has_delivery_time": bool(order.get("has_delivery_time", False)),
            "status": self._validate_status(status),
            "source": self._validate_source(order.get("source") or "phone"),
            "notes": order.get("notes") or "",
            "address": order.get("address") or None,
            "invoice_number": order.get("invoice_number") or None,
            "created_at": order.get("created_at"),
            "updated_at": order.get("updated_at"),
        }

        if record_id:
            if existing and existing.get("status") != document["status"]:
                self.validate_transition(existing.get("status"), document["status"])
            return self.upsert(record_id, document)
        return self.insert(document)

    def update_status(self, record_id, status):
        """
        Move an order along the state machine.

        Does not look for feedback; OrderService.finalize_with_feedback records
        the Experience before calling this for terminal statuses.
        """
        order = self.get_by_id(record_id)
        if not order:
            return False

        self.validate_transition(order.get("status"), self._validate_status(status))
        return super().update(record_id, status=status)

    def update(self, record_id, **updates):
        order = self.get_by_id(record_id)
        if not order:
            return False

        updates.pop("total_amount", None)

        status = updates.get("status")
        if status is not None and status != order.get("status"):
            self.validate_transition(order.get("status"), self._validate_status(status))
        elif status is not None:
            updates.pop("status")

        invoice_number = updates.get("invoice_number")
        if invoice_number is not None and not str(invoice_number).strip():
            raise ValueError("Invoice number cannot be blank")
        if invoice_number is not None and order.get("invoice_number") and invoice_number != order["invoice_number"]:
            raise ValueError("Invoice number cannot be changed once assigned")

        if updates.get("source") is not None:
            self._validate_source(updates["source"])

        if updates.get("products") is not None:
            updates["products"] = self._normalize_items(updates["products"])
            if not updates["products"]:
                raise ValueError("An order needs at least one product")
        if updates.get("delivery_charge") is not None:
            updates["delivery_charge"] = float(updates["delivery_charge"])
            if updates["delivery_charge"] < 0:
                raise ValueError("Delivery charge cannot be negative")

        items = updates.get("products", order.get("products"))
        delivery_charge = updates.get("delivery_charge", order.get("delivery_charge"))
        updates["total_amount"] = self.compute_total(items, delivery_charge)

        return super().update(record_id, **updates)

    # ---------------- Invoice ----------------
    @staticmethod
    def make_invoice_number(order):
        stamp = (order.get("order_date") or datetime.now()).strftime("%Y%m%d")
        return f"INV-{stamp}-{str(order['_id'])[-6:].upper()}"

    def ensure_invoice_number(self, record_id):
        """
        Assign the invoice number once and return it.

        The write only applies while the field is missing or blank, so
        concurrent callers all end up with the first stored value.
        """
        order = self.get_by_id(record_id)
        if not order:
            return None
        if order.get("invoice_number"):
            return order["invoice_number"]

        candidate = self.make_invoice_number(order)
        result = self.collection.update_one(
            self._scope({"_id": str(record_id), "invoice_number": {"$in": [None, ""]}}),
            {"$set": {"invoice_number": candidate, "updated_at": datetime.now()}},
        )
        if result.modified_count:
            Log.info(f"[order_model.py][OrderModel][ensure_invoice_number] assigned {candidate} to {record_id}")
            return candidate

        stored = self.get_by_id(record_id) or {}
        return stored.get("invoice_number")

    # ---------------- Filtering ----------------
    @staticmethod
    def date_window(date_range, now=None, start=None, end=None):
        """Half-open [start, end) for today|week|month|custom, or None."""
        now = now or datetime.now()
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        if date_range == "today":
            return today, today + timedelta(days=1)
        if date_range == "week":
            week_start = today - timedelta(days=today.weekday())
            return week_start, week_start + timedelta(days=7)
        if date_range == "month":
            month_start = today.replace(day=1)
            next_month = (month_start + timedelta(days=32)).replace(day=1)
            return month_start, next_month
        if date_range == "custom" and (start or end):
            return start or datetime.min, (end + timedelta(days=1)) if end else datetime.max
        return None

    @classmethod
    def filter_orders(
        cls,
        orders,
        statuses=None,
        date_range=None,
        search=None,
        sort="desc",
        customers=None,
        start=None,
        end=None,
        now=None,
    ):
        """
        Narrow a fetched order list the way the orders board does: status tabs,
        a delivery-date window, free-text search and order-date sorting.
        """
        customers_by_id = {c.get("_id"): c for c in customers or []}
        window = cls.date_window(date_range, now=now, start=start, end=end)
        term = (search or "").strip().lower()
        term_digits = digits_only(term)

        def matches(order):
            if statuses and order.get("status") not in statuses:
                return False

            if window:
                delivery = order.get("delivery_date")
                if not isinstance(delivery, datetime) or not (window[0] <= delivery < window[1]):
                    return False

            if term:
                customer = customers_by_id.get(order.get("customer_id")) or {}
                haystack = [customer.get("name"), customer.get("phone"), order.get("notes")]
                for item in order.get("products") or []:
                    haystack.extend([item.get("name"), item.get("code"), item.get("description")])
                text_hit = any(term in str(value).lower() for value in haystack if value)
                phone_hit = len(term_digits) >= 3 and term_digits in digits_only(customer.get("phone"))
                if not (text_hit or phone_hit):
                    return False
            return True

        filtered = [order for order in orders or [] if matches(order)]
        filtered.sort(
            key=lambda o: o.get("order_date") or datetime.min,
            reverse=(sort != "asc"),
        )
        return filtered
