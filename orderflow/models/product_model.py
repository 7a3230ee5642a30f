# orderflow/models/product_model.py

from .base_model import BaseModel
from ..constants.service_code import COLLECTIONS
from ..utils.logger import Log


class DuplicateProductCodeError(Exception):
    def __init__(self, code):
        message = f"A product with code '{code}' already exists"
        super().__init__(message)
        self.code = code
        self.message = message


class ProductModel(BaseModel):
    """
    Tenant product catalog.

    A non-empty `code` is unique within the tenant. Uniqueness is checked
    with a query before writing; nothing is written when it fails.
    """
    collection_name = COLLECTIONS["PRODUCTS"]

    @staticmethod
    def _normalize_code(code):
        return str(code).strip() if code is not None else ""

    @staticmethod
    def _validate_price(price):
        try:
            price = float(price)
        except (TypeError, ValueError):
            raise ValueError("Price must be a number")
        if price < 0:
            raise ValueError("Price cannot be negative")
        return price

    def _ensure_unique_code(self, code, exclude_id=None):
        if not code:
            return
        query = {"code": code}
        if exclude_id is not None:
            query["_id"] = {"$ne": str(exclude_id)}
        if self.collection.find_one(self._scope(query)):
            Log.info(f"[product_model.py][ProductModel][_ensure_unique_code] duplicate code {code}")
            raise DuplicateProductCodeError(code)

    def list(self):
        return self.get_all()

    def create(self, product: dict) -> dict:
        """Create a product; a caller-supplied id is merged into any existing record."""
        product = dict(product or {})
        name = (product.get("name") or "").strip()
        if not name:
            raise ValueError("Product name is required")
        price = self._validate_price(product.get("price"))
        code = self._normalize_code(product.get("code"))
        record_id = product.get("_id") or product.get("id")

        self._ensure_unique_code(code, exclude_id=record_id)

        document = {
            "code": code or None,
            "name": name,
            "price": price,
            "details": product.get("details") or None,
            "created_at": product.get("created_at"),
            "updated_at": product.get("updated_at"),
        }
        if record_id:
            return self.upsert(record_id, document)
        return self.insert(document)

    def update(self, record_id, **updates):
        if "name" in updates and updates["name"] is not None:
            updates["name"] = str(updates["name"]).strip()
            if not updates["name"]:
                raise ValueError("Product name is required")
        if updates.get("price") is not None:
            updates["price"] = self._validate_price(updates["price"])
        if updates.get("code") is not None:
            updates["code"] = self._normalize_code(updates["code"])
            self._ensure_unique_code(updates["code"], exclude_id=record_id)
        return super().update(record_id, **updates)
