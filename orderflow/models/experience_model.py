# orderflow/models/experience_model.py

from .base_model import BaseModel
from ..constants.service_code import COLLECTIONS


class ExperienceModel(BaseModel):
    """Post-order feedback. One record per order in the normal flow."""
    collection_name = COLLECTIONS["EXPERIENCES"]

    @staticmethod
    def _validate_rating(rating):
        try:
            rating = int(rating)
        except (TypeError, ValueError):
            raise ValueError("Rating is required")
        if rating < 1 or rating > 5:
            raise ValueError("Rating must be between 1 and 5")
        return rating

    def list(self):
        return self.get_all()

    def get_by_order_id(self, order_id):
        return self.collection.find_one(self._scope({"order_id": str(order_id)}))

    def create(self, experience: dict) -> dict:
        experience = dict(experience or {})
        if not experience.get("order_id"):
            raise ValueError("Order is required")
        return self.insert({
            "order_id": str(experience["order_id"]),
            "customer_id": experience.get("customer_id"),
            "rating": self._validate_rating(experience.get("rating")),
            "comment": experience.get("comment") or "",
        })

    def update(self, record_id, **updates):
        if "rating" in updates and updates["rating"] is not None:
            updates["rating"] = self._validate_rating(updates["rating"])
        return super().update(record_id, **updates)

    def upsert_for_order(self, order_id, customer_id, rating, comment=None):
        """Create the order's feedback, or update it when one already exists."""
        existing = self.get_by_order_id(order_id)
        if existing:
            self.update(existing["_id"], rating=rating, comment=comment)
            return self.get_by_id(existing["_id"])
        return self.create({
            "order_id": order_id,
            "customer_id": customer_id,
            "rating": rating,
            "comment": comment,
        })
