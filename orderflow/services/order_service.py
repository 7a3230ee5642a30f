# orderflow/services/order_service.py

from ..constants.service_code import ORDER_STATUS, TERMINAL_ORDER_STATUSES
from ..models.customer_model import CustomerModel
from ..models.experience_model import ExperienceModel
from ..models.order_model import OrderModel
from ..utils.logger import Log


class OrderService:
    """
    Order intake and finalization over one tenant's registries.

    Writes are separate single-document operations with no transaction
    between them; a failure part way leaves the earlier writes in place.
    """

    def __init__(self, customers: CustomerModel, orders: OrderModel, experiences: ExperienceModel):
        self.customers = customers
        self.orders = orders
        self.experiences = experiences

    @classmethod
    def for_profile(cls, database, profile):
        return cls(
            CustomerModel.for_profile(database, profile),
            OrderModel.for_profile(database, profile),
            ExperienceModel.for_profile(database, profile),
        )

    def resolve_customer(self, phone, customer_name=None, address=None, email=None):
        """Existing customer for the phone (fuzzy), else a new one."""
        existing = self.customers.find_by_phone(phone)
        if existing:
            # backfill an address the customer did not have yet
            if address and not existing.get("address"):
                self.customers.update(existing["_id"], address=address)
                existing = self.customers.get_by_id(existing["_id"])
            return existing, False

        created = self.customers.create({
            "phone": phone,
            "name": customer_name,
            "address": address,
            "email": email,
        })
        return created, True

    def place_order(self, phone, customer_name=None, **order):
        customer, created = self.resolve_customer(
            phone,
            customer_name=customer_name,
            address=order.get("address"),
            email=order.pop("customer_email", None),
        )
        saved = self.orders.create({**order, "customer_id": customer["_id"]})
        Log.info(
            f"[order_service.py][OrderService][place_order] order {saved['_id']} "
            f"for customer {customer['_id']} (new customer: {created})"
        )
        return saved, customer

    def finalize_with_feedback(self, order_id, status, rating, comment=None):
        """
        Record the Experience, then move the order to its terminal status.

        Completed orders get their invoice number here.
        """
        if status not in TERMINAL_ORDER_STATUSES:
            raise ValueError(f"'{status}' is not a final status")

        order = self.orders.get_by_id(order_id)
        if not order:
            return None

        # fail before any write if the move is not allowed
        OrderModel.validate_transition(order.get("status"), status)

        experience = self.experiences.upsert_for_order(order_id, order.get("customer_id"), rating, comment)
        self.orders.update_status(order_id, status)

        if status == ORDER_STATUS["COMPLETED"]:
            self.orders.ensure_invoice_number(order_id)

        return {"order": self.orders.get_by_id(order_id), "experience": experience}
