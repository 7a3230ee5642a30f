import pytest

from orderflow.models.order_model import InvalidStatusTransition


def test_new_phone_creates_customer_and_order(order_service, customers, orders):
    order, customer = order_service.place_order(
        "+1555000111",
        "Alice",
        products=[{"name": "Cake", "price": 20, "quantity": 2}],
        delivery_charge=5,
    )

    assert customers.count() == 1
    assert orders.count() == 1
    assert customer["phone"] == "+1555000111"
    assert order["customer_id"] == customer["_id"]
    assert order["total_amount"] == 45
    assert order["status"] == "pending"


def test_known_phone_reuses_customer(order_service, customers):
    existing = customers.create({"phone": "+8801711000000", "name": "Alice"})

    _, customer = order_service.place_order(
        "01711000000",
        "Typed Differently",
        products=[{"name": "Bread", "price": 3}],
    )

    assert customer["_id"] == existing["_id"]
    assert customers.count() == 1


def test_address_is_backfilled_on_known_customer(order_service, customers):
    existing = customers.create({"phone": "01711000000"})

    order_service.place_order("01711000000", products=[{"name": "Bread", "price": 3}], address="House 5, Road 2")

    assert customers.get_by_id(existing["_id"])["address"] == "House 5, Road 2"


def test_existing_address_is_kept(order_service, customers):
    existing = customers.create({"phone": "01711000000", "address": "Old Road"})
    order_service.place_order("01711000000", products=[{"name": "Bread", "price": 3}], address="New Road")
    assert customers.get_by_id(existing["_id"])["address"] == "Old Road"


def test_finalize_records_feedback_then_status(order_service, orders, experiences):
    order, _ = order_service.place_order("01711000000", products=[{"name": "Bread", "price": 3}])
    orders.update_status(order["_id"], "processing")

    result = order_service.finalize_with_feedback(order["_id"], "completed", 5, "Lovely")

    assert result["order"]["status"] == "completed"
    assert result["order"]["invoice_number"].startswith("INV-")
    assert result["experience"]["rating"] == 5
    stored = experiences.get_by_order_id(order["_id"])
    assert stored["comment"] == "Lovely"
    assert stored["customer_id"] == order["customer_id"]


def test_cancel_from_pending_with_feedback(order_service, experiences):
    order, _ = order_service.place_order("01711000000", products=[{"name": "Bread", "price": 3}])

    result = order_service.finalize_with_feedback(order["_id"], "cancelled", 2)

    assert result["order"]["status"] == "cancelled"
    assert "invoice_number" not in result["order"]
    assert experiences.count() == 1


def test_rejected_transition_writes_no_feedback(order_service, experiences):
    order, _ = order_service.place_order("01711000000", products=[{"name": "Bread", "price": 3}])

    with pytest.raises(InvalidStatusTransition):
        order_service.finalize_with_feedback(order["_id"], "completed", 4)
    assert experiences.count() == 0


def test_rating_is_required(order_service, orders, experiences):
    order, _ = order_service.place_order("01711000000", products=[{"name": "Bread", "price": 3}])

    with pytest.raises(ValueError):
        order_service.finalize_with_feedback(order["_id"], "cancelled", None)
    assert orders.get_by_id(order["_id"])["status"] == "pending"
    assert experiences.count() == 0


def test_finalize_requires_final_status(order_service):
    with pytest.raises(ValueError):
        order_service.finalize_with_feedback("anything", "processing", 5)


def test_finalize_missing_order(order_service):
    assert order_service.finalize_with_feedback("missing", "cancelled", 3) is None


def test_experience_is_one_per_order(experiences):
    first = experiences.upsert_for_order("o1", "c1", 3, "ok")
    second = experiences.upsert_for_order("o1", "c1", 5, "great")

    assert first["_id"] == second["_id"]
    assert second["rating"] == 5
    assert experiences.count() == 1


@pytest.mark.parametrize("rating", [0, 6, "x"])
def test_experience_rating_range(experiences, rating):
    with pytest.raises(ValueError):
        experiences.create({"order_id": "o1", "rating": rating})
