from datetime import datetime

import pytest

from orderflow.models.order_model import InvalidStatusTransition, OrderModel


def _order(**overrides):
    order = {
        "customer_id": "c1",
        "products": [{"name": "Cake", "price": 20, "quantity": 2}],
        "delivery_charge": 5,
    }
    order.update(overrides)
    return order


def test_total_is_computed_from_items_and_delivery(orders):
    order = orders.create(_order(total_amount=999))

    assert order["total_amount"] == 45
    assert order["status"] == "pending"
    assert order["source"] == "phone"
    assert orders.get_by_id(order["_id"])["total_amount"] == 45


def test_total_is_recomputed_on_update(orders):
    order = orders.create(_order())

    orders.update(order["_id"], products=[{"name": "Cake", "price": 20, "quantity": 3}], total_amount=1)
    assert orders.get_by_id(order["_id"])["total_amount"] == 65

    orders.update(order["_id"], delivery_charge=0)
    assert orders.get_by_id(order["_id"])["total_amount"] == 60


def test_compute_total_rounds_to_cents():
    items = [{"price": 0.1, "quantity": 3}]
    assert OrderModel.compute_total(items, 0.2) == 0.5


def test_line_items_get_product_ids(orders):
    order = orders.create(_order(products=[{"name": "Cake", "price": 20}]))
    item = order["products"][0]
    assert item["product_id"]
    assert item["quantity"] == 1


@pytest.mark.parametrize("items", [
    [],
    [{"name": "", "price": 1, "quantity": 1}],
    [{"name": "Cake", "price": -1, "quantity": 1}],
    [{"name": "Cake", "price": 1, "quantity": 0}],
])
def test_invalid_items_are_rejected(orders, items):
    with pytest.raises(ValueError):
        orders.create(_order(products=items))
    assert orders.count() == 0


def test_customer_is_required(orders):
    with pytest.raises(ValueError):
        orders.create(_order(customer_id=None))


def test_unknown_source_is_rejected(orders):
    with pytest.raises(ValueError):
        orders.create(_order(source="email"))


def test_allowed_transitions(orders):
    order = orders.create(_order())

    assert orders.update_status(order["_id"], "processing")
    assert orders.update_status(order["_id"], "completed")
    assert orders.get_by_id(order["_id"])["status"] == "completed"


@pytest.mark.parametrize("path", [
    ["completed"],
    ["cancelled", "processing"],
    ["processing", "completed", "cancelled"],
    ["processing", "pending"],
])
def test_rejected_transitions(orders, path):
    order = orders.create(_order())
    *allowed, rejected = path
    for status in allowed:
        orders.update_status(order["_id"], status)

    before = orders.get_by_id(order["_id"])["status"]
    with pytest.raises(InvalidStatusTransition):
        orders.update_status(order["_id"], rejected)
    assert orders.get_by_id(order["_id"])["status"] == before


def test_update_status_of_missing_order(orders):
    assert orders.update_status("missing", "processing") is False


def test_unknown_status_is_rejected(orders):
    order = orders.create(_order())
    with pytest.raises(ValueError):
        orders.update_status(order["_id"], "shipped")


def test_registry_completes_without_feedback(orders, experiences):
    order = orders.create(_order())
    orders.update_status(order["_id"], "processing")

    assert orders.update_status(order["_id"], "completed")
    assert orders.get_by_id(order["_id"])["status"] == "completed"
    assert experiences.get_by_order_id(order["_id"]) is None


def test_general_update_validates_status(orders):
    order = orders.create(_order())
    with pytest.raises(InvalidStatusTransition):
        orders.update(order["_id"], status="completed")


def test_invoice_number_is_assigned_once(orders):
    order = orders.create(_order(order_date=datetime(2024, 3, 9, 14, 0)))

    first = orders.ensure_invoice_number(order["_id"])
    second = orders.ensure_invoice_number(order["_id"])

    assert first == second
    assert first == f"INV-20240309-{order['_id'][-6:].upper()}"
    assert orders.get_by_id(order["_id"])["invoice_number"] == first


def test_invoice_number_cannot_be_reassigned(orders):
    order = orders.create(_order())
    number = orders.ensure_invoice_number(order["_id"])

    with pytest.raises(ValueError):
        orders.update(order["_id"], invoice_number="INV-OTHER")
    assert orders.update(order["_id"], invoice_number=number)


def test_ensure_invoice_number_of_missing_order(orders):
    assert orders.ensure_invoice_number("missing") is None


def test_blank_invoice_number_is_rejected(orders):
    order = orders.create(_order())

    with pytest.raises(ValueError):
        orders.update(order["_id"], invoice_number="")
    assert "invoice_number" not in orders.get_by_id(order["_id"])


def test_blank_stored_invoice_number_is_replaced(orders):
    order = orders.create(_order(order_date=datetime(2024, 3, 9, 14, 0)))
    orders.collection.update_one({"_id": order["_id"]}, {"$set": {"invoice_number": ""}})

    number = orders.ensure_invoice_number(order["_id"])

    assert number == f"INV-20240309-{order['_id'][-6:].upper()}"
    assert orders.get_by_id(order["_id"])["invoice_number"] == number


def test_create_with_explicit_id_merges(orders):
    orders.create(_order(_id="o-1", notes="first"))
    orders.create(_order(_id="o-1", delivery_charge=10))

    assert orders.count() == 1
    stored = orders.get_by_id("o-1")
    assert stored["total_amount"] == 50


# ---------------- filtering ----------------

NOW = datetime(2024, 5, 15, 12, 0)  # a Wednesday

CUSTOMERS = [
    {"_id": "c1", "name": "Alice Rahman", "phone": "+8801711000000"},
    {"_id": "c2", "name": "Bob", "phone": "01999888777"},
]

ORDERS = [
    {"_id": "o1", "customer_id": "c1", "status": "pending", "notes": "",
     "order_date": datetime(2024, 5, 10), "delivery_date": datetime(2024, 5, 15, 18, 0),
     "products": [{"name": "Chocolate Cake", "code": "A1"}]},
    {"_id": "o2", "customer_id": "c2", "status": "completed", "notes": "leave at door",
     "order_date": datetime(2024, 5, 12), "delivery_date": datetime(2024, 5, 13),
     "products": [{"name": "Bread"}]},
    {"_id": "o3", "customer_id": "c2", "status": "processing", "notes": "",
     "order_date": datetime(2024, 4, 1), "delivery_date": datetime(2024, 4, 2),
     "products": [{"name": "Cookies", "description": "oat"}]},
]


def _ids(orders):
    return [o["_id"] for o in orders]


def test_filter_by_status_list():
    result = OrderModel.filter_orders(ORDERS, statuses=["pending", "processing"])
    assert _ids(result) == ["o1", "o3"]


def test_filter_by_delivery_window():
    assert _ids(OrderModel.filter_orders(ORDERS, date_range="today", now=NOW)) == ["o1"]
    assert _ids(OrderModel.filter_orders(ORDERS, date_range="week", now=NOW)) == ["o2", "o1"]
    assert _ids(OrderModel.filter_orders(ORDERS, date_range="month", now=NOW)) == ["o2", "o1"]


def test_filter_custom_range_includes_end_day():
    result = OrderModel.filter_orders(
        ORDERS, date_range="custom", start=datetime(2024, 4, 1), end=datetime(2024, 5, 13)
    )
    assert _ids(result) == ["o2", "o3"]


def test_search_matches_customer_items_and_notes():
    search = lambda term: _ids(OrderModel.filter_orders(ORDERS, search=term, customers=CUSTOMERS))

    assert search("alice") == ["o1"]
    assert search("a1") == ["o1"]
    assert search("DOOR") == ["o2"]
    assert search("oat") == ["o3"]
    assert search("888") == ["o2", "o3"]
    assert search("zzz") == []


def test_sort_by_order_date():
    assert _ids(OrderModel.filter_orders(ORDERS)) == ["o2", "o1", "o3"]
    assert _ids(OrderModel.filter_orders(ORDERS, sort="asc")) == ["o3", "o1", "o2"]


def test_date_window_unknown_range():
    assert OrderModel.date_window("all", now=NOW) is None
    assert OrderModel.date_window("custom", now=NOW) is None
