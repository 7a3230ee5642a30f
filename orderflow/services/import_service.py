# orderflow/services/import_service.py
from __future__ import annotations

from typing import Callable, Dict, List, Optional

from ..utils.logger import Log
from ..utils.spreadsheet import (
    cell_bool,
    cell_datetime,
    cell_float,
    cell_int,
    cell_str,
)

ProgressCallback = Callable[[int, int, Dict], None]


def _run_rows(kind, rows, handler, label, progress: Optional[ProgressCallback] = None):
    """
    Apply `handler` to each row in order, one write at a time.

    A failing row is recorded and counted; the loop always continues.
    `progress(done, total, outcome)` is called after every row.
    """
    total = len(rows)
    outcomes: List[Dict] = []
    success_count = 0
    error_count = 0

    for index, row in enumerate(rows, start=1):
        name = label(row) or f"Row {index}"
        try:
            saved = handler(row)
            success_count += 1
            outcome = {"row": index, "label": name, "success": True, "id": (saved or {}).get("_id")}
        except Exception as e:
            error_count += 1
            outcome = {"row": index, "label": name, "success": False, "error": str(e)}
            Log.info(f"[import_service.py][{kind}][row:{index}] skipped: {str(e)}")

        outcomes.append(outcome)
        if progress:
            progress(index, total, outcome)

    Log.info(f"[import_service.py][{kind}] done: success={success_count} errors={error_count}")
    return {"success_count": success_count, "error_count": error_count, "rows": outcomes}


# ---------------- Customers ----------------

def _customer_from_row(row):
    name = cell_str(row.get("Name"))
    phone = cell_str(row.get("Phone"))
    if not name or not phone:
        raise ValueError("Name and Phone are required")
    return {
        "name": name,
        "phone": phone,
        "email": cell_str(row.get("Email")),
        "address": cell_str(row.get("Address")),
        "rating": cell_int(row.get("Rating")),
        "comment": cell_str(row.get("Comment")) or "",
        "created_at": cell_datetime(row.get("Created At")),
    }


def import_customers(customers, rows, progress=None):
    return _run_rows(
        "customers",
        rows,
        lambda row: customers.create(_customer_from_row(row)),
        lambda row: cell_str(row.get("Name")) or cell_str(row.get("Phone")),
        progress,
    )


# ---------------- Products ----------------

def _product_from_row(row):
    name = cell_str(row.get("Name"))
    if not name or cell_str(row.get("Price")) is None:
        raise ValueError("Name and Price are required")
    return {
        "_id": cell_str(row.get("ID")),
        "code": cell_str(row.get("Code")),
        "name": name,
        "price": cell_float(row.get("Price")),
        "details": cell_str(row.get("Details")),
        "created_at": cell_datetime(row.get("Created At")),
    }


def import_products(products, rows, progress=None):
    return _run_rows(
        "products",
        rows,
        lambda row: products.create(_product_from_row(row)),
        lambda row: cell_str(row.get("Name")) or cell_str(row.get("ID")),
        progress,
    )


# ---------------- Orders ----------------

def _order_from_row(row):
    if not cell_str(row.get("Customer ID")) or not cell_str(row.get("Product Name")) or cell_str(row.get("Price")) is None:
        raise ValueError("Customer ID, Product Name and Price are required")
    return {
        "_id": cell_str(row.get("Order ID")),
        "customer_id": cell_str(row.get("Customer ID")),
        "products": [{
            "product_id": cell_str(row.get("Product ID")),
            "name": cell_str(row.get("Product Name")),
            "price": cell_float(row.get("Price")),
            "quantity": cell_int(row.get("Quantity"), default=1),
        }],
        "delivery_charge": cell_float(row.get("Delivery Charge")),
        "status": cell_str(row.get("Status")),
        "source": cell_str(row.get("Source")),
        "order_date": cell_datetime(row.get("Order Date")),
        "delivery_date": cell_datetime(row.get("Delivery Date")),
        "notes": cell_str(row.get("Notes")),
        "address": cell_str(row.get("Address")),
        "has_order_time": cell_bool(row.get("Has Order Time")),
        "has_delivery_time": cell_bool(row.get("Has Delivery Time")),
        "created_at": cell_datetime(row.get("Created At")),
    }


def import_orders(orders, rows, progress=None):
    return _run_rows(
        "orders",
        rows,
        lambda row: orders.create(_order_from_row(row)),
        lambda row: cell_str(row.get("Product Name")) or cell_str(row.get("Order ID")),
        progress,
    )
