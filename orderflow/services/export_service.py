# orderflow/services/export_service.py

from ..utils.spreadsheet import (
    CUSTOMER_COLUMNS,
    PRODUCT_COLUMNS,
    ORDER_EXPORT_COLUMNS,
    format_datetime,
    write_rows,
)


def customer_rows(customers):
    return [{
        "Name": c.get("name"),
        "Phone": c.get("phone"),
        "Email": c.get("email"),
        "Address": c.get("address"),
        "Rating": c.get("rating", 0),
        "Comment": c.get("comment"),
        "Created At": format_datetime(c.get("created_at")),
    } for c in customers or []]


def product_rows(products):
    return [{
        "ID": p.get("_id"),
        "Code": p.get("code"),
        "Name": p.get("name"),
        "Price": p.get("price"),
        "Details": p.get("details"),
        "Created At": format_datetime(p.get("created_at")),
    } for p in products or []]


def order_rows(orders, customers=None):
    """
    One row per order. The single-product columns carry the first line item;
    `Products` lists every item as "name x quantity".
    """
    customers_by_id = {c.get("_id"): c for c in customers or []}
    rows = []
    for order in orders or []:
        items = order.get("products") or []
        first = items[0] if items else {}
        customer = customers_by_id.get(order.get("customer_id")) or {}
        rows.append({
            "Order ID": order.get("_id"),
            "Customer ID": order.get("customer_id"),
            "Product ID": first.get("product_id"),
            "Product Name": first.get("name"),
            "Price": first.get("price"),
            "Quantity": first.get("quantity"),
            "Delivery Charge": order.get("delivery_charge", 0),
            "Status": order.get("status"),
            "Source": order.get("source"),
            "Order Date": format_datetime(order.get("order_date")),
            "Delivery Date": format_datetime(order.get("delivery_date")),
            "Notes": order.get("notes"),
            "Address": order.get("address"),
            "Has Order Time": bool(order.get("has_order_time")),
            "Has Delivery Time": bool(order.get("has_delivery_time")),
            "Created At": format_datetime(order.get("created_at")),
            "Customer Name": customer.get("name"),
            "Customer Phone": customer.get("phone"),
            "Products": ", ".join(f"{i.get('name')} x {i.get('quantity')}" for i in items),
            "Total Amount": order.get("total_amount", 0),
        })
    return rows


def export_customers(customers, fmt="xlsx"):
    return write_rows(customer_rows(customers), CUSTOMER_COLUMNS, fmt, sheet_name="Customers")


def export_products(products, fmt="xlsx"):
    return write_rows(product_rows(products), PRODUCT_COLUMNS, fmt, sheet_name="Products")


def export_orders(orders, customers=None, fmt="xlsx"):
    return write_rows(order_rows(orders, customers), ORDER_EXPORT_COLUMNS, fmt, sheet_name="Orders")
