# orderflow/services/stats_service.py

from datetime import datetime, timedelta

from ..constants.service_code import ORDER_STATUS
from ..models.order_model import OrderModel

STATS_WINDOWS = ("today", "week", "month")
OPEN_STATUSES = (ORDER_STATUS["PENDING"], ORDER_STATUS["PROCESSING"])


def _amount(order):
    return float(order.get("total_amount") or 0)


def tenant_stats(orders, window=None, now=None):
    """
    Order counts and amounts per status over a tenant's full order set,
    optionally limited to today/week/month by order date.
    """
    bounds = OrderModel.date_window(window, now=now) if window in STATS_WINDOWS else None
    if bounds:
        orders = [
            o for o in orders or []
            if isinstance(o.get("order_date"), datetime) and bounds[0] <= o["order_date"] < bounds[1]
        ]

    by_status = {status: {"count": 0, "amount": 0.0} for status in ORDER_STATUS.values()}
    for order in orders or []:
        bucket = by_status.setdefault(order.get("status"), {"count": 0, "amount": 0.0})
        bucket["count"] += 1
        bucket["amount"] += _amount(order)

    return {
        "window": window if bounds else "all",
        "total_orders": len(orders or []),
        "total_amount": round(sum(_amount(o) for o in orders or []), 2),
        "by_status": by_status,
    }


def business_summary(orders, now=None):
    """Dashboard figures: revenue, status counts, due-today, overdue, best sellers."""
    orders = orders or []
    now = now or datetime.now()
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    tomorrow = today + timedelta(days=1)

    def is_open(order):
        return order.get("status") in OPEN_STATUSES

    def delivery(order):
        value = order.get("delivery_date")
        return value if isinstance(value, datetime) else None

    counts = {status: 0 for status in ORDER_STATUS.values()}
    for order in orders:
        if order.get("status") in counts:
            counts[order["status"]] += 1

    urgent = sum(1 for o in orders if is_open(o) and delivery(o) and today <= delivery(o) < tomorrow)
    at_risk = sum(1 for o in orders if is_open(o) and delivery(o) and delivery(o) < today)

    sales = {}
    for order in orders:
        for item in order.get("products") or []:
            entry = sales.setdefault(item.get("name"), {"name": item.get("name"), "quantity": 0, "revenue": 0.0})
            entry["quantity"] += int(item.get("quantity") or 0)
            entry["revenue"] += float(item.get("price") or 0) * int(item.get("quantity") or 0)
    top_products = sorted(sales.values(), key=lambda e: e["quantity"], reverse=True)[:5]

    return {
        "total_revenue": round(sum(_amount(o) for o in orders if o.get("status") == ORDER_STATUS["COMPLETED"]), 2),
        "status_counts": counts,
        "urgent": urgent,
        "at_risk": at_risk,
        "top_products": top_products,
    }
