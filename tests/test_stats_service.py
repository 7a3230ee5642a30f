from datetime import datetime

from orderflow.services import stats_service

NOW = datetime(2024, 5, 15, 12, 0)

ORDERS = [
    {"status": "pending", "total_amount": 45, "order_date": datetime(2024, 5, 15, 9),
     "delivery_date": datetime(2024, 5, 15, 18), "products": [{"name": "Cake", "price": 20, "quantity": 2}]},
    {"status": "processing", "total_amount": 10, "order_date": datetime(2024, 5, 1),
     "delivery_date": datetime(2024, 5, 10), "products": [{"name": "Bread", "price": 2, "quantity": 5}]},
    {"status": "completed", "total_amount": 60, "order_date": datetime(2024, 3, 1),
     "delivery_date": datetime(2024, 3, 2), "products": [{"name": "Cake", "price": 20, "quantity": 3}]},
]


def test_tenant_stats_all_time():
    stats = stats_service.tenant_stats(ORDERS, now=NOW)

    assert stats["window"] == "all"
    assert stats["total_orders"] == 3
    assert stats["total_amount"] == 115
    assert stats["by_status"]["completed"] == {"count": 1, "amount": 60.0}
    assert stats["by_status"]["cancelled"] == {"count": 0, "amount": 0.0}


def test_tenant_stats_windows_use_order_date():
    assert stats_service.tenant_stats(ORDERS, "today", now=NOW)["total_orders"] == 1
    assert stats_service.tenant_stats(ORDERS, "month", now=NOW)["total_orders"] == 2


def test_business_summary():
    summary = stats_service.business_summary(ORDERS, now=NOW)

    assert summary["total_revenue"] == 60
    assert summary["status_counts"] == {"pending": 1, "processing": 1, "completed": 1, "cancelled": 0}
    assert summary["urgent"] == 1
    assert summary["at_risk"] == 1
    assert summary["top_products"][0] == {"name": "Cake", "quantity": 5, "revenue": 100.0}
