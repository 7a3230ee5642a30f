# orderflow/utils/plan/capability_enforcer.py
from __future__ import annotations

from typing import Any, Dict, Optional

from ...constants.service_code import UNLIMITED_QUOTA


class PlanLimitError(Exception):
    def __init__(self, code: str, message: str, meta=None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.meta = meta or {}


# Most restrictive set: used for onboarding placeholders and missing keys.
RESTRICTIVE_CAPABILITIES: Dict[str, Any] = {
    "can_add_order": False,
    "can_add_customer": False,
    "can_add_products": False,
    "has_export_import_option": False,
    "max_order_number": 0,
    "max_customer_number": 0,
    "max_product_number": 0,
}

# kind -> (flag key, quota key)
_RESOURCE_KEYS = {
    "order": ("can_add_order", "max_order_number"),
    "customer": ("can_add_customer", "max_customer_number"),
    "product": ("can_add_products", "max_product_number"),
}


def format_quota(value) -> str:
    """Display form of a quota ("Unlimited" at or above the sentinel)."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return "0"
    return "Unlimited" if number >= UNLIMITED_QUOTA else str(number)


class CapabilityEnforcer:
    """
    Gate decisions from a tenant's capability snapshot and live counts.

    can_add_X = flag and count < max. Nothing is persisted; build one per
    request from the resolved profile.
    """

    def __init__(self, capabilities: Optional[Dict[str, Any]] = None):
        self.capabilities = dict(capabilities or {})

    def _flag(self, key: str) -> bool:
        return bool(self.capabilities.get(key, RESTRICTIVE_CAPABILITIES[key]))

    def _quota(self, key: str) -> int:
        try:
            return int(self.capabilities.get(key, RESTRICTIVE_CAPABILITIES[key]))
        except (TypeError, ValueError):
            return 0

    def can_add(self, kind: str, count: int) -> bool:
        flag_key, quota_key = _RESOURCE_KEYS[kind]
        return self._flag(flag_key) and int(count or 0) < self._quota(quota_key)

    def gates(self, order_count: int = 0, customer_count: int = 0, product_count: int = 0) -> Dict[str, bool]:
        return {
            "can_add_order": self.can_add("order", order_count),
            "can_add_customer": self.can_add("customer", customer_count),
            "can_add_products": self.can_add("product", product_count),
            "has_export_import_option": self._flag("has_export_import_option"),
        }

    def require_add(self, kind: str, count: int):
        if kind not in _RESOURCE_KEYS:
            raise ValueError(f"Unknown resource kind: {kind}")

        flag_key, quota_key = _RESOURCE_KEYS[kind]
        if not self._flag(flag_key):
            raise PlanLimitError(
                "FEATURE_NOT_AVAILABLE",
                f"Adding a new {kind} is not available on your current plan.",
                meta={"feature": flag_key},
            )

        limit = self._quota(quota_key)
        if int(count or 0) >= limit:
            raise PlanLimitError(
                "LIMIT_REACHED",
                f"You have reached the maximum number of {kind}s ({format_quota(limit)}) for your plan.",
                meta={"limit_key": quota_key, "limit": limit, "current": int(count or 0)},
            )

    def require_export_import(self):
        if not self._flag("has_export_import_option"):
            raise PlanLimitError(
                "FEATURE_NOT_AVAILABLE",
                "Import and export are not available on your current plan.",
                meta={"feature": "has_export_import_option"},
            )
