# orderflow/services/admin_service.py

from ..constants.service_code import (
    ACCOUNT_STATUS,
    AUDIT_ACTIONS,
    SYSTEM_USERS,
)
from ..models.account_model import AccountModel, BusinessAccountModel
from ..models.activity_log_model import ActivityLog
from ..models.order_model import OrderModel
from ..models.plan_model import PlanModel
from ..utils.logger import Log
from ..utils.tenant_path import StoragePathError
from . import stats_service


class AdminService:
    """
    Cross-tenant oversight for the super-admin.

    Every mutating call writes one activity-log entry naming the acting
    admin, the target account and the change.
    """

    def __init__(self, database, admin, on_disable=None):
        self.database = database
        self.admin = admin or {}
        self.accounts = AccountModel(database)
        self.businesses = BusinessAccountModel(database)
        self.plans = PlanModel(database)
        self.activity = ActivityLog(database)
        self.on_disable = on_disable

    def _audit(self, action, target=None, details=None):
        entry = self.activity.record(self.admin, action, target, details)
        Log.info(
            f"[admin_service.py][AdminService][{action}] admin={entry['admin_email']} "
            f"target={entry['target_user_email']} details={entry['details']}"
        )
        return entry

    # ---------------- Businesses ----------------
    def list_businesses(self):
        businesses = {b["_id"]: b for b in self.businesses.list_all()}
        listing = []
        for account in self.accounts.list_by_role(SYSTEM_USERS["BUSINESS"]):
            business = businesses.get(account.get("email")) or {}
            listing.append({
                **AccountModel.public(account),
                "business_info": business.get("business_info"),
                "business_plan": (business.get("profile") or {}).get("business_plan"),
                "capabilities": (business.get("profile") or {}).get("capabilities"),
                "tenant_path": business.get("tenant_path"),
                "onboarding_required": not business,
            })
        return listing

    def _business_account(self, uid):
        account = self.accounts.get_by_id(uid)
        if not account or account.get("role") != SYSTEM_USERS["BUSINESS"]:
            return None
        return account

    def toggle_status(self, uid):
        account = self._business_account(uid)
        if not account:
            return None

        enabled = account.get("status") != ACCOUNT_STATUS["DISABLED"]
        new_status = ACCOUNT_STATUS["DISABLED"] if enabled else ACCOUNT_STATUS["ENABLED"]
        self.accounts.update(uid, status=new_status)
        if new_status == ACCOUNT_STATUS["DISABLED"] and self.on_disable:
            self.on_disable(uid)

        self._audit(AUDIT_ACTIONS["TOGGLE_ACCESS"], account, {"from": account.get("status"), "to": new_status})
        return AccountModel.public(self.accounts.get_by_id(uid))

    def toggle_order_creation(self, uid):
        account = self._business_account(uid)
        if not account:
            return None

        new_value = not bool(account.get("can_create_orders"))
        self.accounts.update(uid, can_create_orders=new_value)
        self._audit(AUDIT_ACTIONS["TOGGLE_ORDER_CREATION"], account, {"can_create_orders": new_value})
        return AccountModel.public(self.accounts.get_by_id(uid))

    def assign_plan(self, uid, plan_id):
        """Copy a plan template onto the tenant's business record."""
        account = self._business_account(uid)
        plan = self.plans.get_by_id(plan_id)
        if not account or not plan:
            return None

        snapshot = PlanModel.snapshot(plan)
        if not self.businesses.apply_plan(account["email"], snapshot):
            return None

        self._audit(AUDIT_ACTIONS["ASSIGN_PLAN"], account, {"plan_id": plan["_id"], "plan_name": plan["name"]})
        return snapshot

    # ---------------- Plans ----------------
    def list_plans(self):
        return self.plans.list()

    def create_plan(self, name, price, capabilities, currency=None):
        plan = self.plans.create(name, price, capabilities, currency=currency)
        self._audit(AUDIT_ACTIONS["CREATE_PLAN"], None, {"plan_id": plan["_id"], "name": plan["name"]})
        return plan

    def update_plan(self, plan_id, partial):
        if not self.plans.get_by_id(plan_id):
            return None
        self.plans.update(plan_id, **partial)
        self._audit(AUDIT_ACTIONS["UPDATE_PLAN"], None, {"plan_id": plan_id, "changes": sorted(partial.keys())})
        return self.plans.get_by_id(plan_id)

    def seed_default_plans(self):
        created = self.plans.seed_defaults()
        self._audit(AUDIT_ACTIONS["SEED_PLANS"], None, {"created": [p["name"] for p in created]})
        return created

    # ---------------- Oversight ----------------
    def recent_activity(self, limit=20):
        return self.activity.recent(limit)

    def tenant_orders(self, uid):
        account = self._business_account(uid)
        if not account:
            return None
        business = self.businesses.get_by_email(account["email"])
        if not business or not business.get("tenant_path"):
            raise StoragePathError()
        return OrderModel(self.database, account["_id"], business["tenant_path"]).get_all()

    def tenant_stats(self, uid, window=None):
        orders = self.tenant_orders(uid)
        if orders is None:
            return None
        return stats_service.tenant_stats(orders, window)
