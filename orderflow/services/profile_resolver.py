# orderflow/services/profile_resolver.py
from __future__ import annotations

import copy
import threading
from typing import Any, Callable, Dict, Optional

from ..constants.service_code import ACCOUNT_STATUS, SYSTEM_USERS
from ..models.account_model import AccountModel, BusinessAccountModel
from ..models.plan_model import PlanModel
from ..utils.logger import Log
from ..utils.plan.capability_enforcer import RESTRICTIVE_CAPABILITIES
from ..utils.tenant_path import root_path
from .live_query import LiveQuery

ONBOARDING_PLAN = "Lite"


class ProfileResolver:
    """
    Turns an authenticated uid into one in-memory profile.

    Admins get their account record as-is. Business principals get their
    business record (plan snapshot, capabilities, business info) merged with
    the account's status and order-creation flag. A disabled account is
    signed out and resolves to None.
    """

    def __init__(self, database, on_sign_out: Optional[Callable[[str], None]] = None):
        self.accounts = AccountModel(database)
        self.businesses = BusinessAccountModel(database)
        self.plans = PlanModel(database)
        self.on_sign_out = on_sign_out

    # ---------------- Resolution ----------------
    def resolve(self, uid) -> Optional[Dict[str, Any]]:
        account = self.accounts.get_by_id(uid)
        if not account:
            return None
        return self._compose(account)

    def _compose(self, account):
        if account.get("role") == SYSTEM_USERS["ADMIN"]:
            profile = AccountModel.public(account)
            profile["uid"] = account["_id"]
            return profile

        if account.get("status") == ACCOUNT_STATUS["DISABLED"]:
            Log.info(f"[profile_resolver.py][ProfileResolver][_compose] account {account['_id']} disabled, signing out")
            if self.on_sign_out:
                self.on_sign_out(account["_id"])
            return None

        base = {
            "uid": account["_id"],
            "email": account.get("email"),
            "role": account.get("role"),
            "status": account.get("status"),
            "plan": account.get("plan"),
            "can_create_orders": bool(account.get("can_create_orders")),
        }

        business = self.businesses.get_by_email(account.get("email"))
        if not business:
            return {
                **base,
                "business_name": account.get("business_name"),
                "capabilities": copy.deepcopy(RESTRICTIVE_CAPABILITIES),
                "onboarding_required": True,
            }

        stored = business.get("profile") or {}
        capabilities = {**RESTRICTIVE_CAPABILITIES, **(stored.get("capabilities") or {})}
        # the admin toggle on the account overrides the plan flag
        capabilities["can_add_order"] = bool(capabilities.get("can_add_order")) and base["can_create_orders"]

        info = business.get("business_info") or {}
        return {
            **info,
            **base,
            "business_plan": stored.get("business_plan"),
            "capabilities": capabilities,
            "tenant_path": business.get("tenant_path") or root_path(info.get("business_name"), base["email"]),
            "onboarding_required": False,
        }

    # ---------------- Live profile ----------------
    def watch(self, uid, on_profile, on_error=None):
        """
        Push a fresh profile whenever the account or business record changes.

        Any subscription error ends in on_profile(None); there is no retry.
        """
        account = self.accounts.get_by_id(uid)
        if not account:
            on_profile(None)
            return lambda: None

        lock = threading.Lock()
        state = {"last": None, "failed": False}

        def push(_snapshot=None):
            with lock:
                if state["failed"]:
                    return
                profile = self.resolve(uid)
                if profile != state["last"] or state["last"] is None:
                    state["last"] = profile
                    on_profile(profile)

        def fail(error):
            with lock:
                if state["failed"]:
                    return
                state["failed"] = True
            Log.error(f"[profile_resolver.py][ProfileResolver][watch] profile subscription for {uid} failed: {error}")
            on_profile(None)
            if on_error:
                on_error(error)

        account_query = LiveQuery(self.accounts.collection, {"_id": account["_id"]})
        business_query = LiveQuery(self.businesses.collection, {"_id": account["email"]})

        cancels = [
            account_query.subscribe(push, fail),
            business_query.subscribe(push, fail),
        ]

        def cancel():
            for stop in cancels:
                stop()

        return cancel

    # ---------------- Onboarding ----------------
    def register_business(self, uid, email, business_name, phone, **info):
        """Create the business record on the Lite plan and return the new profile."""
        account = self.accounts.get_by_id(uid)
        if not account or account.get("role") != SYSTEM_USERS["BUSINESS"]:
            raise ValueError("Only business accounts can register a business")

        email = (email or account.get("email") or "").strip().lower()
        if email != account.get("email"):
            raise ValueError("Email does not match the signed-in account")

        business_name = (business_name or "").strip()
        if not business_name:
            raise ValueError("Business name is required")
        if not phone:
            raise ValueError("Business phone is required")

        if self.businesses.get_by_email(email):
            raise ValueError("This business is already registered")

        tenant_path = root_path(business_name, email)
        clash = self.businesses.get_by_tenant_path(tenant_path)
        if clash and clash.get("_id") != email:
            raise ValueError("This business name cannot be used; please choose another")

        plan = self.plans.get_by_name(ONBOARDING_PLAN)
        if not plan:
            self.plans.seed_defaults()
            plan = self.plans.get_by_name(ONBOARDING_PLAN)

        self.businesses.create(
            email,
            account["_id"],
            tenant_path,
            {**info, "business_name": business_name, "phone": phone},
            PlanModel.snapshot(plan),
        )
        self.accounts.update(account["_id"], business_name=business_name)
        Log.info(f"[profile_resolver.py][ProfileResolver][register_business] {email} onboarded at {tenant_path}")
        return self.resolve(uid)

    def update_business_info(self, uid, partial):
        account = self.accounts.get_by_id(uid)
        if not account:
            return None
        if "business_name" in partial and not (partial.get("business_name") or "").strip():
            raise ValueError("Business name cannot be empty")

        self.businesses.update_info(account["email"], partial)
        if partial.get("business_name"):
            self.accounts.update(account["_id"], business_name=partial["business_name"].strip())
        return self.resolve(uid)

    def change_plan(self, uid, plan_id):
        """Self-service plan switch; copies the plan like an admin assignment."""
        account = self.accounts.get_by_id(uid)
        plan = self.plans.get_by_id(plan_id)
        if not account or not plan:
            return None
        if not self.businesses.apply_plan(account["email"], PlanModel.snapshot(plan)):
            return None
        return self.resolve(uid)
