from flask import g, request

from ..extensions.db import db
from .helpers import make_log_tag
from .plan.capability_enforcer import CapabilityEnforcer


def current_profile():
    return g.get("current_user") or {}


def request_log_tag(file, resource, method, **kwargs):
    profile = current_profile()
    return make_log_tag(
        file,
        resource,
        method,
        request.remote_addr,
        profile.get("uid"),
        profile.get("role"),
        profile.get("tenant_path"),
        **kwargs,
    )


def tenant_registry(model_cls):
    """Registry for the signed-in business (raises StoragePathError before onboarding)."""
    return model_cls.for_profile(db.get_database(), current_profile())


def capability_enforcer():
    return CapabilityEnforcer(current_profile().get("capabilities"))
