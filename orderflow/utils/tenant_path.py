# orderflow/utils/tenant_path.py
import re

from ..constants.service_code import COLLECTIONS, ERROR_MESSAGES

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


class StoragePathError(Exception):
    """Raised when a tenant namespace cannot be derived from a profile."""

    def __init__(self, message=ERROR_MESSAGES["STORAGE_PATH"]):
        super().__init__(message)
        self.message = message


def sanitize(value) -> str:
    return _NON_ALNUM.sub("", str(value or ""))


def root_path(business_name, email) -> str:
    """
    Deterministic namespace for one tenant.

    Both parts are reduced to [A-Za-z0-9] and joined with "_", which cannot
    occur inside a sanitized part. Names that differ only in punctuation
    still collapse to the same path; onboarding refuses such collisions.
    """
    return f"{sanitize(business_name)}_{sanitize(email)}"


def collection_path(tenant_root: str, name: str) -> str:
    """Collection name for `name` inside a tenant namespace."""
    return f"{COLLECTIONS['BUSINESS_ACCOUNTS']}.{tenant_root}.{name}"


def root_path_for_profile(profile) -> str:
    """
    Namespace for a resolved profile, or raise StoragePathError.

    The path recorded at onboarding wins so that renaming the business does
    not move its data. A profile still awaiting onboarding has no namespace.
    """
    profile = profile or {}
    if profile.get("onboarding_required"):
        raise StoragePathError()
    if profile.get("tenant_path"):
        return profile["tenant_path"]
    business_name = profile.get("business_name")
    email = profile.get("email")
    if not business_name or not email:
        raise StoragePathError()
    return root_path(business_name, email)
