import re
from datetime import datetime


def make_log_tag(file, resource, method, ip, user_id, role, tenant_path, **kwargs):
    # Base tag
    log_tag = (
        f"[{file}]"
        f"[{resource}]"
        f"[{method}]"
        f"[ip:{ip}]"
        f"[user:{user_id}]"
        f"[role:{role}]"
        f"[tenant:{tenant_path}]"
    )

    # Append extra context fields
    for key, value in kwargs.items():
        log_tag += f"[{key}:{value}]"

    return log_tag


def digits_only(value) -> str:
    """Strip everything but digits from a phone-like string."""
    return re.sub(r"\D", "", str(value or ""))


def strip_none(data: dict) -> dict:
    """Drop keys whose value is None so they are never written as null."""
    return {key: value for key, value in (data or {}).items() if value is not None}


def serialize_document(doc):
    """Make a stored document JSON friendly (datetimes to ISO strings)."""
    if doc is None:
        return None
    if isinstance(doc, list):
        return [serialize_document(item) for item in doc]
    if isinstance(doc, dict):
        return {key: serialize_document(value) for key, value in doc.items()}
    if isinstance(doc, datetime):
        return doc.isoformat()
    return doc
