# orderflow/utils/extensions.py

import os
from flask import request, g
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from .logger import Log

_UNITS = (("day", 86400), ("hour", 3600), ("minute", 60), ("second", 1))


def describe_window(seconds):
    """Render a limiter window as e.g. "5 minutes"; falls back to "unknown"."""
    if seconds is None:
        return "unknown"
    seconds = int(seconds)
    for unit, size in _UNITS:
        if seconds >= size or unit == "second":
            count = seconds // size
            return f"{count} {unit}{'' if count == 1 else 's'}"


def log_rate_limit_breach(request_limit):
    limit = getattr(request_limit, "limit", None)
    try:
        limit_str = f"{limit.amount} per {describe_window(limit.get_expiry())}"
    except AttributeError:
        limit_str = str(limit or "unknown")

    uid = (getattr(g, "current_user", None) or {}).get("uid") or "anonymous"
    Log.warning(
        f"[extensions.py][rate_limit] {get_remote_address() or 'unknown'} user={uid} "
        f"limit={limit_str} {request.method} {request.path}"
    )


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["2000 per day", "500 per hour"],
    storage_uri=os.getenv("RATE_LIMIT_STORAGE_URI", "memory://"),
    on_breach=log_rate_limit_breach,
)
