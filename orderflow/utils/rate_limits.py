# orderflow/utils/rate_limits.py

from flask import request, g
from flask_limiter.util import get_remote_address

from .extensions import limiter

WRITE_METHODS = ["POST", "PUT", "PATCH"]


def _submitted_email():
    payload = request.get_json(silent=True) or request.form or {}
    email = payload.get("email") if hasattr(payload, "get") else None
    return str(email).strip().lower()[:100] if email else None


def account_key():
    """Key sign-in attempts on the submitted email; anonymous bodies share the IP bucket."""
    email = _submitted_email()
    return f"login:{email}" if email else get_remote_address()


def principal_key():
    """Key on the signed-in principal, or on the IP before authentication."""
    uid = (getattr(g, "current_user", None) or {}).get("uid")
    return f"user:{uid}" if uid else get_remote_address()


def _scoped(scope, limit_str, key_func, methods, message):
    return limiter.shared_limit(
        limit_str,
        scope=scope,
        key_func=key_func,
        methods=methods,
        error_message=message,
    )


# auth

def login_ip_limiter(entity_name="login", limit_str="5 per minute; 30 per hour; 100 per day"):
    return _scoped(f"{entity_name}-ip", limit_str, get_remote_address, ["POST"],
                   f"Too many {entity_name} attempts from this IP. Please try again later.")


def login_user_limiter(entity_name="login", limit_str="3 per 5 minutes; 10 per hour; 20 per day"):
    return _scoped(f"{entity_name}-user", limit_str, account_key, ["POST"],
                   f"Too many {entity_name} attempts for this account. Please try again later.")


def register_rate_limiter(entity_name="registration", limit_str="2 per minute; 5 per hour; 20 per day"):
    return _scoped(f"{entity_name}-ip", limit_str, get_remote_address, ["POST"],
                   f"Too many {entity_name} attempts. Please try again later.")


def logout_rate_limiter(entity_name="logout", limit_str="20 per minute; 200 per hour"):
    return _scoped(f"{entity_name}-user", limit_str, principal_key, ["POST"],
                   f"Too many {entity_name} requests. Please try again later.")


# tenant data

def crud_read_limiter(entity_name: str, limit_str: str = "60 per minute"):
    return _scoped(f"{entity_name}-read", limit_str, principal_key, ["GET"],
                   f"Too many {entity_name} read requests. Please slow down.")


def crud_write_limiter(entity_name: str, limit_str: str = "20 per minute; 200 per hour"):
    return _scoped(f"{entity_name}-write", limit_str, principal_key, WRITE_METHODS,
                   f"Too many {entity_name} write requests. Please try again later.")


def crud_delete_limiter(entity_name: str, limit_str: str = "10 per minute; 50 per hour"):
    return _scoped(f"{entity_name}-delete", limit_str, principal_key, ["DELETE"],
                   f"Too many {entity_name} delete requests. Please try again later.")


def import_rate_limiter(entity_name: str, limit_str: str = "5 per minute; 30 per hour"):
    """Spreadsheet uploads parse the whole file in-request."""
    return _scoped(f"{entity_name}-import", limit_str, principal_key, ["POST"],
                   f"Too many {entity_name} imports. Please try again later.")


# admin

def admin_action_limiter(entity_name: str = "admin action", limit_str: str = "10 per minute; 50 per hour"):
    return _scoped(f"{entity_name}-admin", limit_str, principal_key, WRITE_METHODS + ["DELETE"],
                   f"Too many {entity_name} requests. Please slow down.")
