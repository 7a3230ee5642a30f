from functools import wraps

from flask import current_app, g, request
from flask_smorest import abort

from ..constants.service_code import AUTHENTICATION_MESSAGES, SYSTEM_USERS
from ..extensions.db import db, redis_connection
from ..services.auth_service import AuthError, AuthService
from ..services.profile_resolver import ProfileResolver
from ..utils.logger import Log


def get_auth_service():
    return AuthService.from_app(current_app, db.get_database(), redis_connection.connection)


def get_profile_resolver():
    # a disabled principal loses every token it holds
    return ProfileResolver(db.get_database(), on_sign_out=get_auth_service().revoke_all)


def token_required(f):
    """Decode the bearer token and put the resolved profile on g.current_user."""
    @wraps(f)
    def decorated(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header or not auth_header.startswith("Bearer "):
            abort(401, message=AUTHENTICATION_MESSAGES["AUTHENTICATION_REQUIRED"])

        token = auth_header.split()[1]
        log_tag = "[auth_decorator.py][token_required]"

        try:
            payload = get_auth_service().decode_token(token)
        except AuthError as e:
            Log.info(f"{log_tag} rejected token: {e.message}")
            abort(401, message=e.message)

        profile = get_profile_resolver().resolve(payload.get("user_id"))
        if profile is None:
            abort(403, message=AUTHENTICATION_MESSAGES["ACCOUNT_DISABLED"])

        g.current_user = profile
        g.token_payload = payload
        return f(*args, **kwargs)

    return decorated


def admin_required(f):
    """Use below token_required."""
    @wraps(f)
    def decorated(*args, **kwargs):
        user = g.get("current_user") or {}
        if user.get("role") != SYSTEM_USERS["ADMIN"]:
            abort(403, message=AUTHENTICATION_MESSAGES["ADMIN_ONLY"])
        return f(*args, **kwargs)

    return decorated


def business_required(f):
    """Use below token_required."""
    @wraps(f)
    def decorated(*args, **kwargs):
        user = g.get("current_user") or {}
        if user.get("role") != SYSTEM_USERS["BUSINESS"]:
            abort(403, message="Only business accounts can access this resource")
        return f(*args, **kwargs)

    return decorated
