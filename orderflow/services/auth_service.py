# orderflow/services/auth_service.py

import time
import uuid
import jwt

from ..constants.service_code import (
    AUTHENTICATION_MESSAGES,
    ACCOUNT_STATUS,
    SYSTEM_USERS,
)
from ..models.account_model import AccountModel
from ..utils.logger import Log

MIN_PASSWORD_LENGTH = 6


class AuthError(Exception):
    def __init__(self, message, status_code="UNAUTHORIZED"):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthService:
    """
    Email/password identity: bcrypt hashes in `users`, HS256 bearer tokens,
    and a Redis blocklist for signed-out tokens.

    Two kinds of revocation are kept in Redis:
      blocked_{jti}        a single signed-out token
      revoked_before_{uid} every token of the user issued before that time
    """

    def __init__(self, database, redis, secret_key, expires_minutes=60 * 24, admin_signup_key=None):
        self.accounts = AccountModel(database)
        self.redis = redis
        self.secret_key = secret_key
        self.expires_seconds = int(expires_minutes) * 60
        self.admin_signup_key = admin_signup_key

    @classmethod
    def from_app(cls, app, database, redis):
        return cls(
            database,
            redis,
            app.config["SECRET_KEY"],
            app.config.get("JWT_EXPIRES_MINUTES", 60 * 24),
            app.config.get("ADMIN_SIGNUP_KEY"),
        )

    # ---------------- Tokens ----------------
    def issue_token(self, account):
        now = int(time.time())
        payload = {
            "user_id": account["_id"],
            "email": account["email"],
            "role": account["role"],
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + self.expires_seconds,
        }
        return jwt.encode(payload, self.secret_key, algorithm="HS256")

    def decode_token(self, token):
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=["HS256"])
        except jwt.ExpiredSignatureError:
            raise AuthError(AUTHENTICATION_MESSAGES["TOKEN_EXPIRED"])
        except jwt.InvalidTokenError:
            raise AuthError(AUTHENTICATION_MESSAGES["INVALID_TOKEN"])

        if self.redis.get(f"blocked_{payload.get('jti')}") is not None:
            raise AuthError(AUTHENTICATION_MESSAGES["TOKEN_REVOKED"])

        revoked_before = self.redis.get(f"revoked_before_{payload.get('user_id')}")
        if revoked_before is not None and int(payload.get("iat", 0)) < int(revoked_before):
            raise AuthError(AUTHENTICATION_MESSAGES["TOKEN_REVOKED"])

        return payload

    def _remaining_ttl(self, payload):
        return max(int(payload.get("exp", 0)) - int(time.time()), 1)

    # ---------------- Sign up / in / out ----------------
    def _validate_password(self, password):
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise AuthError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
                "BAD_REQUEST",
            )

    def sign_up(self, email, password, business_name):
        """Register a business principal; order creation stays off until an admin enables it."""
        self._validate_password(password)
        if self.accounts.get_by_email(email):
            raise AuthError(AUTHENTICATION_MESSAGES["EMAIL_IN_USE"], "CONFLICT")

        account = self.accounts.create(email, password, business_name, SYSTEM_USERS["BUSINESS"])
        Log.info(f"[auth_service.py][AuthService][sign_up] business account {account['_id']} created")
        return {"access_token": self.issue_token(account), "user": AccountModel.public(account)}

    def admin_sign_up(self, email, password, signup_key):
        if not self.admin_signup_key or signup_key != self.admin_signup_key:
            raise AuthError(AUTHENTICATION_MESSAGES["ADMIN_ONLY"], "FORBIDDEN")
        self._validate_password(password)
        if self.accounts.get_by_email(email):
            raise AuthError(AUTHENTICATION_MESSAGES["EMAIL_IN_USE"], "CONFLICT")

        account = self.accounts.create(email, password, None, SYSTEM_USERS["ADMIN"])
        Log.info(f"[auth_service.py][AuthService][admin_sign_up] admin account {account['_id']} created")
        return {"access_token": self.issue_token(account), "user": AccountModel.public(account)}

    def sign_in(self, email, password, require_role=None):
        account = self.accounts.get_by_email(email)
        if not account or not AccountModel.check_password(account, password):
            raise AuthError(AUTHENTICATION_MESSAGES["INVALID_CREDENTIALS"])

        if account.get("status") == ACCOUNT_STATUS["DISABLED"]:
            raise AuthError(AUTHENTICATION_MESSAGES["ACCOUNT_DISABLED"], "FORBIDDEN")

        if require_role and account.get("role") != require_role:
            raise AuthError(AUTHENTICATION_MESSAGES["ADMIN_ONLY"], "FORBIDDEN")

        return {"access_token": self.issue_token(account), "user": AccountModel.public(account)}

    def sign_out(self, payload):
        self.redis.setex(f"blocked_{payload['jti']}", self._remaining_ttl(payload), "1")

    def revoke_all(self, uid):
        """Invalidate every token the user currently holds."""
        self.redis.setex(f"revoked_before_{uid}", self.expires_seconds, str(int(time.time())))
        Log.info(f"[auth_service.py][AuthService][revoke_all] sessions revoked for {uid}")

    def change_password(self, uid, current_password, new_password):
        """Re-authenticate with the current password, then store the new one."""
        account = self.accounts.get_by_id(uid)
        if not account or not AccountModel.check_password(account, current_password):
            raise AuthError(AUTHENTICATION_MESSAGES["INVALID_CREDENTIALS"])
        self._validate_password(new_password)
        return self.accounts.set_password(uid, new_password)
