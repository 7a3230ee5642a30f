from flask import g, request
from flask.views import MethodView
from flask_smorest import Blueprint

from ..constants.service_code import SYSTEM_USERS
from ..decorators.auth_decorator import get_auth_service, token_required
from ..schemas.auth_schema import (
    AdminSignUpSchema,
    ChangePasswordSchema,
    LoginSchema,
    SignUpSchema,
)
from ..utils.helpers import make_log_tag
from ..utils.json_response import prepared_response
from ..utils.logger import Log
from ..utils.rate_limits import (
    login_ip_limiter,
    login_user_limiter,
    logout_rate_limiter,
    register_rate_limiter,
)

blp_auth = Blueprint("Auth", __name__, description="Sign up, sign in and sessions")


@blp_auth.route("/auth/signup", methods=["POST"])
class SignUpResource(MethodView):

    @register_rate_limiter("signup")
    @blp_auth.arguments(SignUpSchema)
    @blp_auth.response(201)
    @blp_auth.doc(summary="Register a business owner account")
    def post(self, data):
        log_tag = make_log_tag("auth_resource.py", "SignUpResource", "post", request.remote_addr, None, None, None)
        result = get_auth_service().sign_up(data["email"], data["password"], data["business_name"])
        Log.info(f"{log_tag} account created for {result['user']['_id']}")
        return prepared_response(True, "CREATED", "Account created successfully.", data=result)


@blp_auth.route("/auth/admin/signup", methods=["POST"])
class AdminSignUpResource(MethodView):

    @register_rate_limiter("admin-signup")
    @blp_auth.arguments(AdminSignUpSchema)
    @blp_auth.response(201)
    @blp_auth.doc(summary="Register an administrator (requires the admin sign-up key)")
    def post(self, data):
        log_tag = make_log_tag("auth_resource.py", "AdminSignUpResource", "post", request.remote_addr, None, None, None)
        result = get_auth_service().admin_sign_up(data["email"], data["password"], data["signup_key"])
        Log.info(f"{log_tag} admin account created for {result['user']['_id']}")
        return prepared_response(True, "CREATED", "Administrator account created successfully.", data=result)


@blp_auth.route("/auth/login", methods=["POST"])
class LoginResource(MethodView):

    @login_ip_limiter("login")
    @login_user_limiter("login")
    @blp_auth.arguments(LoginSchema)
    @blp_auth.response(200)
    @blp_auth.doc(summary="Sign in with email and password")
    def post(self, data):
        log_tag = make_log_tag("auth_resource.py", "LoginResource", "post", request.remote_addr, None, None, None)
        result = get_auth_service().sign_in(data["email"], data["password"])
        Log.info(f"{log_tag} signed in {result['user']['_id']}")
        return prepared_response(True, "OK", "Signed in successfully.", data=result)


@blp_auth.route("/auth/admin/login", methods=["POST"])
class AdminLoginResource(MethodView):

    @login_ip_limiter("admin-login")
    @login_user_limiter("admin-login")
    @blp_auth.arguments(LoginSchema)
    @blp_auth.response(200)
    @blp_auth.doc(summary="Sign in to the admin console")
    def post(self, data):
        result = get_auth_service().sign_in(data["email"], data["password"], require_role=SYSTEM_USERS["ADMIN"])
        return prepared_response(True, "OK", "Signed in successfully.", data=result)


@blp_auth.route("/auth/logout", methods=["POST"])
class LogoutResource(MethodView):

    @token_required
    @logout_rate_limiter("logout")
    @blp_auth.response(200)
    @blp_auth.doc(summary="Revoke the current token", security=[{"Bearer": []}])
    def post(self):
        get_auth_service().sign_out(g.token_payload)
        return prepared_response(True, "OK", "Signed out successfully.")


@blp_auth.route("/auth/password", methods=["POST"])
class ChangePasswordResource(MethodView):

    @token_required
    @login_ip_limiter("password-change")
    @blp_auth.arguments(ChangePasswordSchema)
    @blp_auth.response(200)
    @blp_auth.doc(summary="Change password after re-entering the current one", security=[{"Bearer": []}])
    def post(self, data):
        user = g.current_user
        get_auth_service().change_password(user["uid"], data["current_password"], data["new_password"])
        Log.info(f"[auth_resource.py][ChangePasswordResource][post][user:{user['uid']}] password changed")
        return prepared_response(True, "OK", "Password changed successfully.")
