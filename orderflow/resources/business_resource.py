from flask import g
from flask.views import MethodView
from flask_smorest import Blueprint
from pymongo.errors import PyMongoError

from ..decorators.auth_decorator import (
    business_required,
    get_profile_resolver,
    token_required,
)
from ..extensions.db import db
from ..models.customer_model import CustomerModel
from ..models.order_model import OrderModel
from ..models.plan_model import PlanModel
from ..models.product_model import ProductModel
from ..schemas.business_schema import (
    BusinessInfoUpdateSchema,
    ChangePlanSchema,
    RegisterBusinessSchema,
)
from ..services import stats_service
from ..utils.json_response import prepared_response
from ..utils.logger import Log
from ..utils.rate_limits import crud_read_limiter, crud_write_limiter
from ..utils.request_context import (
    capability_enforcer,
    current_profile,
    request_log_tag,
    tenant_registry,
)
from ..utils.streaming import sse_response

blp_business = Blueprint("Business", __name__, description="Business profile, onboarding and dashboard")


def _gates(profile):
    """Capability gates for the profile, from live counts (none before onboarding)."""
    if profile.get("onboarding_required") or not profile.get("tenant_path"):
        return capability_enforcer().gates(0, 0, 0)
    return capability_enforcer().gates(
        tenant_registry(OrderModel).count(),
        tenant_registry(CustomerModel).count(),
        tenant_registry(ProductModel).count(),
    )


@blp_business.route("/business/profile", methods=["GET", "PATCH"])
class BusinessProfileResource(MethodView):

    @token_required
    @crud_read_limiter("profile")
    @blp_business.response(200)
    @blp_business.doc(summary="Resolved profile of the signed-in principal", security=[{"Bearer": []}])
    def get(self):
        profile = current_profile()
        data = dict(profile)
        if profile.get("role") != "admin":
            data["gates"] = _gates(profile)
        return prepared_response(True, "OK", "Profile retrieved successfully.", data=data)

    @token_required
    @business_required
    @crud_write_limiter("profile")
    @blp_business.arguments(BusinessInfoUpdateSchema)
    @blp_business.response(200)
    @blp_business.doc(summary="Edit business details", security=[{"Bearer": []}])
    def patch(self, data):
        log_tag = request_log_tag("business_resource.py", "BusinessProfileResource", "patch")
        profile = get_profile_resolver().update_business_info(g.current_user["uid"], data)
        Log.info(f"{log_tag} business info updated: {sorted(data.keys())}")
        return prepared_response(True, "OK", "Business profile updated successfully.", data=profile)


@blp_business.route("/business/profile/stream", methods=["GET"])
class BusinessProfileStreamResource(MethodView):

    @token_required
    @blp_business.doc(summary="Live profile snapshots (Server-Sent Events)", security=[{"Bearer": []}])
    def get(self):
        uid = g.current_user["uid"]
        resolver = get_profile_resolver()
        return sse_response(
            lambda on_snapshot, on_error: resolver.watch(uid, on_snapshot, on_error),
            request_log_tag("business_resource.py", "BusinessProfileStreamResource", "get"),
        )


@blp_business.route("/business/register", methods=["POST"])
class RegisterBusinessResource(MethodView):

    @token_required
    @business_required
    @crud_write_limiter("business-register")
    @blp_business.arguments(RegisterBusinessSchema)
    @blp_business.response(201)
    @blp_business.doc(summary="Complete onboarding by registering the business", security=[{"Bearer": []}])
    def post(self, data):
        log_tag = request_log_tag("business_resource.py", "RegisterBusinessResource", "post")
        user = g.current_user
        if not user.get("onboarding_required"):
            return prepared_response(False, "CONFLICT", "This business is already registered.")

        business_name = data.pop("business_name")
        phone = data.pop("phone")
        profile = get_profile_resolver().register_business(user["uid"], user["email"], business_name, phone, **data)
        Log.info(f"{log_tag} business registered at {profile.get('tenant_path')}")
        return prepared_response(True, "CREATED", "Business registered successfully.", data=profile)


@blp_business.route("/business/plans", methods=["GET", "POST"])
class BusinessPlanResource(MethodView):

    @token_required
    @crud_read_limiter("plans")
    @blp_business.response(200)
    @blp_business.doc(summary="Available plans", security=[{"Bearer": []}])
    def get(self):
        return prepared_response(True, "OK", "Plans retrieved successfully.", data=PlanModel(db.get_database()).list())

    @token_required
    @business_required
    @crud_write_limiter("plan-change")
    @blp_business.arguments(ChangePlanSchema)
    @blp_business.response(200)
    @blp_business.doc(summary="Switch the business to another plan", security=[{"Bearer": []}])
    def post(self, data):
        log_tag = request_log_tag("business_resource.py", "BusinessPlanResource", "post", plan_id=data["plan_id"])
        profile = get_profile_resolver().change_plan(g.current_user["uid"], data["plan_id"])
        if profile is None:
            Log.info(f"{log_tag} plan or business not found")
            return prepared_response(False, "NOT_FOUND", "Plan not found.")
        Log.info(f"{log_tag} plan changed to {profile['business_plan']['name']}")
        return prepared_response(True, "OK", "Plan updated successfully.", data=profile)


@blp_business.route("/business/summary", methods=["GET"])
class BusinessSummaryResource(MethodView):

    @token_required
    @business_required
    @crud_read_limiter("summary")
    @blp_business.response(200)
    @blp_business.doc(summary="Dashboard figures for the business", security=[{"Bearer": []}])
    def get(self):
        log_tag = request_log_tag("business_resource.py", "BusinessSummaryResource", "get")
        try:
            orders = tenant_registry(OrderModel).get_all()
        except PyMongoError as e:
            Log.error(f"{log_tag} failed to load orders: {e}")
            return prepared_response(False, "INTERNAL_SERVER_ERROR", "Could not load orders.", errors=str(e))
        return prepared_response(True, "OK", "Summary retrieved successfully.", data=stats_service.business_summary(orders))
