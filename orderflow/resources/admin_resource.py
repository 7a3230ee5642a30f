from flask import g
from flask.views import MethodView
from flask_smorest import Blueprint
from pymongo.errors import PyMongoError

from ..decorators.auth_decorator import admin_required, get_auth_service, token_required
from ..extensions.db import db
from ..schemas.plan_schema import (
    ActivityQuerySchema,
    AssignPlanSchema,
    PlanCreateSchema,
    PlanUpdateSchema,
    StatsQuerySchema,
)
from ..services.admin_service import AdminService
from ..utils.json_response import prepared_response
from ..utils.logger import Log
from ..utils.rate_limits import admin_action_limiter, crud_read_limiter
from ..utils.request_context import request_log_tag

blp_admin = Blueprint("Admin", __name__, description="Super-admin oversight")


def _admin_service():
    return AdminService(db.get_database(), g.current_user, on_disable=get_auth_service().revoke_all)


@blp_admin.route("/admin/businesses", methods=["GET"])
class AdminBusinessListResource(MethodView):

    @token_required
    @admin_required
    @crud_read_limiter("admin-businesses")
    @blp_admin.response(200)
    @blp_admin.doc(summary="All business accounts with their business records", security=[{"Bearer": []}])
    def get(self):
        log_tag = request_log_tag("admin_resource.py", "AdminBusinessListResource", "get")
        try:
            businesses = _admin_service().list_businesses()
        except PyMongoError as e:
            Log.error(f"{log_tag} PyMongoError while listing businesses: {e}")
            return prepared_response(False, "INTERNAL_SERVER_ERROR", "Could not load businesses.", errors=str(e))
        return prepared_response(True, "OK", "Businesses retrieved successfully.", data=businesses)


@blp_admin.route("/admin/businesses/<string:uid>/status", methods=["POST"])
class AdminToggleStatusResource(MethodView):

    @token_required
    @admin_required
    @admin_action_limiter("toggle-access")
    @blp_admin.response(200)
    @blp_admin.doc(summary="Enable or disable a business account", security=[{"Bearer": []}])
    def post(self, uid):
        account = _admin_service().toggle_status(uid)
        if not account:
            return prepared_response(False, "NOT_FOUND", "Business account not found.")
        return prepared_response(True, "OK", f"Account {account['status']}.", data=account)


@blp_admin.route("/admin/businesses/<string:uid>/order-creation", methods=["POST"])
class AdminToggleOrderCreationResource(MethodView):

    @token_required
    @admin_required
    @admin_action_limiter("toggle-order-creation")
    @blp_admin.response(200)
    @blp_admin.doc(summary="Allow or block order creation for a business", security=[{"Bearer": []}])
    def post(self, uid):
        account = _admin_service().toggle_order_creation(uid)
        if not account:
            return prepared_response(False, "NOT_FOUND", "Business account not found.")
        state = "enabled" if account.get("can_create_orders") else "disabled"
        return prepared_response(True, "OK", f"Order creation {state}.", data=account)


@blp_admin.route("/admin/businesses/<string:uid>/plan", methods=["POST"])
class AdminAssignPlanResource(MethodView):

    @token_required
    @admin_required
    @admin_action_limiter("plan-assign")
    @blp_admin.arguments(AssignPlanSchema)
    @blp_admin.response(200)
    @blp_admin.doc(summary="Copy a plan onto a business", security=[{"Bearer": []}])
    def post(self, data, uid):
        snapshot = _admin_service().assign_plan(uid, data["plan_id"])
        if snapshot is None:
            return prepared_response(False, "NOT_FOUND", "Business or plan not found.")
        return prepared_response(True, "OK", "Plan assigned successfully.", data=snapshot)


@blp_admin.route("/admin/businesses/<string:uid>/stats", methods=["GET"])
class AdminTenantStatsResource(MethodView):

    @token_required
    @admin_required
    @crud_read_limiter("admin-stats")
    @blp_admin.arguments(StatsQuerySchema, location="query")
    @blp_admin.response(200)
    @blp_admin.doc(summary="Order counts and amounts by status for one business", security=[{"Bearer": []}])
    def get(self, query, uid):
        window = None if query["window"] == "all" else query["window"]
        stats = _admin_service().tenant_stats(uid, window)
        if stats is None:
            return prepared_response(False, "NOT_FOUND", "Business account not found.")
        return prepared_response(True, "OK", "Statistics retrieved successfully.", data=stats)


@blp_admin.route("/admin/plans", methods=["GET", "POST"])
class AdminPlanListResource(MethodView):

    @token_required
    @admin_required
    @crud_read_limiter("admin-plans")
    @blp_admin.response(200)
    def get(self):
        return prepared_response(True, "OK", "Plans retrieved successfully.", data=_admin_service().list_plans())

    @token_required
    @admin_required
    @admin_action_limiter("plan-create")
    @blp_admin.arguments(PlanCreateSchema)
    @blp_admin.response(201)
    def post(self, data):
        plan = _admin_service().create_plan(data["name"], data["price"], data["capabilities"], data.get("currency"))
        return prepared_response(True, "CREATED", "Plan created successfully.", data=plan)


@blp_admin.route("/admin/plans/<string:plan_id>", methods=["PATCH"])
class AdminPlanResource(MethodView):

    @token_required
    @admin_required
    @admin_action_limiter("plan-update")
    @blp_admin.arguments(PlanUpdateSchema)
    @blp_admin.response(200)
    @blp_admin.doc(
        summary="Edit a plan template",
        description="Businesses already on the plan keep the values they were assigned.",
        security=[{"Bearer": []}],
    )
    def patch(self, data, plan_id):
        plan = _admin_service().update_plan(plan_id, data)
        if plan is None:
            return prepared_response(False, "NOT_FOUND", "Plan not found.")
        return prepared_response(True, "OK", "Plan updated successfully.", data=plan)


@blp_admin.route("/admin/plans/seed", methods=["POST"])
class AdminSeedPlansResource(MethodView):

    @token_required
    @admin_required
    @admin_action_limiter("plan-seed")
    @blp_admin.response(200)
    @blp_admin.doc(summary="Create the default Lite/Silver/Gold/Elite plans if missing", security=[{"Bearer": []}])
    def post(self):
        created = _admin_service().seed_default_plans()
        return prepared_response(True, "OK", f"{len(created)} plan(s) created.", data=created)


@blp_admin.route("/admin/activity", methods=["GET"])
class AdminActivityResource(MethodView):

    @token_required
    @admin_required
    @crud_read_limiter("admin-activity")
    @blp_admin.arguments(ActivityQuerySchema, location="query")
    @blp_admin.response(200)
    def get(self, query):
        return prepared_response(
            True,
            "OK",
            "Activity retrieved successfully.",
            data=_admin_service().recent_activity(query["limit"]),
        )
