import time
from io import BytesIO

from flask import current_app, request, send_file
from flask.views import MethodView
from flask_smorest import Blueprint
from pymongo.errors import PyMongoError

from ..decorators.auth_decorator import business_required, token_required
from ..extensions.db import db
from ..models.customer_model import CustomerModel
from ..models.experience_model import ExperienceModel
from ..models.order_model import OrderModel
from ..schemas.common import ExportQuerySchema
from ..schemas.order_schema import (
    ExperienceUpdateSchema,
    FinalizeOrderSchema,
    OrderCreateSchema,
    OrderListQuerySchema,
    OrderStatusSchema,
    OrderUpdateSchema,
)
from ..services import export_service, import_service
from ..services.order_service import OrderService
from ..utils.invoice.generate_invoice import generate_invoice_pdf_bytes, invoice_label
from ..utils.json_response import prepared_response
from ..utils.logger import Log
from ..utils.rate_limits import (
    crud_delete_limiter,
    crud_read_limiter,
    crud_write_limiter,
    import_rate_limiter,
)
from ..utils.request_context import (
    capability_enforcer,
    current_profile,
    request_log_tag,
    tenant_registry,
)
from ..utils.spreadsheet import mimetype_for, read_rows
from ..utils.streaming import sse_response

blp_order = Blueprint("Order", __name__, description="Order Ledger")


@blp_order.route("/orders", methods=["GET", "POST"])
class OrderListResource(MethodView):

    @token_required
    @business_required
    @crud_read_limiter("order")
    @blp_order.arguments(OrderListQuerySchema, location="query")
    @blp_order.response(200)
    @blp_order.doc(
        summary="List orders",
        description="Filter by comma separated statuses, a delivery-date window and free text; sort by order date.",
        security=[{"Bearer": []}],
    )
    def get(self, query):
        log_tag = request_log_tag("order_resource.py", "OrderListResource", "get")
        try:
            start_time = time.time()
            orders = tenant_registry(OrderModel).get_all()
            customers = tenant_registry(CustomerModel).get_all()
        except PyMongoError as e:
            Log.error(f"{log_tag} PyMongoError while listing orders: {e}")
            return prepared_response(False, "INTERNAL_SERVER_ERROR", "Could not load orders.", errors=str(e))

        statuses = [s.strip() for s in (query.get("status") or "").split(",") if s.strip()]
        filtered = OrderModel.filter_orders(
            orders,
            statuses=statuses or None,
            date_range=query.get("date_range"),
            search=query.get("search"),
            sort=query.get("sort"),
            customers=customers,
            start=query.get("start_date"),
            end=query.get("end_date"),
        )
        Log.info(f"{log_tag} {len(filtered)} of {len(orders)} orders in {time.time() - start_time:.2f} seconds")
        return prepared_response(True, "OK", "Orders retrieved successfully.", data=filtered)

    @token_required
    @business_required
    @crud_write_limiter("order")
    @blp_order.arguments(OrderCreateSchema)
    @blp_order.response(201)
    @blp_order.doc(
        summary="Take a new order",
        description="The customer is found by phone number or created. The total is computed from the items.",
        security=[{"Bearer": []}],
    )
    def post(self, data):
        log_tag = request_log_tag("order_resource.py", "OrderListResource", "post")
        service = OrderService.for_profile(db.get_database(), current_profile())
        capability_enforcer().require_add("order", service.orders.count())

        data.pop("total_amount", None)
        phone = data.pop("phone")
        customer_name = data.pop("customer_name", None)
        order, customer = service.place_order(phone, customer_name, **data)
        Log.info(f"{log_tag} order {order['_id']} created, total {order['total_amount']}")
        return prepared_response(
            True,
            "CREATED",
            "New order added successfully.",
            data={"order": order, "customer": customer},
        )


@blp_order.route("/orders/<string:order_id>", methods=["GET", "PATCH", "DELETE"])
class OrderResource(MethodView):

    @token_required
    @business_required
    @crud_read_limiter("order")
    @blp_order.response(200)
    def get(self, order_id):
        order = tenant_registry(OrderModel).get_by_id(order_id)
        if not order:
            return prepared_response(False, "NOT_FOUND", "Order not found.")
        customer = tenant_registry(CustomerModel).get_by_id(order.get("customer_id"))
        experience = tenant_registry(ExperienceModel).get_by_order_id(order_id)
        return prepared_response(
            True,
            "OK",
            "Order retrieved successfully.",
            data={"order": order, "customer": customer, "experience": experience},
        )

    @token_required
    @business_required
    @crud_write_limiter("order")
    @blp_order.arguments(OrderUpdateSchema)
    @blp_order.response(200)
    @blp_order.doc(summary="Edit an order; the total is recomputed", security=[{"Bearer": []}])
    def patch(self, data, order_id):
        log_tag = request_log_tag("order_resource.py", "OrderResource", "patch", order_id=order_id)
        orders = tenant_registry(OrderModel)
        if not orders.update(order_id, **data):
            return prepared_response(False, "NOT_FOUND", "Order not found.")
        Log.info(f"{log_tag} order updated: {sorted(data.keys())}")
        return prepared_response(True, "OK", "Order updated successfully.", data=orders.get_by_id(order_id))

    @token_required
    @business_required
    @crud_delete_limiter("order")
    @blp_order.response(200)
    def delete(self, order_id):
        log_tag = request_log_tag("order_resource.py", "OrderResource", "delete", order_id=order_id)
        if not tenant_registry(OrderModel).delete(order_id):
            return prepared_response(False, "NOT_FOUND", "Order not found.")
        Log.info(f"{log_tag} order deleted")
        return prepared_response(True, "OK", "Order deleted successfully.")


@blp_order.route("/orders/<string:order_id>/status", methods=["PATCH"])
class OrderStatusResource(MethodView):

    @token_required
    @business_required
    @crud_write_limiter("order-status")
    @blp_order.arguments(OrderStatusSchema)
    @blp_order.response(200)
    @blp_order.doc(
        summary="Start processing an order",
        description="Completing or cancelling requires feedback; use /orders/<id>/finalize.",
        security=[{"Bearer": []}],
    )
    def patch(self, data, order_id):
        log_tag = request_log_tag("order_resource.py", "OrderStatusResource", "patch", order_id=order_id)
        orders = tenant_registry(OrderModel)
        if not orders.update_status(order_id, data["status"]):
            return prepared_response(False, "NOT_FOUND", "Order not found.")
        Log.info(f"{log_tag} status -> {data['status']}")
        return prepared_response(True, "OK", "Order status updated.", data=orders.get_by_id(order_id))


@blp_order.route("/orders/<string:order_id>/finalize", methods=["POST"])
class OrderFinalizeResource(MethodView):

    @token_required
    @business_required
    @crud_write_limiter("order-status")
    @blp_order.arguments(FinalizeOrderSchema)
    @blp_order.response(200)
    @blp_order.doc(
        summary="Complete or cancel an order with customer feedback",
        description="The feedback is stored first, then the status; completed orders get an invoice number.",
        security=[{"Bearer": []}],
    )
    def post(self, data, order_id):
        log_tag = request_log_tag("order_resource.py", "OrderFinalizeResource", "post", order_id=order_id)
        service = OrderService.for_profile(db.get_database(), current_profile())
        result = service.finalize_with_feedback(order_id, data["status"], data["rating"], data.get("comment"))
        if result is None:
            return prepared_response(False, "NOT_FOUND", "Order not found.")
        Log.info(f"{log_tag} finalized as {data['status']} with rating {data['rating']}")
        return prepared_response(True, "OK", "Feedback recorded successfully.", data=result)


@blp_order.route("/orders/<string:order_id>/experience", methods=["GET", "PATCH"])
class OrderExperienceResource(MethodView):

    @token_required
    @business_required
    @crud_read_limiter("experience")
    @blp_order.response(200)
    def get(self, order_id):
        experience = tenant_registry(ExperienceModel).get_by_order_id(order_id)
        if not experience:
            return prepared_response(False, "NOT_FOUND", "No feedback for this order.")
        return prepared_response(True, "OK", "Feedback retrieved successfully.", data=experience)

    @token_required
    @business_required
    @crud_write_limiter("experience")
    @blp_order.arguments(ExperienceUpdateSchema)
    @blp_order.response(200)
    @blp_order.doc(summary="Edit the feedback of an order", security=[{"Bearer": []}])
    def patch(self, data, order_id):
        experiences = tenant_registry(ExperienceModel)
        experience = experiences.get_by_order_id(order_id)
        if not experience:
            return prepared_response(False, "NOT_FOUND", "No feedback for this order.")
        experiences.update(experience["_id"], **data)
        return prepared_response(True, "OK", "Feedback updated successfully.", data=experiences.get_by_id(experience["_id"]))


@blp_order.route("/orders/<string:order_id>/invoice", methods=["GET"])
class OrderInvoiceResource(MethodView):

    @token_required
    @business_required
    @crud_read_limiter("invoice")
    @blp_order.doc(
        summary="Download the order invoice as PDF",
        description="Invoice numbers are assigned when an order is completed; earlier invoices carry a draft reference.",
        security=[{"Bearer": []}],
    )
    def get(self, order_id):
        log_tag = request_log_tag("order_resource.py", "OrderInvoiceResource", "get", order_id=order_id)
        order = tenant_registry(OrderModel).get_by_id(order_id)
        if not order:
            return prepared_response(False, "NOT_FOUND", "Order not found.")

        customer = tenant_registry(CustomerModel).get_by_id(order.get("customer_id"))
        pdf = generate_invoice_pdf_bytes(
            order,
            customer,
            current_profile(),
            currency=current_app.config.get("INVOICE_CURRENCY", "BDT"),
        )
        Log.info(f"{log_tag} invoice {invoice_label(order)} rendered")
        return send_file(
            BytesIO(pdf),
            mimetype="application/pdf",
            as_attachment=False,
            download_name=f"invoice-{invoice_label(order)}.pdf",
        )


@blp_order.route("/orders/stream", methods=["GET"])
class OrderStreamResource(MethodView):

    @token_required
    @business_required
    def get(self):
        orders = tenant_registry(OrderModel)
        return sse_response(orders.subscribe, request_log_tag("order_resource.py", "OrderStreamResource", "get"))


@blp_order.route("/orders/export", methods=["GET"])
class OrderExportResource(MethodView):

    @token_required
    @business_required
    @crud_read_limiter("order-export")
    @blp_order.arguments(ExportQuerySchema, location="query")
    def get(self, data):
        capability_enforcer().require_export_import()
        fmt = data["format"]
        content = export_service.export_orders(
            tenant_registry(OrderModel).get_all(),
            tenant_registry(CustomerModel).get_all(),
            fmt,
        )
        return send_file(
            BytesIO(content),
            mimetype=mimetype_for(fmt),
            as_attachment=True,
            download_name=f"Orders.{fmt}",
        )


@blp_order.route("/orders/import", methods=["POST"])
class OrderImportResource(MethodView):

    @token_required
    @business_required
    @import_rate_limiter("order")
    @blp_order.response(200)
    @blp_order.doc(summary="Import orders from an xlsx or csv upload (field: file)", security=[{"Bearer": []}])
    def post(self):
        log_tag = request_log_tag("order_resource.py", "OrderImportResource", "post")
        capability_enforcer().require_export_import()

        upload = request.files.get("file")
        if not upload:
            return prepared_response(False, "BAD_REQUEST", "A spreadsheet file is required.")

        rows = read_rows(upload)
        if not rows:
            return prepared_response(False, "BAD_REQUEST", "The selected file is empty.")

        result = import_service.import_orders(tenant_registry(OrderModel), rows)
        Log.info(f"{log_tag} import finished: {result['success_count']} ok, {result['error_count']} failed")
        return prepared_response(
            True,
            "OK",
            f"Import complete! Added/Updated: {result['success_count']}, Failed/Skipped: {result['error_count']}",
            data=result,
        )


@blp_order.route("/experiences", methods=["GET"])
class ExperienceListResource(MethodView):

    @token_required
    @business_required
    @crud_read_limiter("experience")
    @blp_order.response(200)
    def get(self):
        return prepared_response(
            True,
            "OK",
            "Feedback retrieved successfully.",
            data=tenant_registry(ExperienceModel).list(),
        )
