import time

from flask import request, send_file
from flask.views import MethodView
from flask_smorest import Blueprint
from io import BytesIO
from pymongo.errors import PyMongoError

from ..decorators.auth_decorator import business_required, token_required
from ..models.customer_model import CustomerModel
from ..models.order_model import OrderModel
from ..schemas.common import ExportQuerySchema
from ..schemas.customer_schema import (
    CustomerCreateSchema,
    CustomerUpdateSchema,
    PhoneLookupQuerySchema,
)
from ..services import export_service, import_service
from ..utils.json_response import prepared_response
from ..utils.logger import Log
from ..utils.rate_limits import (
    crud_delete_limiter,
    crud_read_limiter,
    crud_write_limiter,
    import_rate_limiter,
)
from ..utils.request_context import capability_enforcer, request_log_tag, tenant_registry
from ..utils.spreadsheet import mimetype_for, read_rows
from ..utils.streaming import sse_response

blp_customer = Blueprint("Customer", __name__, description="Customer Management")


@blp_customer.route("/customers", methods=["GET", "POST"])
class CustomerListResource(MethodView):

    @token_required
    @business_required
    @crud_read_limiter("customer")
    @blp_customer.response(200)
    @blp_customer.doc(summary="List customers with order statistics", security=[{"Bearer": []}])
    def get(self):
        log_tag = request_log_tag("customer_resource.py", "CustomerListResource", "get")
        customers = tenant_registry(CustomerModel)
        try:
            start_time = time.time()
            listing = CustomerModel.with_stats(customers.list(), tenant_registry(OrderModel).get_all())
            Log.info(f"{log_tag} {len(listing)} customers in {time.time() - start_time:.2f} seconds")
        except PyMongoError as e:
            Log.error(f"{log_tag} PyMongoError while listing customers: {e}")
            return prepared_response(False, "INTERNAL_SERVER_ERROR", "Could not load customers.", errors=str(e))
        return prepared_response(True, "OK", "Customers retrieved successfully.", data=listing)

    @token_required
    @business_required
    @crud_write_limiter("customer")
    @blp_customer.arguments(CustomerCreateSchema)
    @blp_customer.response(201)
    @blp_customer.doc(
        summary="Create a customer",
        description="Returns the existing customer unchanged when the phone number is already known.",
        security=[{"Bearer": []}],
    )
    def post(self, data):
        log_tag = request_log_tag("customer_resource.py", "CustomerListResource", "post")
        customers = tenant_registry(CustomerModel)

        existing = customers.find_existing(str(data["phone"]).strip())
        if existing:
            Log.info(f"{log_tag} phone already belongs to {existing['_id']}")
            return prepared_response(True, "OK", "Customer already exists.", data=existing)

        capability_enforcer().require_add("customer", customers.count())
        customer = customers.create(data)
        Log.info(f"{log_tag} customer {customer['_id']} created")
        return prepared_response(True, "CREATED", "Customer created successfully.", data=customer)


@blp_customer.route("/customers/<string:customer_id>", methods=["GET", "PATCH", "DELETE"])
class CustomerResource(MethodView):

    @token_required
    @business_required
    @crud_read_limiter("customer")
    @blp_customer.response(200)
    @blp_customer.doc(summary="Customer with their orders", security=[{"Bearer": []}])
    def get(self, customer_id):
        customer = tenant_registry(CustomerModel).get_by_id(customer_id)
        if not customer:
            return prepared_response(False, "NOT_FOUND", "Customer not found.")
        orders = [o for o in tenant_registry(OrderModel).get_all() if o.get("customer_id") == customer_id]
        enriched = CustomerModel.with_stats([customer], orders)[0]
        return prepared_response(True, "OK", "Customer retrieved successfully.", data={**enriched, "orders": orders})

    @token_required
    @business_required
    @crud_write_limiter("customer")
    @blp_customer.arguments(CustomerUpdateSchema)
    @blp_customer.response(200)
    @blp_customer.doc(summary="Edit a customer (rating, comment, contact details)", security=[{"Bearer": []}])
    def patch(self, data, customer_id):
        log_tag = request_log_tag("customer_resource.py", "CustomerResource", "patch", customer_id=customer_id)
        customers = tenant_registry(CustomerModel)
        if not customers.update(customer_id, **data):
            return prepared_response(False, "NOT_FOUND", "Customer not found.")
        Log.info(f"{log_tag} customer updated: {sorted(data.keys())}")
        return prepared_response(True, "OK", "Customer updated successfully.", data=customers.get_by_id(customer_id))

    @token_required
    @business_required
    @crud_delete_limiter("customer")
    @blp_customer.response(200)
    @blp_customer.doc(summary="Delete a customer (orders are kept)", security=[{"Bearer": []}])
    def delete(self, customer_id):
        log_tag = request_log_tag("customer_resource.py", "CustomerResource", "delete", customer_id=customer_id)
        try:
            deleted = tenant_registry(CustomerModel).delete(customer_id)
        except PyMongoError as e:
            Log.error(f"{log_tag} PyMongoError while deleting customer: {e}")
            return prepared_response(False, "INTERNAL_SERVER_ERROR", "Could not delete customer.", errors=str(e))
        if not deleted:
            return prepared_response(False, "NOT_FOUND", "Customer not found.")
        Log.info(f"{log_tag} customer deleted")
        return prepared_response(True, "OK", "Customer deleted successfully.")


@blp_customer.route("/customers/lookup", methods=["GET"])
class CustomerLookupResource(MethodView):

    @token_required
    @business_required
    @crud_read_limiter("customer-lookup")
    @blp_customer.arguments(PhoneLookupQuerySchema, location="query")
    @blp_customer.response(200)
    @blp_customer.doc(summary="Find a customer by a typed phone number", security=[{"Bearer": []}])
    def get(self, data):
        customer = tenant_registry(CustomerModel).find_by_phone(data["phone"])
        if not customer:
            return prepared_response(False, "NOT_FOUND", "No customer with this phone number.")
        return prepared_response(True, "OK", "Customer found.", data=customer)


@blp_customer.route("/customers/stream", methods=["GET"])
class CustomerStreamResource(MethodView):

    @token_required
    @business_required
    @blp_customer.doc(summary="Live customer list (Server-Sent Events)", security=[{"Bearer": []}])
    def get(self):
        customers = tenant_registry(CustomerModel)
        return sse_response(customers.subscribe, request_log_tag("customer_resource.py", "CustomerStreamResource", "get"))


@blp_customer.route("/customers/export", methods=["GET"])
class CustomerExportResource(MethodView):

    @token_required
    @business_required
    @crud_read_limiter("customer-export")
    @blp_customer.arguments(ExportQuerySchema, location="query")
    @blp_customer.doc(summary="Download customers as xlsx or csv", security=[{"Bearer": []}])
    def get(self, data):
        capability_enforcer().require_export_import()
        fmt = data["format"]
        content = export_service.export_customers(tenant_registry(CustomerModel).list(), fmt)
        return send_file(
            BytesIO(content),
            mimetype=mimetype_for(fmt),
            as_attachment=True,
            download_name=f"Customers.{fmt}",
        )


@blp_customer.route("/customers/import", methods=["POST"])
class CustomerImportResource(MethodView):

    @token_required
    @business_required
    @import_rate_limiter("customer")
    @blp_customer.response(200)
    @blp_customer.doc(summary="Import customers from an xlsx or csv upload (field: file)", security=[{"Bearer": []}])
    def post(self):
        log_tag = request_log_tag("customer_resource.py", "CustomerImportResource", "post")
        capability_enforcer().require_export_import()

        upload = request.files.get("file")
        if not upload:
            return prepared_response(False, "BAD_REQUEST", "A spreadsheet file is required.")

        rows = read_rows(upload)
        if not rows:
            return prepared_response(False, "BAD_REQUEST", "The selected file is empty.")

        result = import_service.import_customers(tenant_registry(CustomerModel), rows)
        Log.info(f"{log_tag} import finished: {result['success_count']} ok, {result['error_count']} failed")
        return prepared_response(
            True,
            "OK",
            f"Import complete! Added/Updated: {result['success_count']}, Failed/Skipped: {result['error_count']}",
            data=result,
        )
