from io import BytesIO

from flask import request, send_file
from flask.views import MethodView
from flask_smorest import Blueprint
from pymongo.errors import PyMongoError

from ..decorators.auth_decorator import business_required, token_required
from ..models.product_model import ProductModel
from ..schemas.common import ExportQuerySchema
from ..schemas.product_schema import ProductCreateSchema, ProductUpdateSchema
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

blp_product = Blueprint("Product", __name__, description="Product Catalog")


@blp_product.route("/products", methods=["GET", "POST"])
class ProductListResource(MethodView):

    @token_required
    @business_required
    @crud_read_limiter("product")
    @blp_product.response(200)
    @blp_product.doc(summary="List products", security=[{"Bearer": []}])
    def get(self):
        log_tag = request_log_tag("product_resource.py", "ProductListResource", "get")
        try:
            products = tenant_registry(ProductModel).list()
        except PyMongoError as e:
            Log.error(f"{log_tag} PyMongoError while listing products: {e}")
            return prepared_response(False, "INTERNAL_SERVER_ERROR", "Could not load products.", errors=str(e))
        return prepared_response(True, "OK", "Products retrieved successfully.", data=products)

    @token_required
    @business_required
    @crud_write_limiter("product")
    @blp_product.arguments(ProductCreateSchema)
    @blp_product.response(201)
    @blp_product.doc(summary="Create a product (code must be unique)", security=[{"Bearer": []}])
    def post(self, data):
        log_tag = request_log_tag("product_resource.py", "ProductListResource", "post")
        products = tenant_registry(ProductModel)
        capability_enforcer().require_add("product", products.count())
        product = products.create(data)
        Log.info(f"{log_tag} product {product['_id']} created")
        return prepared_response(True, "CREATED", "Product created successfully.", data=product)


@blp_product.route("/products/<string:product_id>", methods=["GET", "PATCH", "DELETE"])
class ProductResource(MethodView):

    @token_required
    @business_required
    @crud_read_limiter("product")
    @blp_product.response(200)
    def get(self, product_id):
        product = tenant_registry(ProductModel).get_by_id(product_id)
        if not product:
            return prepared_response(False, "NOT_FOUND", "Product not found.")
        return prepared_response(True, "OK", "Product retrieved successfully.", data=product)

    @token_required
    @business_required
    @crud_write_limiter("product")
    @blp_product.arguments(ProductUpdateSchema)
    @blp_product.response(200)
    def patch(self, data, product_id):
        log_tag = request_log_tag("product_resource.py", "ProductResource", "patch", product_id=product_id)
        products = tenant_registry(ProductModel)
        if not products.update(product_id, **data):
            return prepared_response(False, "NOT_FOUND", "Product not found.")
        Log.info(f"{log_tag} product updated: {sorted(data.keys())}")
        return prepared_response(True, "OK", "Product updated successfully.", data=products.get_by_id(product_id))

    @token_required
    @business_required
    @crud_delete_limiter("product")
    @blp_product.response(200)
    def delete(self, product_id):
        log_tag = request_log_tag("product_resource.py", "ProductResource", "delete", product_id=product_id)
        if not tenant_registry(ProductModel).delete(product_id):
            return prepared_response(False, "NOT_FOUND", "Product not found.")
        Log.info(f"{log_tag} product deleted")
        return prepared_response(True, "OK", "Product deleted successfully.")


@blp_product.route("/products/stream", methods=["GET"])
class ProductStreamResource(MethodView):

    @token_required
    @business_required
    def get(self):
        products = tenant_registry(ProductModel)
        return sse_response(products.subscribe, request_log_tag("product_resource.py", "ProductStreamResource", "get"))


@blp_product.route("/products/export", methods=["GET"])
class ProductExportResource(MethodView):

    @token_required
    @business_required
    @crud_read_limiter("product-export")
    @blp_product.arguments(ExportQuerySchema, location="query")
    def get(self, data):
        capability_enforcer().require_export_import()
        fmt = data["format"]
        content = export_service.export_products(tenant_registry(ProductModel).list(), fmt)
        return send_file(
            BytesIO(content),
            mimetype=mimetype_for(fmt),
            as_attachment=True,
            download_name=f"Products.{fmt}",
        )


@blp_product.route("/products/import", methods=["POST"])
class ProductImportResource(MethodView):

    @token_required
    @business_required
    @import_rate_limiter("product")
    @blp_product.response(200)
    @blp_product.doc(summary="Import products from an xlsx or csv upload (field: file)", security=[{"Bearer": []}])
    def post(self):
        log_tag = request_log_tag("product_resource.py", "ProductImportResource", "post")
        capability_enforcer().require_export_import()

        upload = request.files.get("file")
        if not upload:
            return prepared_response(False, "BAD_REQUEST", "A spreadsheet file is required.")

        rows = read_rows(upload)
        if not rows:
            return prepared_response(False, "BAD_REQUEST", "The selected file is empty.")

        result = import_service.import_products(tenant_registry(ProductModel), rows)
        Log.info(f"{log_tag} import finished: {result['success_count']} ok, {result['error_count']} failed")
        return prepared_response(
            True,
            "OK",
            f"Import complete! Added/Updated: {result['success_count']}, Failed/Skipped: {result['error_count']}",
            data=result,
        )
