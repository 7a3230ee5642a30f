from marshmallow import Schema, fields, validate

from ..constants.service_code import ORDER_SOURCES, ORDER_STATUS, TERMINAL_ORDER_STATUSES
from .common import NaiveDateTime


class LineItemSchema(Schema):
    product_id = fields.Str(required=False, allow_none=True)
    name = fields.Str(
        required=True,
        validate=validate.Length(min=1, max=150),
        error_messages={"required": "Product name is required"}
    )
    price = fields.Float(required=True, validate=validate.Range(min=0))
    quantity = fields.Int(load_default=1, validate=validate.Range(min=1))
    code = fields.Str(required=False, allow_none=True)
    description = fields.Str(required=False, allow_none=True)


class OrderCreateSchema(Schema):
    phone = fields.Str(
        required=True,
        validate=validate.Length(min=3, max=30),
        error_messages={"required": "Customer phone is required"}
    )
    customer_name = fields.Str(required=False, allow_none=True, validate=validate.Length(max=100))
    customer_email = fields.Email(required=False, allow_none=True)
    products = fields.List(
        fields.Nested(LineItemSchema),
        required=True,
        validate=validate.Length(min=1),
        error_messages={"required": "At least one product is required"}
    )
    delivery_charge = fields.Float(load_default=0, validate=validate.Range(min=0))
    # a client-sent total is accepted but never used
    total_amount = fields.Float(required=False, load_only=True)
    order_date = NaiveDateTime(required=False)
    has_order_time = fields.Bool(load_default=False)
    delivery_date = NaiveDateTime(required=False)
    has_delivery_time = fields.Bool(load_default=False)
    source = fields.Str(load_default="phone", validate=validate.OneOf(ORDER_SOURCES))
    notes = fields.Str(required=False, allow_none=True)
    address = fields.Str(required=False, allow_none=True, validate=validate.Length(max=255))


class OrderUpdateSchema(Schema):
    products = fields.List(fields.Nested(LineItemSchema), required=False, validate=validate.Length(min=1))
    delivery_charge = fields.Float(required=False, validate=validate.Range(min=0))
    order_date = NaiveDateTime(required=False)
    has_order_time = fields.Bool(required=False)
    delivery_date = NaiveDateTime(required=False)
    has_delivery_time = fields.Bool(required=False)
    source = fields.Str(required=False, validate=validate.OneOf(ORDER_SOURCES))
    notes = fields.Str(required=False, allow_none=True)
    address = fields.Str(required=False, allow_none=True)
    # final statuses go through the feedback flow
    status = fields.Str(required=False, validate=validate.OneOf([ORDER_STATUS["PROCESSING"]]))
    invoice_number = fields.Str(required=False, validate=validate.Length(min=1))


class OrderStatusSchema(Schema):
    status = fields.Str(
        required=True,
        validate=validate.OneOf([ORDER_STATUS["PROCESSING"]]),
        error_messages={"required": "Status is required"}
    )


class FinalizeOrderSchema(Schema):
    status = fields.Str(required=True, validate=validate.OneOf(sorted(TERMINAL_ORDER_STATUSES)))
    rating = fields.Int(
        required=True,
        validate=validate.Range(min=1, max=5),
        error_messages={"required": "Please rate the experience before closing the order"}
    )
    comment = fields.Str(required=False, allow_none=True)


class OrderListQuerySchema(Schema):
    status = fields.Str(required=False)  # comma separated
    date_range = fields.Str(required=False, validate=validate.OneOf(["all", "today", "week", "month", "custom"]))
    start_date = NaiveDateTime(required=False)
    end_date = NaiveDateTime(required=False)
    search = fields.Str(required=False)
    sort = fields.Str(load_default="desc", validate=validate.OneOf(["asc", "desc"]))


class ExperienceUpdateSchema(Schema):
    rating = fields.Int(required=False, validate=validate.Range(min=1, max=5))
    comment = fields.Str(required=False, allow_none=True)
