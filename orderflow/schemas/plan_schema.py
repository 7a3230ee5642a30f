from marshmallow import Schema, fields, validate


class CapabilitiesSchema(Schema):
    can_add_order = fields.Bool(required=False)
    can_add_customer = fields.Bool(required=False)
    can_add_products = fields.Bool(required=False)
    has_export_import_option = fields.Bool(required=False)
    max_order_number = fields.Int(required=False, validate=validate.Range(min=0))
    max_customer_number = fields.Int(required=False, validate=validate.Range(min=0))
    max_product_number = fields.Int(required=False, validate=validate.Range(min=0))


class PlanCreateSchema(Schema):
    name = fields.Str(
        required=True,
        validate=validate.Length(min=1, max=50),
        error_messages={"required": "Plan name is required"}
    )
    price = fields.Float(required=True, validate=validate.Range(min=0))
    currency = fields.Str(load_default="BDT", validate=validate.Length(equal=3))
    capabilities = fields.Nested(CapabilitiesSchema, required=True)


class PlanUpdateSchema(Schema):
    name = fields.Str(required=False, validate=validate.Length(min=1, max=50))
    price = fields.Float(required=False, validate=validate.Range(min=0))
    currency = fields.Str(required=False, validate=validate.Length(equal=3))
    capabilities = fields.Nested(CapabilitiesSchema, required=False)


class AssignPlanSchema(Schema):
    plan_id = fields.Str(required=True, error_messages={"required": "Plan is required"})


class StatsQuerySchema(Schema):
    window = fields.Str(load_default="all", validate=validate.OneOf(["all", "today", "week", "month"]))


class ActivityQuerySchema(Schema):
    limit = fields.Int(load_default=20, validate=validate.Range(min=1, max=200))
