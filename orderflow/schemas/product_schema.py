from marshmallow import Schema, fields, validate


class ProductCreateSchema(Schema):
    code = fields.Str(required=False, allow_none=True, validate=validate.Length(max=50))
    name = fields.Str(
        required=True,
        validate=validate.Length(min=1, max=150),
        error_messages={"required": "Product name is required"}
    )
    price = fields.Float(
        required=True,
        validate=validate.Range(min=0),
        error_messages={"required": "Price is required", "invalid": "Price must be a number"}
    )
    details = fields.Str(required=False, allow_none=True)


class ProductUpdateSchema(Schema):
    code = fields.Str(required=False, allow_none=True, validate=validate.Length(max=50))
    name = fields.Str(required=False, validate=validate.Length(min=1, max=150))
    price = fields.Float(required=False, validate=validate.Range(min=0))
    details = fields.Str(required=False, allow_none=True)
