from marshmallow import Schema, fields, validate


# Customer schema
class CustomerCreateSchema(Schema):
    phone = fields.Str(
        required=True,
        validate=validate.Length(min=3, max=30),
        error_messages={"required": "Phone number is required", "invalid": "Invalid phone number"}
    )
    name = fields.Str(
        required=False,
        validate=validate.Length(max=100),
        error_messages={"invalid": "Name must be a string"}
    )
    email = fields.Email(
        required=False,
        allow_none=True,
        validate=validate.Length(max=100),
        error_messages={"invalid": "Invalid email address"}
    )
    address = fields.Str(required=False, allow_none=True, validate=validate.Length(max=255))
    rating = fields.Int(required=False, load_default=0, validate=validate.Range(min=0, max=5))
    comment = fields.Str(required=False, load_default="")


class CustomerUpdateSchema(Schema):
    name = fields.Str(required=False, validate=validate.Length(max=100))
    phone = fields.Str(required=False, validate=validate.Length(min=3, max=30))
    email = fields.Email(required=False, allow_none=True)
    address = fields.Str(required=False, allow_none=True, validate=validate.Length(max=255))
    rating = fields.Int(required=False, validate=validate.Range(min=0, max=5))
    comment = fields.Str(required=False)


class PhoneLookupQuerySchema(Schema):
    phone = fields.Str(required=True, error_messages={"required": "Phone number is required"})
