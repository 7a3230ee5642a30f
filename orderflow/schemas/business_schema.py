from marshmallow import Schema, fields, validate


class SocialLinksSchema(Schema):
    whatsapp = fields.Str(required=False, allow_none=True)
    facebook = fields.Str(required=False, allow_none=True)
    youtube = fields.Str(required=False, allow_none=True)


class RegisterBusinessSchema(Schema):
    business_name = fields.Str(
        required=True,
        validate=validate.Length(min=1, max=100),
        error_messages={"required": "Business name is required"}
    )
    phone = fields.Str(
        required=True,
        validate=validate.Length(min=5, max=20),
        error_messages={"required": "Business phone is required"}
    )
    business_address = fields.Str(required=False, allow_none=True, validate=validate.Length(max=255))
    business_url = fields.Url(required=False, allow_none=True, error_messages={"invalid": "Invalid URL"})
    user_name = fields.Str(required=False, allow_none=True, validate=validate.Length(max=100))
    social_links = fields.Nested(SocialLinksSchema, required=False)


class BusinessInfoUpdateSchema(Schema):
    business_name = fields.Str(required=False, validate=validate.Length(min=1, max=100))
    phone = fields.Str(required=False, validate=validate.Length(min=5, max=20))
    business_address = fields.Str(required=False, allow_none=True, validate=validate.Length(max=255))
    business_url = fields.Url(required=False, allow_none=True)
    user_name = fields.Str(required=False, allow_none=True, validate=validate.Length(max=100))
    social_links = fields.Nested(SocialLinksSchema, required=False)


class ChangePlanSchema(Schema):
    plan_id = fields.Str(required=True, error_messages={"required": "Plan is required"})
