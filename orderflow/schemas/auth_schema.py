from marshmallow import Schema, fields, validate


class SignUpSchema(Schema):
    email = fields.Email(
        required=True,
        validate=validate.Length(max=100),
        error_messages={"required": "Email is required", "invalid": "Invalid email address"}
    )
    password = fields.Str(
        required=True,
        load_only=True,
        validate=validate.Length(min=6, max=128),
        error_messages={"required": "Password is required"}
    )
    business_name = fields.Str(
        required=True,
        validate=validate.Length(min=1, max=100),
        error_messages={"required": "Business name is required"}
    )


class AdminSignUpSchema(Schema):
    email = fields.Email(required=True, error_messages={"required": "Email is required"})
    password = fields.Str(required=True, load_only=True, validate=validate.Length(min=6, max=128))
    signup_key = fields.Str(
        required=True,
        load_only=True,
        error_messages={"required": "Admin sign-up key is required"}
    )


class LoginSchema(Schema):
    email = fields.Email(required=True, error_messages={"required": "Email is required"})
    password = fields.Str(required=True, load_only=True, error_messages={"required": "Password is required"})


class ChangePasswordSchema(Schema):
    current_password = fields.Str(required=True, load_only=True)
    new_password = fields.Str(
        required=True,
        load_only=True,
        validate=validate.Length(min=6, max=128),
        error_messages={"required": "New password is required"}
    )
