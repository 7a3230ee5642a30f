from marshmallow import Schema, fields, validate


class NaiveDateTime(fields.DateTime):
    """ISO datetime kept as naive local time, like the stored timestamps."""

    def _deserialize(self, value, attr, data, **kwargs):
        parsed = super()._deserialize(value, attr, data, **kwargs)
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone().replace(tzinfo=None)
        return parsed


class ExportQuerySchema(Schema):
    format = fields.Str(
        load_default="xlsx",
        validate=validate.OneOf(["xlsx", "csv"]),
        error_messages={"invalid": "Format must be xlsx or csv"}
    )
