from marshmallow_sqlalchemy import SQLAlchemyAutoSchema, auto_field
from marshmallow import Schema, fields, validate, validates_schema, ValidationError, EXCLUDE
from sandlogix.models.app_settings import AppSettings


class AppSettingsSchema(SQLAlchemyAutoSchema):
    class Meta:
        model = AppSettings

    id = auto_field(dump_only=True)
    default_commission_rate = auto_field()
    default_other_fees = auto_field()
    currency_symbol = auto_field()
    granite_prices = auto_field()
    sand_types = auto_field()
    payment_methods = auto_field()
    updated_at = auto_field(dump_only=True)


class AppSettingsInputSchema(Schema):
    """Settings form. Every field is optional; omitted fields keep their stored value."""

    class Meta:
        unknown = EXCLUDE

    default_commission_rate = fields.Float(validate=validate.Range(min=0, max=100))
    default_other_fees = fields.Float(validate=validate.Range(min=0))
    currency_symbol = fields.Str(validate=validate.Length(min=1, max=8))
    granite_prices = fields.Dict(keys=fields.Str(), values=fields.Float(validate=validate.Range(min=0)))
    sand_types = fields.List(fields.Str())
    payment_methods = fields.List(fields.Str())

    @validates_schema
    def validate_labels(self, data, **kwargs):
        errors = {}
        for key in ('sand_types', 'payment_methods'):
            labels = data.get(key)
            if labels is None:
                continue
            cleaned = [label.strip() for label in labels]
            if any(not label for label in cleaned):
                errors[key] = ["Labels must not be blank"]
            elif len(set(cleaned)) != len(cleaned):
                errors[key] = ["Labels must be unique"]
        if errors:
            raise ValidationError(errors)
