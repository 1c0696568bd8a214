from marshmallow_sqlalchemy import SQLAlchemyAutoSchema, auto_field
from marshmallow import Schema, fields, validate, EXCLUDE
from sandlogix.models.delivery import Payment


class PaymentSchema(SQLAlchemyAutoSchema):
    class Meta:
        model = Payment
        include_fk = True

    id = auto_field(dump_only=True)
    delivery_id = auto_field()
    amount = auto_field()
    payment_date = auto_field()
    method = auto_field()
    reference = auto_field()
    notes = auto_field()
    created_at = auto_field(dump_only=True)


class PaymentInputSchema(Schema):
    """Payment form. Over-payment is allowed; only the amount itself is checked."""

    class Meta:
        unknown = EXCLUDE

    amount = fields.Float(required=True, validate=validate.Range(min=0, min_inclusive=False,
                                                                  error="Amount must be greater than 0"))
    payment_date = fields.Date(load_default=None, allow_none=True)
    method = fields.Str(load_default=None, allow_none=True, validate=validate.Length(max=64))
    reference = fields.Str(load_default=None, allow_none=True, validate=validate.Length(max=64))
    notes = fields.Str(load_default=None, allow_none=True, validate=validate.Length(max=255))
