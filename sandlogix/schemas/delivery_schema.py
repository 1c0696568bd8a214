from marshmallow_sqlalchemy import SQLAlchemyAutoSchema, auto_field
from marshmallow import Schema, fields, validate, validates, ValidationError, EXCLUDE
from sandlogix.models.delivery import Delivery
from sandlogix.schemas.payment_schema import PaymentSchema
from sandlogix.services import balance_reconciler as reconciler

# Business rule enforced by the form layer, not by the revenue split itself
MIN_DELIVERY_VOLUME = 10


class DeliverySchema(SQLAlchemyAutoSchema):
    class Meta:
        model = Delivery

    id = auto_field(dump_only=True)
    user_id = auto_field()
    created_at = auto_field(dump_only=True)
    delivery_date = auto_field()
    client = auto_field()
    sand_type = auto_field()
    truck_number = auto_field()
    payment_date = auto_field()
    notes = auto_field()
    financial_scheme = auto_field()

    volume = auto_field()
    unit_price = auto_field()
    commission_rate = auto_field()
    other_fees = auto_field()
    gross_amount = auto_field()
    management_share = auto_field()
    partner_share = auto_field()
    agent_commission = auto_field()
    management_net = auto_field()
    truck_count = auto_field()
    commission_amount = auto_field()
    net_amount = auto_field()

    payments = fields.Nested(PaymentSchema, many=True, dump_only=True)
    total_paid = fields.Function(reconciler.total_paid, dump_only=True)
    remaining_balance = fields.Function(reconciler.remaining_balance, dump_only=True)
    display_remaining_balance = fields.Function(reconciler.display_remaining_balance, dump_only=True)
    payment_progress = fields.Function(reconciler.payment_progress, dump_only=True)


class DeliveryInputSchema(Schema):
    """
    Delivery entry form.

    Unit price, commission rate and other fees may be omitted; the service
    fills them from AppSettings before running the revenue split.
    """

    class Meta:
        unknown = EXCLUDE

    client = fields.Str(required=True, validate=validate.Length(min=1, max=128))
    sand_type = fields.Str(required=True, validate=validate.Length(min=1, max=64))
    volume = fields.Float(required=True, validate=validate.Range(
        min=MIN_DELIVERY_VOLUME, error=f"Minimum delivery volume is {MIN_DELIVERY_VOLUME} m³"))
    unit_price = fields.Float(load_default=None, allow_none=True, validate=validate.Range(min=0))
    commission_rate = fields.Float(load_default=None, allow_none=True, validate=validate.Range(min=0, max=100))
    other_fees = fields.Float(load_default=None, allow_none=True, validate=validate.Range(min=0))
    delivery_date = fields.Date(load_default=None, allow_none=True)
    payment_date = fields.Date(load_default=None, allow_none=True)
    truck_number = fields.Str(load_default=None, allow_none=True, validate=validate.Length(max=32))
    notes = fields.Str(load_default=None, allow_none=True, validate=validate.Length(max=255))
    user_id = fields.Str(load_default=None, allow_none=True, validate=validate.Length(max=64))

    # Creation only
    initial_payment = fields.Float(load_default=0, validate=validate.Range(min=0))
    payment_method = fields.Str(load_default=None, allow_none=True, validate=validate.Length(max=64))

    @validates('client')
    def validate_client(self, value, **kwargs):
        if not value.strip():
            raise ValidationError("Client name is required")
