from sandlogix.extensions import db
from datetime import datetime
from sqlalchemy.sql import func
from sandlogix.services.balance_reconciler import FinancialScheme


class Delivery(db.Model):
    __tablename__ = 'delivery'
    id = db.Column(db.Integer, primary_key=True)
    # Owner reference (agent who recorded it); accounts live in the auth provider
    user_id = db.Column(db.String(64), nullable=True, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    delivery_date = db.Column(db.Date, nullable=False, index=True)
    client = db.Column(db.String(128), nullable=False, index=True)
    sand_type = db.Column(db.String(64), nullable=False, index=True)
    truck_number = db.Column(db.String(32), nullable=True, index=True)
    payment_date = db.Column(db.Date, nullable=True)  # expected settlement date
    notes = db.Column(db.String(255), nullable=True)

    financial_scheme = db.Column(db.String(32), nullable=False,
                                 default=FinancialScheme.GRANITE_SPLIT.value, index=True)

    # Inputs
    volume = db.Column(db.Float, nullable=True)
    unit_price = db.Column(db.Float, nullable=True)
    commission_rate = db.Column(db.Float, nullable=False, default=0)
    other_fees = db.Column(db.Float, nullable=False, default=0)

    # Stored outputs of the revenue split, persisted as computed
    gross_amount = db.Column(db.Float, nullable=False, default=0)
    management_share = db.Column(db.Float, nullable=True)
    partner_share = db.Column(db.Float, nullable=True)
    agent_commission = db.Column(db.Float, nullable=True)
    management_net = db.Column(db.Float, nullable=True)
    truck_count = db.Column(db.Integer, nullable=True)

    # Flat commission scheme (legacy_commission records only)
    commission_amount = db.Column(db.Float, nullable=True)
    net_amount = db.Column(db.Float, nullable=True)

    payments = db.relationship("Payment", back_populates="delivery",
                               cascade="all, delete-orphan",
                               order_by="Payment.payment_date")

    def __init__(self, **kwargs):
        kwargs.setdefault('financial_scheme', FinancialScheme.GRANITE_SPLIT.value)
        super().__init__(**kwargs)

    def __repr__(self):
        return f"<Delivery {self.id} {self.client} {self.delivery_date}>"

    @property
    def is_legacy(self):
        return self.financial_scheme == FinancialScheme.LEGACY_COMMISSION.value


class Payment(db.Model):
    __tablename__ = 'payment'

    id = db.Column(db.Integer, primary_key=True)
    delivery_id = db.Column(db.Integer, db.ForeignKey('delivery.id', ondelete='CASCADE'), nullable=False, index=True)
    amount = db.Column(db.Float, nullable=False)
    payment_date = db.Column(db.Date, nullable=False)
    method = db.Column(db.String(64), nullable=True)
    reference = db.Column(db.String(64), nullable=True)  # e.g. Orange Money txn, cheque no.
    notes = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, server_default=func.now())

    delivery = db.relationship("Delivery", back_populates="payments")

    def __repr__(self):
        return f"<Payment {self.id} delivery={self.delivery_id} amount={self.amount}>"
