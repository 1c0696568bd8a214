from sqlalchemy import Column, Integer, Float, String, DateTime
from sqlalchemy.types import JSON
from sandlogix.extensions import db
from datetime import datetime


class AppSettings(db.Model):
    """Tenant-wide settings. A single row is kept; see SettingsService."""
    __tablename__ = "app_settings"

    id = Column(Integer, primary_key=True)
    default_commission_rate = Column(Float, nullable=False, default=35)
    default_other_fees = Column(Float, nullable=False, default=0)
    currency_symbol = Column(String(8), nullable=False, default='GNF')
    granite_prices = Column(JSON, nullable=False, default=dict)  # sand type -> unit price
    sand_types = Column(JSON, nullable=False, default=list)
    payment_methods = Column(JSON, nullable=False, default=list)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def unit_price_for(self, sand_type):
        prices = self.granite_prices or {}
        return prices.get(sand_type)

    @property
    def default_payment_method(self):
        methods = self.payment_methods or []
        return methods[0] if methods else None

    def __repr__(self):
        return f"<AppSettings id={self.id} currency={self.currency_symbol}>"
