import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from sandlogix.extensions import db
from sandlogix.models.delivery import Delivery, Payment
from sandlogix.services.balance_reconciler import FinancialScheme
from sandlogix.services.errors import ServiceError
from sandlogix.services.revenue_splitter import compute_finances, Finances
from sandlogix.utils.timezone_utils import today_in_display_timezone, parse_date_string

logger = logging.getLogger(__name__)

_BOOLEAN_ARGS = {'true': True, '1': True, 'yes': True, 'false': False, '0': False, 'no': False}


def _escape_like(value):
    return value.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


@dataclass
class DeliveryFilter:
    """History screen filters. Dates are inclusive; commission_only is tri-state."""

    search: Optional[str] = None
    sand_type: Optional[str] = None
    truck_number: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    commission_only: Optional[bool] = None
    user_id: Optional[str] = None

    @classmethod
    def from_args(cls, args):
        """
        Build a filter from request query arguments.

        Raises:
            ValueError: on malformed dates or boolean flags
        """
        commission_only = args.get('commission_only')
        if commission_only in (None, ''):
            commission_only = None
        else:
            key = commission_only.strip().lower()
            if key not in _BOOLEAN_ARGS:
                raise ValueError(f"Invalid commission_only value: {commission_only}")
            commission_only = _BOOLEAN_ARGS[key]

        return cls(
            search=(args.get('search') or '').strip() or None,
            sand_type=args.get('sand_type') or None,
            truck_number=args.get('truck_number') or None,
            start_date=parse_date_string(args.get('start_date')),
            end_date=parse_date_string(args.get('end_date')),
            commission_only=commission_only,
            user_id=args.get('user_id') or None,
        )

    def apply(self, query):
        if self.search:
            pattern = f"%{_escape_like(self.search)}%"
            query = query.filter(or_(
                Delivery.client.ilike(pattern, escape='\\'),
                Delivery.truck_number.ilike(pattern, escape='\\'),
            ))
        if self.sand_type:
            query = query.filter(Delivery.sand_type == self.sand_type)
        if self.truck_number:
            query = query.filter(Delivery.truck_number == self.truck_number)
        if self.start_date:
            query = query.filter(Delivery.delivery_date >= self.start_date)
        if self.end_date:
            query = query.filter(Delivery.delivery_date <= self.end_date)
        if self.commission_only is True:
            query = query.filter(Delivery.commission_rate > 0)
        elif self.commission_only is False:
            query = query.filter(Delivery.commission_rate == 0)
        if self.user_id:
            query = query.filter(Delivery.user_id == self.user_id)
        return query


class DeliveryService:
    @staticmethod
    def resolve_unit_price(settings, sand_type, explicit=None):
        """Explicit price from the form wins, otherwise the configured price for the sand type."""
        if explicit is not None:
            return explicit
        price = settings.unit_price_for(sand_type) if settings is not None else None
        if price is None:
            raise ServiceError(f"No unit price configured for sand type '{sand_type}'.")
        return price

    @staticmethod
    def _check_sand_type(settings, sand_type):
        allowed = settings.sand_types if settings is not None else None
        if allowed and sand_type not in allowed:
            raise ServiceError(f"Unknown sand type '{sand_type}'.")

    @staticmethod
    def _split(data, settings):
        """Resolve defaults from settings and run the revenue split."""
        DeliveryService._check_sand_type(settings, data['sand_type'])
        unit_price = DeliveryService.resolve_unit_price(settings, data['sand_type'], data.get('unit_price'))
        rate = data.get('commission_rate')
        if rate is None:
            rate = settings.default_commission_rate
        other_fees = data.get('other_fees')
        if other_fees is None:
            other_fees = settings.default_other_fees
        finances = compute_finances(data['volume'], unit_price, rate, other_fees)
        return finances, unit_price, rate

    @staticmethod
    def preview(data, settings) -> Finances:
        """Revenue split for the submitted form values, without saving anything."""
        finances, _, _ = DeliveryService._split(data, settings)
        return finances

    @staticmethod
    def _apply_form(delivery, data, settings):
        finances, unit_price, rate = DeliveryService._split(data, settings)
        delivery.delivery_date = (data.get('delivery_date') or delivery.delivery_date
                                  or today_in_display_timezone())
        delivery.client = data['client'].strip()
        delivery.sand_type = data['sand_type']
        delivery.truck_number = data.get('truck_number')
        delivery.payment_date = data.get('payment_date')
        delivery.notes = data.get('notes')
        if data.get('user_id') is not None:
            delivery.user_id = data['user_id']
        delivery.financial_scheme = FinancialScheme.GRANITE_SPLIT.value
        delivery.volume = data['volume']
        delivery.unit_price = unit_price
        delivery.commission_rate = rate
        for key, value in finances.as_record().items():
            setattr(delivery, key, value)
        delivery.commission_amount = None
        delivery.net_amount = None
        return finances

    @staticmethod
    def get_all(filters: Optional[DeliveryFilter] = None):
        try:
            query = Delivery.query.options(selectinload(Delivery.payments))
            if filters is not None:
                query = filters.apply(query)
            return query.order_by(Delivery.delivery_date.desc(), Delivery.id.desc()).all()
        except SQLAlchemyError as e:
            logging.error(f"Error fetching deliveries: {e}", exc_info=True)
            raise ServiceError("Could not fetch deliveries. Please try again later.")

    @staticmethod
    def get_by_id(delivery_id):
        try:
            return db.session.get(Delivery, delivery_id)
        except SQLAlchemyError as e:
            logging.error(f"Error fetching delivery: {e}", exc_info=True)
            raise ServiceError("Could not fetch delivery. Please try again later.")

    @staticmethod
    def create(data, settings):
        """
        Record a new delivery from validated form data.

        The financial fields are computed here once and stored as is. A
        positive ``initial_payment`` is recorded against the new delivery,
        dated on the delivery date.
        """
        delivery = Delivery()
        finances = DeliveryService._apply_form(delivery, data, settings)
        try:
            db.session.add(delivery)
            initial_payment = data.get('initial_payment') or 0
            if initial_payment > 0:
                delivery.payments.append(Payment(
                    amount=initial_payment,
                    payment_date=delivery.delivery_date,
                    method=data.get('payment_method') or settings.default_payment_method,
                ))
            db.session.commit()
            logger.info(
                f"Delivery {delivery.id} recorded for {delivery.client}: "
                f"{delivery.volume} m³, gross={finances.gross_amount}, trucks={finances.truck_count}"
            )
            return delivery
        except SQLAlchemyError as e:
            db.session.rollback()
            logging.error(f"Error creating delivery: {e}", exc_info=True)
            raise ServiceError("Could not create delivery. Please try again later.")

    @staticmethod
    def update(delivery_id, data, settings):
        """Replace a delivery's inputs and recompute its financial fields. Payments are kept."""
        delivery = DeliveryService.get_by_id(delivery_id)
        if not delivery:
            return None
        was_legacy = delivery.is_legacy
        try:
            DeliveryService._apply_form(delivery, data, settings)
            db.session.commit()
        except ServiceError:
            db.session.rollback()
            raise
        except SQLAlchemyError as e:
            db.session.rollback()
            logging.error(f"Error updating delivery: {e}", exc_info=True)
            raise ServiceError("Could not update delivery. Please try again later.")
        if was_legacy:
            logger.info(f"Delivery {delivery.id} converted from legacy commission scheme on edit")
        return delivery

    @staticmethod
    def delete(delivery_id):
        try:
            delivery = db.session.get(Delivery, delivery_id)
            if not delivery:
                return False
            db.session.delete(delivery)
            db.session.commit()
            logger.info(f"Delivery {delivery_id} deleted with its payments")
            return True
        except SQLAlchemyError as e:
            db.session.rollback()
            logging.error(f"Error deleting delivery: {e}", exc_info=True)
            raise ServiceError("Could not delete delivery. Please try again later.")
