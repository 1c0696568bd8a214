import logging
from sqlalchemy.exc import SQLAlchemyError
from sandlogix.extensions import db
from sandlogix.models.delivery import Delivery, Payment
from sandlogix.services.errors import ServiceError
from sandlogix.utils.timezone_utils import today_in_display_timezone

logger = logging.getLogger(__name__)


class PaymentService:
    """Payments are only added or deleted; a correction is a delete followed by a new payment."""

    @staticmethod
    def list_for_delivery(delivery_id):
        try:
            return (Payment.query
                    .filter_by(delivery_id=delivery_id)
                    .order_by(Payment.payment_date.desc(), Payment.id.desc())
                    .all())
        except SQLAlchemyError as e:
            logging.error(f"Error fetching payments: {e}", exc_info=True)
            raise ServiceError("Could not fetch payments. Please try again later.")

    @staticmethod
    def add(delivery_id, data, settings=None):
        """
        Record a payment against a delivery.

        Returns None when the delivery does not exist. Payments beyond the
        gross amount are accepted.
        """
        try:
            delivery = db.session.get(Delivery, delivery_id)
            if not delivery:
                return None
            method = data.get('method')
            if not method and settings is not None:
                method = settings.default_payment_method
            payment = Payment(
                delivery_id=delivery.id,
                amount=data['amount'],
                payment_date=data.get('payment_date') or today_in_display_timezone(),
                method=method,
                reference=data.get('reference'),
                notes=data.get('notes'),
            )
            db.session.add(payment)
            db.session.commit()
            logger.info(f"Payment {payment.id} of {payment.amount} added to delivery {delivery.id}")
            return payment
        except SQLAlchemyError as e:
            db.session.rollback()
            logging.error(f"Error adding payment: {e}", exc_info=True)
            raise ServiceError("Could not add payment. Please try again later.")

    @staticmethod
    def delete(payment_id):
        try:
            payment = db.session.get(Payment, payment_id)
            if not payment:
                return False
            db.session.delete(payment)
            db.session.commit()
            logger.info(f"Payment {payment_id} deleted")
            return True
        except SQLAlchemyError as e:
            db.session.rollback()
            logging.error(f"Error deleting payment: {e}", exc_info=True)
            raise ServiceError("Could not delete payment. Please try again later.")
