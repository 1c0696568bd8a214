import logging
from flask import Blueprint, request, jsonify
from marshmallow import ValidationError

from sandlogix.schemas.payment_schema import PaymentSchema, PaymentInputSchema
from sandlogix.services import balance_reconciler as reconciler
from sandlogix.services.delivery_service import DeliveryService
from sandlogix.services.errors import ServiceError
from sandlogix.services.payment_service import PaymentService
from sandlogix.services.settings_service import get_settings

payment_bp = Blueprint('payment', __name__)
schema = PaymentSchema()
schema_many = PaymentSchema(many=True)
input_schema = PaymentInputSchema()


def _payment_status(delivery):
    return {
        'delivery_id': delivery.id,
        'gross_amount': delivery.gross_amount,
        'total_paid': reconciler.total_paid(delivery),
        'remaining_balance': reconciler.remaining_balance(delivery),
        'display_remaining_balance': reconciler.display_remaining_balance(delivery),
        'payment_progress': reconciler.payment_progress(delivery),
    }


@payment_bp.route('/deliveries/<int:delivery_id>/payments', methods=['GET'])
def list_payments(delivery_id):
    try:
        delivery = DeliveryService.get_by_id(delivery_id)
        if not delivery:
            return jsonify({'error': 'Delivery not found'}), 404
        payments = PaymentService.list_for_delivery(delivery_id)
        return jsonify({
            'items': schema_many.dump(payments),
            'status': _payment_status(delivery),
        }), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), 400
    except Exception as e:
        logging.error(f"Unhandled error in list_payments: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@payment_bp.route('/deliveries/<int:delivery_id>/payments', methods=['POST'])
def add_payment(delivery_id):
    try:
        data = input_schema.load(request.get_json(silent=True) or {})
        payment = PaymentService.add(delivery_id, data, get_settings())
        if not payment:
            return jsonify({'error': 'Delivery not found'}), 404
        delivery = DeliveryService.get_by_id(delivery_id)
        return jsonify({
            'payment': schema.dump(payment),
            'status': _payment_status(delivery),
        }), 201
    except ValidationError as ve:
        return jsonify({'errors': ve.messages}), 400
    except ServiceError as se:
        return jsonify({'error': se.message}), 400
    except Exception as e:
        logging.error(f"Unhandled error in add_payment: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@payment_bp.route('/payments/<int:payment_id>', methods=['DELETE'])
def delete_payment(payment_id):
    try:
        success = PaymentService.delete(payment_id)
        if not success:
            return jsonify({'error': 'Payment not found'}), 404
        return jsonify({'message': 'Payment deleted'}), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), 400
    except Exception as e:
        logging.error(f"Unhandled error in delete_payment: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500
