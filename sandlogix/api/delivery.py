import logging
from flask import Blueprint, request, jsonify
from marshmallow import ValidationError

from sandlogix.schemas.delivery_schema import DeliverySchema, DeliveryInputSchema
from sandlogix.services.balance_reconciler import summarize
from sandlogix.services.delivery_service import DeliveryService, DeliveryFilter
from sandlogix.services.errors import ServiceError
from sandlogix.services.report_service import newest_first
from sandlogix.services.settings_service import get_settings

delivery_bp = Blueprint('delivery', __name__)
schema = DeliverySchema()
input_schema = DeliveryInputSchema()


@delivery_bp.route('/deliveries', methods=['GET'])
def list_deliveries():
    """
    Delivery history, newest first, each row carrying its running balance.

    Query Parameters:
    - search (string): matched against client name and truck number
    - sand_type, truck_number (string): exact match
    - start_date, end_date (string): YYYY-MM-DD, inclusive
    - commission_only (bool): true = with agent commission, false = without
    - user_id (string): owner reference
    """
    try:
        filters = DeliveryFilter.from_args(request.args)
    except ValueError as ve:
        return jsonify({'error': str(ve)}), 400
    try:
        deliveries = DeliveryService.get_all(filters)
        items = []
        for entry in newest_first(deliveries):
            row = schema.dump(entry.delivery)
            row['running_balance'] = entry.running_balance
            items.append(row)
        return jsonify({
            'items': items,
            'total': len(items),
            'summary': summarize(deliveries).as_dict(),
        }), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), 400
    except Exception as e:
        logging.error(f"Unhandled error in list_deliveries: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@delivery_bp.route('/deliveries/<int:delivery_id>', methods=['GET'])
def get_delivery(delivery_id):
    try:
        delivery = DeliveryService.get_by_id(delivery_id)
        if not delivery:
            return jsonify({'error': 'Delivery not found'}), 404
        return jsonify(schema.dump(delivery)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), 400
    except Exception as e:
        logging.error(f"Unhandled error in get_delivery: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@delivery_bp.route('/deliveries/preview', methods=['POST'])
def preview_delivery():
    """Revenue split of the submitted form, for the confirmation step. Nothing is saved."""
    try:
        data = input_schema.load(request.get_json(silent=True) or {})
        finances = DeliveryService.preview(data, get_settings())
        response = finances.as_record()
        response['management_volume'] = finances.management_volume
        response['management_remaining'] = finances.management_remaining
        return jsonify(response), 200
    except ValidationError as ve:
        return jsonify({'errors': ve.messages}), 400
    except ServiceError as se:
        return jsonify({'error': se.message}), 400
    except Exception as e:
        logging.error(f"Unhandled error in preview_delivery: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@delivery_bp.route('/deliveries', methods=['POST'])
def create_delivery():
    try:
        data = input_schema.load(request.get_json(silent=True) or {})
        delivery = DeliveryService.create(data, get_settings())
        return jsonify(schema.dump(delivery)), 201
    except ValidationError as ve:
        return jsonify({'errors': ve.messages}), 400
    except ServiceError as se:
        return jsonify({'error': se.message}), 400
    except Exception as e:
        logging.error(f"Unhandled error in create_delivery: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@delivery_bp.route('/deliveries/<int:delivery_id>', methods=['PUT'])
def update_delivery(delivery_id):
    """Full replacement of the delivery form; financial fields are recomputed."""
    try:
        data = input_schema.load(request.get_json(silent=True) or {})
        delivery = DeliveryService.update(delivery_id, data, get_settings())
        if not delivery:
            return jsonify({'error': 'Delivery not found'}), 404
        return jsonify(schema.dump(delivery)), 200
    except ValidationError as ve:
        return jsonify({'errors': ve.messages}), 400
    except ServiceError as se:
        return jsonify({'error': se.message}), 400
    except Exception as e:
        logging.error(f"Unhandled error in update_delivery: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@delivery_bp.route('/deliveries/<int:delivery_id>', methods=['DELETE'])
def delete_delivery(delivery_id):
    try:
        success = DeliveryService.delete(delivery_id)
        if not success:
            return jsonify({'error': 'Delivery not found'}), 404
        return jsonify({'message': 'Delivery deleted'}), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), 400
    except Exception as e:
        logging.error(f"Unhandled error in delete_delivery: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500
