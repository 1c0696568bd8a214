import logging
from flask import Blueprint, request, jsonify
from marshmallow import ValidationError

from sandlogix.schemas.app_settings_schema import AppSettingsSchema, AppSettingsInputSchema
from sandlogix.services.errors import ServiceError
from sandlogix.services.settings_service import get_settings, save_settings

settings_bp = Blueprint('settings', __name__)
schema = AppSettingsSchema()
input_schema = AppSettingsInputSchema()


@settings_bp.route('/settings', methods=['GET'])
def get_app_settings():
    try:
        return jsonify(schema.dump(get_settings())), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), 400
    except Exception as e:
        logging.error(f"Unhandled error in get_app_settings: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@settings_bp.route('/settings', methods=['PUT'])
def update_app_settings():
    try:
        data = input_schema.load(request.get_json(silent=True) or {})
        settings = save_settings(data)
        return jsonify(schema.dump(settings)), 200
    except ValidationError as ve:
        return jsonify({'errors': ve.messages}), 400
    except ServiceError as se:
        return jsonify({'error': se.message}), 400
    except Exception as e:
        logging.error(f"Unhandled error in update_app_settings: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500
