import logging
from flask import Blueprint, request, jsonify, send_file

from sandlogix.services.balance_reconciler import summarize
from sandlogix.services.delivery_service import DeliveryService, DeliveryFilter
from sandlogix.services.errors import ServiceError
from sandlogix.services.report_service import dashboard_breakdown, generate_delivery_report_pdf
from sandlogix.services.settings_service import get_settings
from sandlogix.utils.timezone_utils import today_in_display_timezone

reports_bp = Blueprint('reports', __name__)


def _filtered_deliveries():
    return DeliveryService.get_all(DeliveryFilter.from_args(request.args))


@reports_bp.route('/reports/summary', methods=['GET'])
def delivery_summary():
    """Totals over the filtered deliveries (same query parameters as /deliveries)."""
    try:
        return jsonify(summarize(_filtered_deliveries()).as_dict()), 200
    except ValueError as ve:
        return jsonify({'error': str(ve)}), 400
    except ServiceError as se:
        return jsonify({'error': se.message}), 400
    except Exception as e:
        logging.error(f"Error in delivery_summary: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@reports_bp.route('/reports/dashboard', methods=['GET'])
def dashboard():
    try:
        deliveries = _filtered_deliveries()
        response = dashboard_breakdown(deliveries)
        response['summary'] = summarize(deliveries).as_dict()
        return jsonify(response), 200
    except ValueError as ve:
        return jsonify({'error': str(ve)}), 400
    except ServiceError as se:
        return jsonify({'error': se.message}), 400
    except Exception as e:
        logging.error(f"Error in dashboard: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500


@reports_bp.route('/reports/deliveries.pdf', methods=['GET'])
def delivery_report_pdf():
    try:
        deliveries = _filtered_deliveries()
        pdf_io = generate_delivery_report_pdf(deliveries, get_settings().currency_symbol)
        return send_file(
            pdf_io,
            mimetype='application/pdf',
            as_attachment=True,
            download_name=f"sandlogix_rapport_{today_in_display_timezone().isoformat()}.pdf",
        )
    except ValueError as ve:
        return jsonify({'error': str(ve)}), 400
    except ServiceError as se:
        return jsonify({'error': se.message}), 400
    except Exception as e:
        logging.error(f"Error in delivery_report_pdf: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500
