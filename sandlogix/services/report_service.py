import logging
from collections import OrderedDict
from datetime import date
from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

from sandlogix.services.balance_reconciler import (
    agent_commission_of,
    cumulative_balances,
    net_amount_of,
    remaining_balance,
    summarize,
    total_paid,
)
from sandlogix.services.errors import ServiceError
from sandlogix.utils.formatting import format_currency
from sandlogix.utils.timezone_utils import utc_now, format_datetime_for_display

logger = logging.getLogger(__name__)

REPORT_TITLE = "SandLogix - Rapport de Livraisons"
REPORT_COLUMNS = ["Date", "Camion", "Client", "Type", "Vol(m³)", "Prix/m³", "Brut",
                  "Part Part.", "Comm Agent", "Net Dir.", "Payé", "Reste"]
TOP_CLIENTS = 5
TIMELINE_LENGTH = 10


def newest_first(deliveries):
    """Running balances for the history table: accrued oldest to newest, listed newest first."""
    # same-day rows accrue in insertion (id) order
    oldest_first = sorted(deliveries, key=lambda d: (d.delivery_date or date.min, d.id or 0))
    return list(reversed(cumulative_balances(oldest_first)))


def dashboard_breakdown(deliveries):
    """
    Chart data for the dashboard.

    Returns:
        dict with gross amount per sand type, the top clients by net amount
        and the paid vs gross timeline of the latest deliveries.
    """
    deliveries = list(deliveries)

    by_sand_type = OrderedDict()
    by_client = OrderedDict()
    for delivery in deliveries:
        by_sand_type[delivery.sand_type] = by_sand_type.get(delivery.sand_type, 0) + (delivery.gross_amount or 0)
        by_client[delivery.client] = by_client.get(delivery.client, 0) + net_amount_of(delivery)

    top_clients = sorted(by_client.items(), key=lambda item: item[1], reverse=True)[:TOP_CLIENTS]
    timeline = [
        {
            'date': entry.delivery.delivery_date.isoformat() if entry.delivery.delivery_date else None,
            'paid': total_paid(entry.delivery),
            'gross': entry.delivery.gross_amount or 0,
        }
        for entry in cumulative_balances(deliveries)[-TIMELINE_LENGTH:]
    ]

    return {
        'gross_by_sand_type': [{'name': name, 'value': value} for name, value in by_sand_type.items()],
        'top_clients': [{'name': name, 'value': value} for name, value in top_clients],
        'timeline': timeline,
    }


def _report_row(delivery, currency):
    return [
        delivery.delivery_date.strftime('%d/%m/%Y') if delivery.delivery_date else '',
        delivery.truck_number or '',
        delivery.client,
        delivery.sand_type,
        f"{delivery.volume:g}" if delivery.volume is not None else '-',
        format_currency(delivery.unit_price, currency) if delivery.unit_price is not None else '-',
        format_currency(delivery.gross_amount, currency),
        format_currency(delivery.partner_share, currency),
        format_currency(agent_commission_of(delivery), currency),
        format_currency(net_amount_of(delivery), currency),
        format_currency(total_paid(delivery), currency),
        format_currency(remaining_balance(delivery), currency),
    ]


def generate_delivery_report_pdf(deliveries, currency="GNF"):
    """
    Render the delivery history report.

    Args:
        deliveries: deliveries to list, already filtered by the caller
        currency: currency code appended to amounts

    Returns:
        BytesIO positioned at the start of the PDF document
    """
    deliveries = list(deliveries)
    try:
        pdf_io = BytesIO()
        doc = SimpleDocTemplate(pdf_io, pagesize=landscape(A4),
                                rightMargin=20, leftMargin=20,
                                topMargin=30, bottomMargin=30)
        styles = getSampleStyleSheet()
        cell_style = ParagraphStyle('Cell', parent=styles['Normal'], fontSize=7, leading=8)
        story = []

        story.append(Paragraph(f"<b>{REPORT_TITLE}</b>", styles['Title']))
        story.append(Paragraph(
            f"Généré le: {format_datetime_for_display(utc_now(), '%d/%m/%Y %H:%M')}", styles['Normal']))
        story.append(Spacer(1, 12))

        table_data = [REPORT_COLUMNS]
        for entry in newest_first(deliveries):
            row = _report_row(entry.delivery, currency)
            row[2] = Paragraph(escape(row[2]), cell_style)
            table_data.append(row)

        available_width = landscape(A4)[0] - 40
        col_widths = [w * available_width for w in
                      (0.07, 0.07, 0.12, 0.10, 0.05, 0.08, 0.09, 0.09, 0.08, 0.09, 0.08, 0.08)]
        table = Table(table_data, colWidths=col_widths, repeatRows=1)
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor("#B45309")),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
            ('FONTSIZE', (0, 0), (-1, -1), 7),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.gray),
            ('ALIGN', (4, 1), (-1, -1), 'RIGHT'),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor("#f2f2f2")]),
        ]))
        story.append(table)
        story.append(Spacer(1, 20))

        summary = summarize(deliveries)
        totals_data = [
            [f"TOTAL BRUT: {format_currency(summary.total_gross, currency)}",
             f"TOTAL ENCAISSÉ: {format_currency(summary.total_paid, currency)}"],
            [f"TOTAL NET (Gain): {format_currency(summary.total_management_net, currency)}",
             f"RESTE À RECOUVRER: {format_currency(summary.total_outstanding, currency)}"],
        ]
        totals_table = Table(totals_data, colWidths=[available_width / 2, available_width / 2])
        totals_table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (-1, -1), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 10),
            ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
        ]))
        story.append(totals_table)

        doc.build(story)
        pdf_io.seek(0)
        logger.info(f"Delivery report PDF generated with {len(deliveries)} rows")
        return pdf_io
    except Exception as e:
        logging.error(f"Error generating delivery report PDF: {e}", exc_info=True)
        raise ServiceError("Could not generate the PDF report. Please try again later.")
