"""
Payment status and running balances for deliveries.

Works on any delivery-like object (ORM rows or plain values) exposing
``gross_amount``, ``payments``, ``delivery_date`` and the financial fields
of its scheme. Nothing here mutates its input or touches the database.
"""

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Iterable, List

from sandlogix.services.revenue_splitter import calculate_commission, calculate_net

logger = logging.getLogger(__name__)


class FinancialScheme(Enum):
    LEGACY_COMMISSION = "legacy_commission"
    GRANITE_SPLIT = "granite_split"


@dataclass(frozen=True)
class RunningBalance:
    delivery: Any
    running_balance: float


@dataclass(frozen=True)
class FinancialSummary:
    """Totals over a set of deliveries, using the same per-record rules as the detail views."""

    total_gross: float = 0
    total_management_share: float = 0
    total_partner_share: float = 0
    total_agent_commission: float = 0
    total_management_net: float = 0
    total_paid: float = 0
    total_outstanding: float = 0
    invoice_count: int = 0

    def as_dict(self):
        return {
            'total_gross': self.total_gross,
            'total_management_share': self.total_management_share,
            'total_partner_share': self.total_partner_share,
            'total_agent_commission': self.total_agent_commission,
            'total_management_net': self.total_management_net,
            'total_paid': self.total_paid,
            'total_outstanding': self.total_outstanding,
            'invoice_count': self.invoice_count,
        }


def scheme_of(delivery) -> FinancialScheme:
    """Scheme tag of a record; untagged or unrecognised records are treated as the current scheme."""
    value = getattr(delivery, 'financial_scheme', None)
    if value is None:
        return FinancialScheme.GRANITE_SPLIT
    if isinstance(value, FinancialScheme):
        return value
    try:
        return FinancialScheme(value)
    except ValueError:
        logger.warning(f"Unknown financial scheme {value!r}, reading record as granite_split")
        return FinancialScheme.GRANITE_SPLIT


def total_paid(delivery) -> float:
    payments = getattr(delivery, 'payments', None) or []
    return sum(p.amount for p in payments)


def remaining_balance(delivery) -> float:
    """Gross amount minus payments. Negative when the client over-paid."""
    return (delivery.gross_amount or 0) - total_paid(delivery)


def display_remaining_balance(delivery) -> float:
    """Remaining balance floored at zero, for screens that hide over-payment."""
    return max(0, remaining_balance(delivery))


def payment_progress(delivery) -> float:
    gross = delivery.gross_amount or 0
    if gross == 0:
        return 0.0
    return min(total_paid(delivery) / gross, 1.0)


def agent_commission_of(delivery) -> float:
    if scheme_of(delivery) is FinancialScheme.LEGACY_COMMISSION:
        if delivery.commission_amount is not None:
            return delivery.commission_amount
        return calculate_commission(delivery.gross_amount or 0, delivery.commission_rate or 0)
    return delivery.agent_commission or 0


def net_amount_of(delivery) -> float:
    """Authoritative net figure: ``management_net`` or, for legacy rows, ``net_amount``."""
    if scheme_of(delivery) is FinancialScheme.LEGACY_COMMISSION:
        if delivery.net_amount is not None:
            return delivery.net_amount
        return calculate_net(delivery.gross_amount or 0, agent_commission_of(delivery))
    return delivery.management_net or 0


def _date_key(delivery):
    return getattr(delivery, 'delivery_date', None) or date.min


def cumulative_balances(deliveries: Iterable[Any]) -> List[RunningBalance]:
    """
    Running total of net amounts in ascending delivery date order.

    This measures net income accrual, not cash collected; see
    ``remaining_balance`` for the collection side. The result is always
    oldest first; callers wanting newest first must re-sort.
    """
    ordered = sorted(deliveries, key=_date_key)
    running = 0
    result = []
    for delivery in ordered:
        running += net_amount_of(delivery)
        result.append(RunningBalance(delivery=delivery, running_balance=running))
    return result


def summarize(deliveries: Iterable[Any]) -> FinancialSummary:
    gross = management_share = partner_share = agent_commission = net = paid = 0
    count = 0
    for delivery in deliveries:
        count += 1
        gross += delivery.gross_amount or 0
        management_share += getattr(delivery, 'management_share', None) or 0
        partner_share += getattr(delivery, 'partner_share', None) or 0
        agent_commission += agent_commission_of(delivery)
        net += net_amount_of(delivery)
        paid += total_paid(delivery)

    return FinancialSummary(
        total_gross=gross,
        total_management_share=management_share,
        total_partner_share=partner_share,
        total_agent_commission=agent_commission,
        total_management_net=net,
        total_paid=paid,
        total_outstanding=max(0, gross - paid),
        invoice_count=count,
    )
