"""
Revenue split rules for granite deliveries.

A delivery is moved in 30 m³ trucks. Each dispatched truck entitles management
to a flat 3 m³ of value, whatever the truck's actual fill. The rest of the
volume belongs to the supply partner. Fixed fees come out of management's
share only, and the agent is paid a percentage of what is left.
"""

import math
from dataclasses import dataclass
from typing import Dict

TRUCK_CAPACITY_M3 = 30
MANAGEMENT_M3_PER_TRUCK = 3
DEFAULT_AGENT_RATE = 35


@dataclass(frozen=True)
class Finances:
    """Financial breakdown of a single delivery."""

    gross_amount: float
    management_share: float
    partner_share: float
    agent_commission: float
    management_net: float
    truck_count: int
    other_fees: float

    @property
    def management_volume(self) -> int:
        return self.truck_count * MANAGEMENT_M3_PER_TRUCK

    @property
    def management_remaining(self) -> float:
        return max(0, self.management_share - self.other_fees)

    def as_record(self) -> Dict[str, float]:
        """Column values as persisted on the delivery row."""
        return {
            'gross_amount': self.gross_amount,
            'management_share': self.management_share,
            'partner_share': self.partner_share,
            'agent_commission': self.agent_commission,
            'management_net': self.management_net,
            'truck_count': self.truck_count,
            'other_fees': self.other_fees,
        }


def truck_count(volume: float) -> int:
    """Number of trucks needed for ``volume`` m³, rounded up, minimum one."""
    return max(1, math.ceil(volume / TRUCK_CAPACITY_M3))


def compute_finances(volume: float, unit_price: float,
                     agent_rate: float = DEFAULT_AGENT_RATE,
                     other_fees: float = 0) -> Finances:
    """
    Split a delivery's value between management, partner and agent.

    Args:
        volume: Delivered volume in m³
        unit_price: Price per m³
        agent_rate: Agent commission in percent of management's post-fee share
        other_fees: Fixed amount deducted from management's share

    Returns:
        Finances breakdown. Never raises; out-of-range inputs give
        arithmetically consistent results.
    """
    trucks = truck_count(volume)
    management_volume = trucks * MANAGEMENT_M3_PER_TRUCK

    gross_amount = volume * unit_price
    management_share = management_volume * unit_price
    # management's entitlement may exceed a small delivery; partner gets nothing then
    partner_share = max(0, volume - management_volume) * unit_price

    management_remaining = max(0, management_share - other_fees)
    agent_commission = management_remaining * agent_rate / 100
    management_net = management_remaining - agent_commission

    return Finances(
        gross_amount=gross_amount,
        management_share=management_share,
        partner_share=partner_share,
        agent_commission=agent_commission,
        management_net=management_net,
        truck_count=trucks,
        other_fees=other_fees,
    )


# Flat commission scheme used by records created before the truck split.
# Kept for reading those records; new deliveries go through compute_finances.

def calculate_commission(gross: float, rate: float) -> float:
    return gross * rate / 100


def calculate_net(gross: float, commission: float) -> float:
    return gross - commission
