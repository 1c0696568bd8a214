"""
Tests for payment status, running balances and totals
"""
from datetime import date
from types import SimpleNamespace

import pytest

from sandlogix.services.balance_reconciler import (
    FinancialScheme,
    scheme_of,
    total_paid,
    remaining_balance,
    display_remaining_balance,
    payment_progress,
    agent_commission_of,
    net_amount_of,
    cumulative_balances,
    summarize,
)


def make_delivery(gross=0, payments=(), delivery_date=None, management_net=None,
                  scheme=FinancialScheme.GRANITE_SPLIT.value, **fields):
    values = dict(
        gross_amount=gross,
        payments=[SimpleNamespace(amount=amount) for amount in payments],
        delivery_date=delivery_date,
        financial_scheme=scheme,
        management_net=management_net,
        management_share=None,
        partner_share=None,
        agent_commission=None,
        commission_rate=0,
        commission_amount=None,
        net_amount=None,
    )
    values.update(fields)
    return SimpleNamespace(**values)


class TestPaymentStatus:

    def test_partial_payments(self):
        delivery = make_delivery(gross=1_000_000, payments=[300_000, 400_000])

        assert total_paid(delivery) == 700_000
        assert remaining_balance(delivery) == 300_000
        assert payment_progress(delivery) == pytest.approx(0.7)

    def test_no_payments(self):
        delivery = make_delivery(gross=500_000)
        assert total_paid(delivery) == 0
        assert remaining_balance(delivery) == 500_000
        assert payment_progress(delivery) == 0

    def test_missing_payments_attribute_counts_as_unpaid(self):
        delivery = SimpleNamespace(gross_amount=100)
        assert total_paid(delivery) == 0
        assert remaining_balance(delivery) == 100

    def test_over_payment_goes_negative_until_clamped(self):
        delivery = make_delivery(gross=1_000_000, payments=[800_000, 300_000])

        assert remaining_balance(delivery) == -100_000
        assert display_remaining_balance(delivery) == 0
        assert payment_progress(delivery) == 1.0

    def test_zero_gross_has_zero_progress(self):
        delivery = make_delivery(gross=0, payments=[5000])
        assert payment_progress(delivery) == 0.0

    def test_progress_stays_in_unit_interval(self):
        for paid in ([], [1], [999_999], [1_000_000], [2_000_000]):
            progress = payment_progress(make_delivery(gross=1_000_000, payments=paid))
            assert 0.0 <= progress <= 1.0


class TestSchemes:

    def test_untagged_record_is_granite_split(self):
        delivery = make_delivery(scheme=None)
        assert scheme_of(delivery) is FinancialScheme.GRANITE_SPLIT

    def test_tag_as_string_or_enum(self):
        assert scheme_of(make_delivery(scheme="legacy_commission")) is FinancialScheme.LEGACY_COMMISSION
        assert scheme_of(make_delivery(scheme=FinancialScheme.LEGACY_COMMISSION)) is FinancialScheme.LEGACY_COMMISSION

    def test_unknown_tag_falls_back_to_granite_split(self, caplog):
        with caplog.at_level("WARNING"):
            assert scheme_of(make_delivery(scheme="flat_fee")) is FinancialScheme.GRANITE_SPLIT
        assert "flat_fee" in caplog.text

    def test_granite_split_reads_management_net(self):
        delivery = make_delivery(gross=9_900_000, management_net=851_500, agent_commission=458_500,
                                 net_amount=123)
        assert net_amount_of(delivery) == 851_500
        assert agent_commission_of(delivery) == 458_500

    def test_granite_split_without_stored_net(self):
        assert net_amount_of(make_delivery(gross=100)) == 0

    def test_legacy_reads_net_amount(self):
        delivery = make_delivery(gross=1_000_000, scheme="legacy_commission",
                                 commission_amount=100_000, net_amount=900_000, management_net=5)
        assert net_amount_of(delivery) == 900_000
        assert agent_commission_of(delivery) == 100_000

    def test_legacy_without_stored_fields_uses_flat_commission(self):
        delivery = make_delivery(gross=1_000_000, scheme="legacy_commission", commission_rate=10)
        assert agent_commission_of(delivery) == pytest.approx(100_000)
        assert net_amount_of(delivery) == pytest.approx(900_000)


class TestCumulativeBalances:

    def test_empty(self):
        assert cumulative_balances([]) == []

    def test_running_totals_in_date_order(self):
        d1 = make_delivery(delivery_date=date(2024, 1, 1), management_net=100)
        d2 = make_delivery(delivery_date=date(2024, 1, 2), management_net=-20)
        d3 = make_delivery(delivery_date=date(2024, 1, 3), management_net=50)

        result = cumulative_balances([d3, d1, d2])

        assert [entry.delivery for entry in result] == [d1, d2, d3]
        assert [entry.running_balance for entry in result] == [100, 80, 130]

    def test_same_date_keeps_input_order(self):
        first = make_delivery(delivery_date=date(2024, 3, 1), management_net=10)
        second = make_delivery(delivery_date=date(2024, 3, 1), management_net=20)

        result = cumulative_balances([second, first])

        assert [entry.delivery for entry in result] == [second, first]
        assert result[-1].running_balance == 30

    def test_does_not_mutate_input(self):
        deliveries = [
            make_delivery(delivery_date=date(2024, 2, 1), management_net=1),
            make_delivery(delivery_date=date(2024, 1, 1), management_net=2),
        ]
        snapshot = list(deliveries)
        cumulative_balances(deliveries)
        assert deliveries == snapshot

    def test_mixed_schemes_use_each_records_own_net(self):
        legacy = make_delivery(delivery_date=date(2023, 6, 1), scheme="legacy_commission",
                               gross=1_000_000, commission_amount=100_000, net_amount=900_000)
        current = make_delivery(delivery_date=date(2024, 6, 1), management_net=851_500)

        result = cumulative_balances([current, legacy])

        assert [entry.running_balance for entry in result] == [900_000, 1_751_500]


class TestSummarize:

    def test_empty(self):
        summary = summarize([])
        assert summary.invoice_count == 0
        assert summary.total_gross == 0
        assert summary.total_outstanding == 0

    def test_totals(self):
        deliveries = [
            make_delivery(gross=9_900_000, payments=[1_000_000], management_net=851_500,
                          management_share=1_320_000, partner_share=8_580_000, agent_commission=458_500),
            make_delivery(gross=1_000_000, payments=[1_200_000], scheme="legacy_commission",
                          commission_amount=100_000, net_amount=900_000),
        ]

        summary = summarize(deliveries)

        assert summary.invoice_count == 2
        assert summary.total_gross == 10_900_000
        assert summary.total_management_share == 1_320_000
        assert summary.total_partner_share == 8_580_000
        assert summary.total_agent_commission == 558_500
        assert summary.total_management_net == 1_751_500
        assert summary.total_paid == 2_200_000
        assert summary.total_outstanding == 8_700_000
        assert summary.as_dict()['total_outstanding'] == 8_700_000

    def test_outstanding_never_negative(self):
        summary = summarize([make_delivery(gross=100, payments=[150])])
        assert summary.total_outstanding == 0
