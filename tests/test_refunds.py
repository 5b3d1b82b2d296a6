from datetime import datetime, timedelta, timezone

import pytest

from hut.services import RefundService
from hut.services.refund_service import CUSTOM_POLICY_RULES

CHECK_IN = "2026-03-20"
CHECK_IN_AT = datetime(2026, 3, 20, tzinfo=timezone.utc)


def hours_before(hours):
    return CHECK_IN_AT - timedelta(hours=hours)


class TestFlexibleScenarios:
    def test_cancel_72_hours_out(self):
        refund = RefundService.calculate_refund("flexible", hours_before(72), CHECK_IN, 150000, 10000, True)
        assert refund["base_refund"] == 140000
        assert refund["pickup_refund"] == 10000
        assert refund["refund_total"] == 150000

    def test_cancel_24_hours_out(self):
        refund = RefundService.calculate_refund("flexible", hours_before(24), CHECK_IN, 100000, 10000, True)
        assert refund["lead_hours"] == pytest.approx(24)
        assert refund["base_refund"] == 45000
        assert refund["pickup_refund"] == 10000
        assert refund["refund_total"] == 55000

    def test_cancel_12_hours_out(self):
        refund = RefundService.calculate_refund("flexible", hours_before(12), CHECK_IN, 100000, 10000, True)
        assert refund["refund_total"] == 0
        assert refund["pickup_refund"] == 0


class TestPolicies:
    @pytest.mark.parametrize(
        "policy,hours,percent",
        [
            ("moderate", 100, 0.75),
            ("moderate", 72, 0.75),
            ("moderate", 48, 0.3),
            ("moderate", 23, 0),
            ("strict", 80, 0.5),
            ("strict", 71, 0),
            ("flexible", 47.5, 0.5),
        ],
    )
    def test_brackets(self, policy, hours, percent):
        assert RefundService.refundable_percent(policy, hours) == percent

    def test_pickup_not_refunded_when_not_requested(self):
        refund = RefundService.calculate_refund("flexible", hours_before(72), CHECK_IN, 150000, 10000, False)
        assert refund["pickup_refund"] == 0
        assert refund["refund_total"] == 140000

    def test_strict_keeps_pickup_refund_before_cutoff(self):
        refund = RefundService.calculate_refund("strict", hours_before(30), CHECK_IN, 110000, 10000, True)
        assert refund["base_refund"] == 0
        assert refund["refund_total"] == 10000

    @pytest.mark.parametrize("policy", ["custom", "something-else", None])
    def test_unrecognised_policy_refunds_nothing(self, policy):
        refund = RefundService.calculate_refund(policy, hours_before(500), CHECK_IN, 150000, 10000, True)
        assert refund["base_refund"] == 0
        assert refund["rules"] == CUSTOM_POLICY_RULES

    def test_rules_text_for_known_policy(self):
        rules = RefundService.get_refund_policy_rules("moderate")
        assert rules[0].startswith("75% refund")
        rules.append("mutated")
        assert "mutated" not in RefundService.get_refund_policy_rules("moderate")

    def test_after_check_in_lead_is_negative(self):
        refund = RefundService.calculate_refund("flexible", CHECK_IN_AT + timedelta(hours=5), CHECK_IN, 90000)
        assert refund["lead_hours"] < 0
        assert refund["refund_total"] == 0


class TestRefundBounds:
    @pytest.mark.parametrize("policy", ["flexible", "moderate", "strict", "custom"])
    def test_more_notice_never_refunds_less(self, policy):
        totals = [
            RefundService.calculate_refund(policy, hours_before(hours), CHECK_IN, 180000, 15000, True)["refund_total"]
            for hours in range(0, 200, 4)
        ]
        assert totals == sorted(totals)

    @pytest.mark.parametrize("hours", [0, 12, 24, 48, 72, 96, 500])
    def test_refund_never_exceeds_total_paid(self, hours):
        for policy in ("flexible", "moderate", "strict"):
            refund = RefundService.calculate_refund(policy, hours_before(hours), CHECK_IN, 150000, 10000, True)
            assert 0 <= refund["refund_total"] <= 150000


class TestPaymentStatusForRefund:
    def test_full(self):
        assert RefundService.payment_status_for_refund(150000, 150000) == "refunded"

    def test_partial(self):
        assert RefundService.payment_status_for_refund(5000, 150000) == "partially_refunded"

    def test_none(self):
        assert RefundService.payment_status_for_refund(0, 150000) == "not_refundable"
