from hut.services.pricing_service import round_naira
from hut.utils.dates import to_date_only

PICKUP_REFUND_CUTOFF_HOURS = 24

PICKUP_RULE = "Pickup add-on is fully refundable only if cancelled at least 24 hours before check-in"

# Brackets are (minimum lead hours, refundable fraction), checked top to bottom.
REFUND_POLICIES = {
    "flexible": {
        "brackets": ((48, 1.0), (24, 0.5)),
        "rules": [
            "100% refund if cancelled 48+ hours before check-in",
            "50% refund if cancelled 24-48 hours before check-in",
            "No refund if cancelled within 24 hours",
            PICKUP_RULE,
        ],
    },
    "moderate": {
        "brackets": ((72, 0.75), (24, 0.3)),
        "rules": [
            "75% refund if cancelled 72+ hours before check-in",
            "30% refund if cancelled 24-72 hours before check-in",
            "No refund if cancelled within 24 hours",
            PICKUP_RULE,
        ],
    },
    "strict": {
        "brackets": ((72, 0.5),),
        "rules": [
            "50% refund if cancelled 72+ hours before check-in",
            "No refund if cancelled within 72 hours",
            PICKUP_RULE,
        ],
    },
}

CUSTOM_POLICY_RULES = ["Policy configured by hotel.", "Manual review may be required."]


class RefundService:
    @staticmethod
    def hours_before_check_in(check_in_date, cancelled_at):
        delta = to_date_only(check_in_date) - to_date_only(cancelled_at)
        return delta.total_seconds() / 3600

    @staticmethod
    def get_refund_policy_rules(policy_type):
        policy = REFUND_POLICIES.get(policy_type)
        if policy is None:
            return list(CUSTOM_POLICY_RULES)
        return list(policy["rules"])

    @staticmethod
    def refundable_percent(policy_type, lead_hours):
        policy = REFUND_POLICIES.get(policy_type)
        if policy is None:
            return 0
        for min_hours, fraction in policy["brackets"]:
            if lead_hours >= min_hours:
                return fraction
        return 0

    @staticmethod
    def calculate_refund(policy_type, cancelled_at, check_in_date, total_paid, pickup_total=0, pickup_requested=False):
        lead_hours = RefundService.hours_before_check_in(check_in_date, cancelled_at)
        total_paid = max(0, int(total_paid or 0))
        pickup_total = max(0, pickup_total or 0)
        non_pickup_paid = max(0, total_paid - pickup_total)

        percent = RefundService.refundable_percent(policy_type, lead_hours)
        base_refund = round_naira(non_pickup_paid * percent)
        pickup_refund = (
            round_naira(pickup_total) if pickup_requested and lead_hours >= PICKUP_REFUND_CUTOFF_HOURS else 0
        )
        refund_total = min(total_paid, base_refund + pickup_refund)

        return {
            "policy_type": policy_type,
            "lead_hours": lead_hours,
            "refundable_percent": percent,
            "base_refund": base_refund,
            "pickup_refund": pickup_refund,
            "refund_total": refund_total,
            "rules": RefundService.get_refund_policy_rules(policy_type),
        }

    @staticmethod
    def payment_status_for_refund(refund_total, total_paid):
        if refund_total >= total_paid:
            return "refunded"
        if refund_total > 0:
            return "partially_refunded"
        return "not_refundable"
