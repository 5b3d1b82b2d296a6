from hut.models.base import build_record

TRANSACTION_TYPES = (
    "booking_payment",
    "refund",
    "premium_subscription",
    "wallet_topup",
    "marketplace_plan",
    "marketplace_unlock",
)

PAYMENT_DEFAULTS = {
    "booking_id": None,
    "hotel_id": None,
    "user_id": None,
    "transaction_ref": "",
    "transaction_type": "booking_payment",
    "payment_provider": "n/a",
    "payment_external_id": "n/a",
    "gross_amount": 0,
    "hotel_payout": 0,
    "platform_earning": 0,
    "commission_rate": 0,
    "hotel_bank_account": None,
    "platform_bank_account": None,
    "settled": False,
    "settled_at": None,
}

PAYMENT_SESSION_STATUSES = ("pending", "paid", "failed")

PAYMENT_SESSION_DEFAULTS = {
    "booking_id": None,
    "provider": "mock",
    "reference": "",
    "payment_url": None,
    "status": "pending",
    "verified_at": None,
}


def new_payment(**fields):
    return build_record(PAYMENT_DEFAULTS, **fields)


def new_payment_session(**fields):
    return build_record(PAYMENT_SESSION_DEFAULTS, **fields)
