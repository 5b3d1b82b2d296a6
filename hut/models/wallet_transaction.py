from hut.models.base import build_record

WALLET_TRANSACTION_DEFAULTS = {
    "user_id": None,
    "type": "wallet_topup",
    "direction": "credit",
    "amount": 0,
    "signed_amount": 0,
    "description": "",
    "reference": "",
    "related_payment_id": None,
    "balance_after": 0,
}


def new_wallet_transaction(**fields):
    return build_record(WALLET_TRANSACTION_DEFAULTS, **fields)
