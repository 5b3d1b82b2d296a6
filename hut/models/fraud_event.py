from hut.models.base import build_record

FRAUD_EVENT_DEFAULTS = {
    "hotel_id": None,
    "email": "",
    "phone": "",
    "score": 0,
    "flags": [],
    "action": "review",
}


def new_fraud_event(**fields):
    return build_record(FRAUD_EVENT_DEFAULTS, **fields)
