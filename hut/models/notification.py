from hut.models.base import build_record

NOTIFICATION_DEFAULTS = {
    "booking_id": None,
    "hotel_id": None,
    "channel": "sms",
    "recipient": "",
    "body": "",
    "status": "queued",
}


def new_notification(**fields):
    return build_record(NOTIFICATION_DEFAULTS, **fields)
