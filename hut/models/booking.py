from hut.models.base import build_record

BOOKING_STATUSES = ("pending_payment", "confirmed", "payment_failed", "cancelled", "checked_in")
PAYMENT_STATUSES = ("pending", "paid", "failed", "refunded", "partially_refunded", "not_refundable")

# Statuses that hold a room unit for the stay dates.
CAPACITY_BLOCKING_STATUSES = frozenset({"confirmed", "checked_in"})

BOOKING_TRANSITIONS = {
    "pending_payment": {"confirmed", "payment_failed"},
    "confirmed": {"cancelled", "checked_in"},
    "checked_in": set(),
    "payment_failed": set(),
    "cancelled": set(),
}

BOOKING_DEFAULTS = {
    "hotel_id": None,
    "room_id": None,
    "room_category": "",
    "customer_user_id": None,
    "customer_name": "",
    "email": "",
    "phone": "",
    "emergency_contact_name": "",
    "emergency_contact_phone": "",
    "check_in_date": None,
    "check_out_date": None,
    "nights": 0,
    "guests": 1,
    "pickup_requested": False,
    "special_request": "",
    "pricing": {},
    "refund": None,
    "fraud_score": 0,
    "fraud_flags": [],
    "status": "pending_payment",
    "payment_status": "pending",
    "cancellation_policy": "moderate",
    "payment_provider": None,
    "payment_reference": None,
    "payment_external_id": None,
    "payment_error": None,
    "paid_at": None,
    "cancelled_at": None,
    "checked_in_at": None,
}


def new_booking(**fields):
    return build_record(BOOKING_DEFAULTS, **fields)


def can_transition(booking, new_status):
    return new_status in BOOKING_TRANSITIONS.get(booking.get("status"), set())
