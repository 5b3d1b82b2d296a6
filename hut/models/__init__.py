from hut.models.booking import (
    BOOKING_STATUSES,
    CAPACITY_BLOCKING_STATUSES,
    PAYMENT_STATUSES,
    can_transition,
    new_booking,
)
from hut.models.document import COLLECTION_DEFAULTS, empty_document, repair_document
from hut.models.fraud_event import new_fraud_event
from hut.models.hotel import CANCELLATION_POLICIES
from hut.models.notification import new_notification
from hut.models.payment import new_payment, new_payment_session
from hut.models.user import ROLES, SessionUser, new_user, sanitize_user
from hut.models.wallet_transaction import new_wallet_transaction

__all__ = [
    "BOOKING_STATUSES",
    "CANCELLATION_POLICIES",
    "CAPACITY_BLOCKING_STATUSES",
    "COLLECTION_DEFAULTS",
    "PAYMENT_STATUSES",
    "ROLES",
    "SessionUser",
    "can_transition",
    "empty_document",
    "new_booking",
    "new_fraud_event",
    "new_notification",
    "new_payment",
    "new_payment_session",
    "new_user",
    "new_wallet_transaction",
    "repair_document",
    "sanitize_user",
]
