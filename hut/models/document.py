"""Shape of the persisted JSON document and its repair.

Every collection and per-record default lives here so that a data file written
by an older deployment loads without a migration step.
"""

import copy
import logging

from hut.models.base import backfill
from hut.models.booking import BOOKING_DEFAULTS
from hut.models.fraud_event import FRAUD_EVENT_DEFAULTS
from hut.models.hotel import HOTEL_DEFAULTS, ROOM_DEFAULTS
from hut.models.notification import NOTIFICATION_DEFAULTS
from hut.models.payment import PAYMENT_DEFAULTS, PAYMENT_SESSION_DEFAULTS
from hut.models.user import USER_DEFAULTS
from hut.models.wallet_transaction import WALLET_TRANSACTION_DEFAULTS

logger = logging.getLogger(__name__)

COLLECTION_DEFAULTS = {
    "hotels": HOTEL_DEFAULTS,
    "rooms": ROOM_DEFAULTS,
    "bookings": BOOKING_DEFAULTS,
    "payments": PAYMENT_DEFAULTS,
    "payment_sessions": PAYMENT_SESSION_DEFAULTS,
    "fraud_events": FRAUD_EVENT_DEFAULTS,
    "users": USER_DEFAULTS,
    "wallet_transactions": WALLET_TRANSACTION_DEFAULTS,
    "notifications": NOTIFICATION_DEFAULTS,
}

PLATFORM_DEFAULTS = {
    "name": "HuT!",
    "default_commission_rate": 0.12,
    "bank_name": "",
    "bank_account": "",
    "premium_subscription_monthly_fee": 25000,
}


def empty_document():
    data = {name: [] for name in COLLECTION_DEFAULTS}
    data["platform"] = copy.deepcopy(PLATFORM_DEFAULTS)
    return data


def repair_document(data):
    """Coerce ``data`` into the expected shape in place and return it.

    Missing or non-list collections become empty lists, non-dict records are
    dropped, and missing per-record fields get their defaults. Running it twice
    changes nothing the second time.
    """
    changes = []
    for name, defaults in COLLECTION_DEFAULTS.items():
        rows = data.get(name)
        if not isinstance(rows, list):
            data[name] = []
            changes.append(name)
            continue
        kept = [row for row in rows if isinstance(row, dict)]
        if len(kept) != len(rows):
            data[name] = kept
            changes.append(f"{name}[non-record]")
        for row in kept:
            for field in backfill(row, defaults):
                changes.append(f"{name}.{field}")

    platform = data.get("platform")
    if not isinstance(platform, dict):
        data["platform"] = platform = {}
        changes.append("platform")
    for field in backfill(platform, PLATFORM_DEFAULTS):
        changes.append(f"platform.{field}")

    if changes:
        logger.debug("Repaired datastore shape: %s", ", ".join(sorted(set(changes))))
    return data

