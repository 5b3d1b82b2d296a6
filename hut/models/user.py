from flask_login import UserMixin

from hut.models.base import build_record

ROLES = ("customer", "hotel_admin", "platform_admin")

USER_DEFAULTS = {
    "role": "customer",
    "name": "",
    "email": "",
    "phone": "",
    "hotel_ids": [],
    "password_hash": "",
    "wallet_balance": 0,
    "is_active_user": True,
}


def new_user(**fields):
    return build_record(USER_DEFAULTS, **fields)


def sanitize_user(user):
    if not user:
        return None
    return {key: value for key, value in user.items() if key != "password_hash"}


class SessionUser(UserMixin):
    """Read-only view of a user record for Flask-Login."""

    def __init__(self, record):
        self.record = sanitize_user(record)
        self.id = record["id"]
        self.role = record.get("role", "customer")
        self.email = record.get("email", "")
        self.hotel_ids = list(record.get("hotel_ids") or [])

    @property
    def is_active(self):
        return bool(self.record.get("is_active_user", True))
