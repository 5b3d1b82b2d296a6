import logging

from hut.errors import AppError
from hut.extensions import bcrypt
from hut.models import new_user, sanitize_user
from hut.services.results import Outcome

logger = logging.getLogger(__name__)


def find_user_by_email(data, email):
    normalized = (email or "").strip().lower()
    return next((user for user in data["users"] if (user.get("email") or "").lower() == normalized), None)


def find_user_by_id(data, user_id):
    return next((user for user in data["users"] if user["id"] == user_id), None)


def can_access_hotel(user, hotel_id):
    if not user:
        return False
    role = user.get("role") if isinstance(user, dict) else getattr(user, "role", None)
    if role == "platform_admin":
        return True
    if role != "hotel_admin":
        return False
    hotel_ids = user.get("hotel_ids") if isinstance(user, dict) else getattr(user, "hotel_ids", None)
    return hotel_id in (hotel_ids or [])


class AuthService:
    def __init__(self, store, config):
        self.store = store
        self.min_password_length = int(config.get("MIN_PASSWORD_LENGTH", 8))

    @staticmethod
    def hash_password(password):
        return bcrypt.generate_password_hash(password).decode("utf-8")

    def _validate_password(self, password, confirm_password=None):
        if len(password or "") < self.min_password_length:
            raise AppError(f"Password must be at least {self.min_password_length} characters.", 400)
        if confirm_password is not None and password != confirm_password:
            raise AppError("Passwords do not match.", 400)

    def register_customer(self, name, email, phone, password, confirm_password=None):
        normalized_email = (email or "").strip().lower()
        name = (name or "").strip()
        phone = (phone or "").strip()
        if not name or not normalized_email or not phone or not password:
            raise AppError("Name, email, phone, and password are required.", 400)
        if "@" not in normalized_email:
            raise AppError("Enter a valid email address.", 400)
        self._validate_password(password, confirm_password)
        password_hash = self.hash_password(password)

        def mutator(data):
            if find_user_by_email(data, normalized_email):
                return Outcome.failure("An account with this email already exists.", 409)
            user = new_user(
                role="customer",
                name=name,
                email=normalized_email,
                phone=phone,
                password_hash=password_hash,
            )
            data["users"].append(user)
            return Outcome.success(sanitize_user(user))

        user = self.store.write(mutator).unwrap()
        logger.info("Registered customer %s", user["id"])
        return user

    def authenticate_user(self, email, password):
        snapshot = self.store.snapshot()
        user = find_user_by_email(snapshot, email)
        if not user:
            raise AppError("Invalid credentials.", 401)

        try:
            is_valid = bcrypt.check_password_hash(user.get("password_hash") or "", password or "")
        except ValueError:
            is_valid = False
        if not is_valid:
            raise AppError("Invalid credentials.", 401)
        if not user.get("is_active_user", True):
            raise AppError("User account is inactive.", 403)
        return sanitize_user(user)

    def get_user(self, user_id):
        return self.store.get_record("users", user_id)
