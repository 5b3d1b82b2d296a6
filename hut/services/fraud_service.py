import re
from datetime import datetime, timedelta, timezone

from hut.utils.dates import parse_timestamp

DISPOSABLE_EMAIL_DOMAINS = frozenset(
    {
        "mailinator.com",
        "tempmail.com",
        "10minutemail.com",
        "guerrillamail.com",
    }
)

NIGERIAN_MOBILE_PATTERN = re.compile(r"^(\+?234|0)[789][01]\d{8}$")

SHORT_NOTICE_HOURS = 6


class FraudService:
    """Additive risk score for one booking attempt.

    Thresholds come from the ``FRAUD_*`` settings. Scoring never raises; the
    caller decides what to do with ``blocked`` and ``review_needed``.
    """

    def __init__(self, config):
        self.block_threshold = int(config.get("FRAUD_BLOCK_THRESHOLD", 70))
        self.review_threshold = int(config.get("FRAUD_REVIEW_THRESHOLD", 40))
        self.velocity_window = timedelta(minutes=int(config.get("FRAUD_VELOCITY_WINDOW_MINUTES", 60)))
        self.velocity_max_count = int(config.get("FRAUD_VELOCITY_MAX_COUNT", 3))
        self.high_value_naira = int(config.get("FRAUD_HIGH_VALUE_NAIRA", 700000))

    def recent_bookings_for_identity(self, data, email, phone, now):
        window_start = now - self.velocity_window
        count = 0
        for booking in data.get("bookings", []):
            created_at = parse_timestamp(booking.get("created_at"))
            if created_at is None or created_at < window_start:
                continue
            if (email and booking.get("email") == email) or (phone and booking.get("phone") == phone):
                count += 1
        return count

    def assess(self, data, email, phone, check_in_date, amount, now=None):
        now = now or datetime.now(timezone.utc)
        email = (email or "").strip()
        phone = (phone or "").strip()
        score = 0
        flags = []

        if self.recent_bookings_for_identity(data, email, phone, now) >= self.velocity_max_count:
            score += 40
            flags.append("High booking velocity detected for same email/phone.")

        if (amount or 0) >= self.high_value_naira:
            score += 25
            flags.append("High-value transaction threshold reached.")

        domain = email.rpartition("@")[2].lower() if "@" in email else ""
        if domain in DISPOSABLE_EMAIL_DOMAINS:
            score += 25
            flags.append("Disposable email domain detected.")

        if not NIGERIAN_MOBILE_PATTERN.match(phone):
            score += 15
            flags.append("Phone number does not match expected Nigerian mobile format.")

        check_in = parse_timestamp(check_in_date)
        if check_in is not None and (check_in - now).total_seconds() / 3600 <= SHORT_NOTICE_HOURS:
            score += 20
            flags.append("Same-day, short-notice booking.")

        return {
            "score": score,
            "flags": flags,
            "blocked": score >= self.block_threshold,
            "review_needed": score >= self.review_threshold,
        }
