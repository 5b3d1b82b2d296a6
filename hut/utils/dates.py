"""Date-only and half-open interval helpers shared by availability, pricing and refunds.

Stay dates are stored as ``YYYY-MM-DD`` strings and always interpreted as UTC
midnight, so the same string maps to the same instant on every host.
"""

import math
from datetime import date, datetime, timedelta, timezone

from hut.errors import AppError

SECONDS_PER_DAY = 24 * 60 * 60


def to_date_only(value):
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    raw = str(value or "").strip()
    if len(raw) == 10:
        return datetime.strptime(raw, "%Y-%m-%d").replace(tzinfo=timezone.utc)

    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def date_ranges_overlap(start_a, end_a, start_b, end_b):
    # Half-open: a stay ending on the day another starts does not overlap it.
    a_start = to_date_only(start_a)
    a_end = to_date_only(end_a)
    b_start = to_date_only(start_b)
    b_end = to_date_only(end_b)
    return a_start < b_end and b_start < a_end


def calculate_nights(check_in_date, check_out_date):
    delta = to_date_only(check_out_date) - to_date_only(check_in_date)
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def validate_stay_dates(check_in_date, check_out_date):
    try:
        nights = calculate_nights(check_in_date, check_out_date)
    except (TypeError, ValueError) as exc:
        raise AppError("Check-in and check-out must be valid dates (YYYY-MM-DD).", 400) from exc
    if nights <= 0:
        raise AppError("Check-out must be later than check-in.", 400)
    return nights


def utc_now():
    return datetime.now(timezone.utc)


def iso_now():
    return utc_now().isoformat()


def iso_date_offset(days_from_today, today=None):
    base = today or utc_now().date()
    return (base + timedelta(days=days_from_today)).isoformat()


def parse_timestamp(value):
    """Like ``to_date_only`` but returns None for empty or malformed values."""
    if not value:
        return None
    try:
        return to_date_only(value)
    except (TypeError, ValueError):
        return None
