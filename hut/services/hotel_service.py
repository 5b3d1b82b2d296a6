import copy
import logging
import re
from datetime import timedelta

from hut.errors import AppError
from hut.models import CANCELLATION_POLICIES, new_payment, new_user
from hut.models.base import build_record
from hut.models.hotel import HOTEL_DEFAULTS, ROOM_DEFAULTS
from hut.services.auth_service import find_user_by_email
from hut.services.availability_service import AvailabilityService
from hut.services.pricing_service import PricingService
from hut.services.results import Outcome
from hut.utils.dates import iso_date_offset, iso_now, parse_timestamp, utc_now, validate_stay_dates

logger = logging.getLogger(__name__)

ONBOARDING_ROOM_CATEGORIES = (
    ("standard", "Standard"),
    ("deluxe", "Deluxe"),
    ("executive_suite", "Executive Suites"),
)

PREMIUM_LISTING_DAYS = 30

SEARCH_SORTS = ("recommended", "price_asc", "price_desc")

PRIVATE_HOTEL_FIELDS = ("bank_name", "bank_account")


def _slugify(value):
    return re.sub(r"[^a-z0-9]+", "-", (value or "").lower()).strip("-")


def parse_commission_percent(raw):
    """Admin forms send commission as a percentage ("14" or "19.5")."""
    try:
        percent = float(raw)
    except (TypeError, ValueError) as exc:
        raise AppError("Commission rate must be a number.", 400) from exc
    if percent < 0 or percent > 100:
        raise AppError("Commission rate must be between 0 and 100.", 400)
    return round(percent / 100, 4)


def _non_negative_int(raw, label):
    try:
        value = int(round(float(raw)))
    except (TypeError, ValueError) as exc:
        raise AppError(f"{label} must be a number.", 400) from exc
    if value < 0:
        raise AppError(f"{label} cannot be negative.", 400)
    return value


class HotelService:
    def __init__(self, store, auth_service):
        self.store = store
        self.auth = auth_service

    @staticmethod
    def _hotel(data, hotel_id):
        return next((item for item in data["hotels"] if item["id"] == hotel_id), None)

    def onboard_hotel(self, payload):
        name = (payload.get("name") or "").strip()
        admin_email = (payload.get("admin_email") or "").strip().lower()
        admin_password = payload.get("admin_password") or ""
        if not name or not admin_email or not admin_password:
            raise AppError("Hotel name and admin credentials are required.", 400)
        policy = payload.get("cancellation_policy") or "moderate"
        if policy not in CANCELLATION_POLICIES:
            raise AppError("Unknown cancellation policy.", 400)
        commission_rate = parse_commission_percent(payload.get("commission_rate", 12))
        pickup_fee = _non_negative_int(payload.get("pickup_fee", 0), "Pickup fee")
        room_plan = []
        for key, category in ONBOARDING_ROOM_CATEGORIES:
            units = _non_negative_int(payload.get(f"{key}_units", 0), f"{category} units")
            if units:
                price = _non_negative_int(payload.get(f"{key}_price", 0), f"{category} price")
                room_plan.append((category, units, price))
        password_hash = self.auth.hash_password(admin_password)

        def mutator(data):
            if find_user_by_email(data, admin_email):
                return Outcome.failure("An account with this admin email already exists.", 409)
            hotel_id = f"hotel-{_slugify(name)}"
            if self._hotel(data, hotel_id):
                return Outcome.failure("A hotel with this name already exists.", 409)

            hotel = build_record(
                HOTEL_DEFAULTS,
                id=hotel_id,
                name=name,
                location=(payload.get("location") or "").strip(),
                address=(payload.get("address") or "").strip(),
                about=(payload.get("about") or "").strip(),
                bank_name=(payload.get("bank_name") or "").strip(),
                bank_account=(payload.get("bank_account") or "").strip(),
                cancellation_policy=policy,
                commission_rate=commission_rate,
                pickup_fee=pickup_fee,
            )
            data["hotels"].append(hotel)
            for category, units, price in room_plan:
                data["rooms"].append(
                    build_record(
                        ROOM_DEFAULTS,
                        id=f"room-{_slugify(name)}-{_slugify(category)}",
                        hotel_id=hotel_id,
                        category=category,
                        price_per_night=price,
                        total_units=units,
                    )
                )
            data["users"].append(
                new_user(
                    role="hotel_admin",
                    name=(payload.get("admin_name") or f"{name} Admin").strip(),
                    email=admin_email,
                    password_hash=password_hash,
                    hotel_ids=[hotel_id],
                )
            )
            return Outcome.success(copy.deepcopy(hotel))

        hotel = self.store.write(mutator).unwrap()
        logger.info("Onboarded hotel %s", hotel["id"])
        return hotel

    def _update_hotel(self, hotel_id, changes):
        def mutator(data):
            hotel = self._hotel(data, hotel_id)
            if not hotel:
                return Outcome.failure("Hotel not found.", 404)
            hotel.update(changes)
            hotel["updated_at"] = iso_now()
            return Outcome.success(copy.deepcopy(hotel))

        return self.store.write(mutator).unwrap()

    def update_commission(self, hotel_id, commission_percent):
        return self._update_hotel(hotel_id, {"commission_rate": parse_commission_percent(commission_percent)})

    def update_profile(self, hotel_id, payload):
        changes = {}
        for field in ("name", "location", "address", "about", "bank_name", "bank_account"):
            if field in payload:
                changes[field] = (payload.get(field) or "").strip()
        if "cancellation_policy" in payload:
            if payload["cancellation_policy"] not in CANCELLATION_POLICIES:
                raise AppError("Unknown cancellation policy.", 400)
            changes["cancellation_policy"] = payload["cancellation_policy"]
        if "commission_rate" in payload:
            changes["commission_rate"] = parse_commission_percent(payload["commission_rate"])
        if "pickup_fee" in payload:
            changes["pickup_fee"] = _non_negative_int(payload["pickup_fee"], "Pickup fee")
        if not changes:
            raise AppError("Nothing to update.", 400)
        return self._update_hotel(hotel_id, changes)

    def update_room(self, hotel_id, room_id, price_per_night=None, total_units=None):
        changes = {}
        if price_per_night is not None:
            changes["price_per_night"] = _non_negative_int(price_per_night, "Price per night")
        if total_units is not None:
            changes["total_units"] = _non_negative_int(total_units, "Total units")
        if not changes:
            raise AppError("Nothing to update.", 400)

        def mutator(data):
            room = next(
                (item for item in data["rooms"] if item["id"] == room_id and item.get("hotel_id") == hotel_id), None
            )
            if not room:
                return Outcome.failure("Room not found.", 404)
            room.update(changes)
            return Outcome.success(copy.deepcopy(room))

        return self.store.write(mutator).unwrap()

    def settle_payouts(self, hotel_id):
        """Mark every unsettled ledger row for the hotel as paid out."""

        def mutator(data):
            if not self._hotel(data, hotel_id):
                return Outcome.failure("Hotel not found.", 404)
            settled_at = iso_now()
            rows = [item for item in data["payments"] if item.get("hotel_id") == hotel_id and not item.get("settled")]
            for row in rows:
                row["settled"] = True
                row["settled_at"] = settled_at
            return Outcome.success(
                {"settled_count": len(rows), "hotel_payout": sum(row.get("hotel_payout", 0) for row in rows)}
            )

        result = self.store.write(mutator).unwrap()
        logger.info("Settled %s payment rows for hotel %s", result["settled_count"], hotel_id)
        return result

    def activate_premium(self, hotel_id, user_id=None, now=None):
        """Start or extend a premium listing by one billing period.

        A renewal before expiry extends from the current expiry; a lapsed
        listing restarts from ``now``. The fee is booked as platform revenue.
        """
        now = now or utc_now()

        def mutator(data):
            hotel = self._hotel(data, hotel_id)
            if not hotel:
                return Outcome.failure("Hotel not found.", 404)

            fee = int(data["platform"].get("premium_subscription_monthly_fee") or 0)
            current_expiry = parse_timestamp(hotel.get("premium_listing_expires_at"))
            starts_at = max(current_expiry, now) if current_expiry else now
            expires_at = starts_at + timedelta(days=PREMIUM_LISTING_DAYS)
            hotel["premium_listing_active"] = True
            hotel["premium_listing_expires_at"] = expires_at.isoformat()

            payment = new_payment(
                hotel_id=hotel_id,
                user_id=user_id,
                transaction_ref=f"HUT-PREM-{now:%Y%m%d%H%M%S}",
                transaction_type="premium_subscription",
                payment_provider="manual",
                payment_external_id="manual",
                gross_amount=fee,
                hotel_payout=0,
                platform_earning=fee,
                commission_rate=0,
                hotel_bank_account=hotel.get("bank_account"),
                platform_bank_account=data["platform"].get("bank_account"),
                created_at=now.isoformat(),
            )
            data["payments"].append(payment)
            return Outcome.success({"hotel": copy.deepcopy(hotel), "payment": copy.deepcopy(payment)})

        result = self.store.write(mutator).unwrap()
        logger.info("Premium listing for %s active until %s", hotel_id, result["hotel"]["premium_listing_expires_at"])
        return result

    @staticmethod
    def premium_active(hotel, now=None):
        if not hotel.get("premium_listing_active"):
            return False
        expires_at = parse_timestamp(hotel.get("premium_listing_expires_at"))
        return expires_at is None or expires_at > (now or utc_now())

    def search_hotels(
        self,
        destination="",
        check_in_date=None,
        check_out_date=None,
        min_price=0,
        max_price=None,
        sort="recommended",
        now=None,
    ):
        check_in_date = check_in_date or iso_date_offset(1)
        check_out_date = check_out_date or iso_date_offset(2)
        validate_stay_dates(check_in_date, check_out_date)
        min_price = _non_negative_int(min_price or 0, "Minimum price")
        max_price = _non_negative_int(max_price, "Maximum price") if max_price not in (None, "") else 0
        if sort not in SEARCH_SORTS:
            sort = "recommended"
        query = (destination or "").strip().lower()

        snapshot = self.store.snapshot()
        results = []
        for hotel in snapshot["hotels"]:
            searchable = " ".join(
                str(hotel.get(field) or "") for field in ("name", "location", "address", "about")
            ).lower()
            if query and query not in searchable:
                continue
            rooms = [room for room in snapshot["rooms"] if room.get("hotel_id") == hotel["id"]]
            lowest = min((int(room.get("price_per_night") or 0) for room in rooms), default=0)
            if lowest < min_price or (max_price and lowest > max_price):
                continue
            availability = AvailabilityService.hotel_availability(snapshot, hotel["id"], check_in_date, check_out_date)
            results.append(
                dict(
                    {key: value for key, value in hotel.items() if key not in PRIVATE_HOTEL_FIELDS},
                    premium_listing_active=self.premium_active(hotel, now),
                    min_price=lowest,
                    rooms_available=sum(row["available_units"] for row in availability),
                    room_type_preview=[room.get("category") for room in rooms[:3]],
                )
            )

        if sort == "price_asc":
            results.sort(key=lambda item: item["min_price"])
        elif sort == "price_desc":
            results.sort(key=lambda item: item["min_price"], reverse=True)
        else:
            results.sort(key=lambda item: (not item["premium_listing_active"], (item.get("name") or "").lower()))

        return {
            "check_in_date": check_in_date,
            "check_out_date": check_out_date,
            "sort": sort,
            "count": len(results),
            "total": len(snapshot["hotels"]),
            "hotels": results,
        }

    def hotel_dashboard(self, hotel_id, booking_reference=None, check_in_date=None, check_out_date=None):
        snapshot = self.store.snapshot()
        hotel = self._hotel(snapshot, hotel_id)
        if not hotel:
            raise AppError("Hotel not found.", 404)
        check_in_date = check_in_date or iso_date_offset(1)
        check_out_date = check_out_date or iso_date_offset(2)
        validate_stay_dates(check_in_date, check_out_date)

        bookings = [item for item in snapshot["bookings"] if item.get("hotel_id") == hotel_id]
        bookings.sort(key=lambda item: item.get("created_at") or "", reverse=True)
        reference = (booking_reference or "").strip().lower()
        matches = None
        if reference:
            matches = [item for item in bookings if item["id"].lower().startswith(reference)]

        payments = [item for item in snapshot["payments"] if item.get("hotel_id") == hotel_id]
        return {
            "hotel": hotel,
            "availability": AvailabilityService.hotel_availability(snapshot, hotel_id, check_in_date, check_out_date),
            "pricing_insights": PricingService.smart_pricing_insights(snapshot, hotel_id),
            "bookings": bookings,
            "booking_matches": matches,
            "totals": {
                "gross": sum(item.get("gross_amount", 0) for item in payments),
                "hotel_payout": sum(item.get("hotel_payout", 0) for item in payments),
                "unsettled_payout": sum(item.get("hotel_payout", 0) for item in payments if not item.get("settled")),
                "confirmed_bookings": sum(1 for item in bookings if item.get("status") == "confirmed"),
            },
        }

    def pricing_insights(self, hotel_id, lookback_days=30):
        if not lookback_days or lookback_days <= 0:
            raise AppError("Lookback window must be a positive number of days.", 400)
        snapshot = self.store.snapshot()
        if not self._hotel(snapshot, hotel_id):
            raise AppError("Hotel not found.", 404)
        return {
            "hotel_id": hotel_id,
            "lookback_days": lookback_days,
            "insights": PricingService.smart_pricing_insights(snapshot, hotel_id, lookback_days=lookback_days),
        }

    def owner_summary(self):
        snapshot = self.store.snapshot()
        by_hotel = {}
        for payment in snapshot["payments"]:
            hotel_id = payment.get("hotel_id")
            if not hotel_id:
                continue
            row = by_hotel.setdefault(hotel_id, {"hotel_id": hotel_id, "gross": 0, "platform_earning": 0})
            row["gross"] += payment.get("gross_amount", 0)
            row["platform_earning"] += payment.get("platform_earning", 0)
        names = {hotel["id"]: hotel.get("name") for hotel in snapshot["hotels"]}
        for row in by_hotel.values():
            row["hotel_name"] = names.get(row["hotel_id"], "")
        return {
            "platform_revenue": sum(item.get("platform_earning", 0) for item in snapshot["payments"]),
            "gross_volume": sum(
                item.get("gross_amount", 0)
                for item in snapshot["payments"]
                if item.get("transaction_type") in {"booking_payment", "refund"}
            ),
            "premium_revenue": sum(
                item.get("platform_earning", 0)
                for item in snapshot["payments"]
                if item.get("transaction_type") == "premium_subscription"
            ),
            "fraud_events": len(snapshot["fraud_events"]),
            "hotels": sorted(by_hotel.values(), key=lambda row: row["platform_earning"], reverse=True),
        }

    def platform_stats(self):
        snapshot = self.store.snapshot()
        return {
            "hotels": len(snapshot["hotels"]),
            "rooms": sum(int(room.get("total_units") or 0) for room in snapshot["rooms"]),
            "confirmed_bookings": sum(
                1 for item in snapshot["bookings"] if item.get("status") in {"confirmed", "checked_in"}
            ),
        }
