from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal

from hut.utils.dates import parse_timestamp

DEFAULT_MIN_SERVICE_FEE = 2500


def round_naira(value):
    """Nearest whole naira, halves rounded up."""
    return int(Decimal(str(value or 0)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class PricingService:
    @staticmethod
    def calculate_booking_price(
        price_per_night,
        nights,
        commission_rate,
        pickup_requested=False,
        pickup_fee=0,
        min_service_fee=DEFAULT_MIN_SERVICE_FEE,
    ):
        price_per_night = max(0, float(price_per_night or 0))
        nights = max(0, int(nights or 0))
        commission_rate = max(0.0, float(commission_rate or 0))

        room_subtotal = round_naira(price_per_night * nights)
        computed_fee = round_naira(room_subtotal * commission_rate)
        service_fee = max(int(min_service_fee), computed_fee)
        pickup_total = round_naira(max(0, float(pickup_fee or 0))) if pickup_requested else 0
        total_paid = room_subtotal + service_fee + pickup_total

        return {
            "room_subtotal": room_subtotal,
            "service_fee": service_fee,
            "pickup_total": pickup_total,
            "total_paid": total_paid,
            "hotel_payout": room_subtotal + pickup_total,
            "platform_revenue": service_fee,
            "commission_rate_applied": commission_rate,
        }

    @staticmethod
    def _recommendation(occupancy_rate):
        if occupancy_rate >= 0.8:
            return "Increase by 10%-15% for this category."
        if occupancy_rate >= 0.5:
            return "Keep current rate; test +5% on weekends."
        if occupancy_rate >= 0.3:
            return "Offer 5%-8% discount on mid-week nights."
        return "Run demand campaign and test 10%-12% discount."

    @staticmethod
    def smart_pricing_insights(data, hotel_id, lookback_days=30, now=None):
        now = now or datetime.now(timezone.utc)
        lookback_start = now - timedelta(days=lookback_days)
        insights = []
        for room in data.get("rooms", []):
            if room.get("hotel_id") != hotel_id:
                continue
            booked_nights = 0
            for booking in data.get("bookings", []):
                if booking.get("room_id") != room["id"] or booking.get("status") != "confirmed":
                    continue
                created_at = parse_timestamp(booking.get("created_at"))
                if created_at is None or created_at < lookback_start:
                    continue
                booked_nights += int(booking.get("nights") or 0)

            capacity_nights = int(room.get("total_units") or 0) * lookback_days
            occupancy_rate = booked_nights / capacity_nights if capacity_nights > 0 else 0
            insights.append(
                {
                    "room_id": room["id"],
                    "category": room.get("category"),
                    "base_price": room.get("price_per_night"),
                    "occupancy_rate": occupancy_rate,
                    "booked_nights": booked_nights,
                    "capacity_nights": capacity_nights,
                    "recommendation": PricingService._recommendation(occupancy_rate),
                }
            )
        return insights

