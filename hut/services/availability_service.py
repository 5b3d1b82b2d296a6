from hut.models import CAPACITY_BLOCKING_STATUSES
from hut.services.results import Outcome
from hut.utils.dates import date_ranges_overlap

SOLD_OUT_MESSAGE = (
    "Selected room category is no longer available for these dates. "
    "Please choose a different date or room."
)


class AvailabilityService:
    @staticmethod
    def blocks_inventory(booking):
        return booking.get("status") in CAPACITY_BLOCKING_STATUSES

    @staticmethod
    def count_overlapping_bookings(data, room_id, check_in_date, check_out_date, exclude_booking_id=None):
        count = 0
        for booking in data.get("bookings", []):
            if exclude_booking_id and booking.get("id") == exclude_booking_id:
                continue
            if booking.get("room_id") != room_id or not AvailabilityService.blocks_inventory(booking):
                continue
            if date_ranges_overlap(booking["check_in_date"], booking["check_out_date"], check_in_date, check_out_date):
                count += 1
        return count

    @staticmethod
    def room_availability(data, room, check_in_date, check_out_date):
        active = AvailabilityService.count_overlapping_bookings(data, room["id"], check_in_date, check_out_date)
        total_units = int(room.get("total_units") or 0)
        available = max(0, total_units - active)
        return {
            "room_id": room["id"],
            "category": room.get("category"),
            "total_units": total_units,
            "active_bookings": active,
            "available_units": available,
            "sold_out": available <= 0,
        }

    @staticmethod
    def hotel_availability(data, hotel_id, check_in_date, check_out_date):
        return [
            AvailabilityService.room_availability(data, room, check_in_date, check_out_date)
            for room in data.get("rooms", [])
            if room.get("hotel_id") == hotel_id
        ]

    @staticmethod
    def assert_room_available(data, room, check_in_date, check_out_date):
        """Re-check capacity for one room. Call on the live document inside the write lock."""
        availability = AvailabilityService.room_availability(data, room, check_in_date, check_out_date)
        if availability["available_units"] <= 0:
            return Outcome.failure(SOLD_OUT_MESSAGE, 409)
        return Outcome.success(availability)
