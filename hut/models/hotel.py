CANCELLATION_POLICIES = ("flexible", "moderate", "strict", "custom")

HOTEL_DEFAULTS = {
    "name": "",
    "location": "",
    "address": "",
    "about": "",
    "bank_name": "",
    "bank_account": "",
    "cancellation_policy": "moderate",
    "commission_rate": 0.12,
    "pickup_fee": 0,
    "premium_listing_active": False,
    "premium_listing_expires_at": None,
}

ROOM_DEFAULTS = {
    "hotel_id": None,
    "category": "Standard",
    "price_per_night": 0,
    "total_units": 0,
}
