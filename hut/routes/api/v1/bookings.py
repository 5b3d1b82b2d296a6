from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from hut.decorators import role_required
from hut.extensions import get_services, limiter

api_booking_bp = Blueprint("api_booking", __name__)


def _flag(value):
    return value in (True, 1) or str(value).strip().lower() in {"1", "true", "on", "yes"}


@api_booking_bp.post("")
@login_required
@role_required("customer")
@limiter.limit("10 per minute")
def create_booking():
    payload = request.get_json(silent=True) or {}
    result = get_services().bookings.create_booking(
        customer_id=current_user.id,
        hotel_id=payload.get("hotel_id"),
        room_id=payload.get("room_id"),
        check_in_date=payload.get("check_in_date"),
        check_out_date=payload.get("check_out_date"),
        guests=payload.get("guests", 1),
        pickup_requested=_flag(payload.get("pickup_requested")),
        emergency_contact_name=payload.get("emergency_contact_name"),
        emergency_contact_phone=payload.get("emergency_contact_phone"),
        special_request=payload.get("special_request"),
        callback_base_url=request.host_url,
    )
    return jsonify(result), 201


@api_booking_bp.get("/me")
@login_required
def my_bookings():
    return jsonify(get_services().bookings.bookings_for_customer(current_user.id))


@api_booking_bp.get("/<booking_id>")
@login_required
def show_booking(booking_id):
    return jsonify(get_services().bookings.get_booking(booking_id, current_user.record))


@api_booking_bp.get("/<booking_id>/refund-quote")
@login_required
def refund_quote(booking_id):
    return jsonify(get_services().bookings.refund_quote(booking_id, current_user.record))


@api_booking_bp.post("/<booking_id>/cancel")
@login_required
@role_required("customer")
def cancel_booking(booking_id):
    booking = get_services().bookings.cancel_booking(booking_id, current_user.id)
    return jsonify({"booking": booking, "message": "Booking cancelled successfully."})


@api_booking_bp.post("/<booking_id>/check-in")
@login_required
@role_required("hotel_admin", "platform_admin")
def check_in(booking_id):
    return jsonify(get_services().bookings.check_in(booking_id, current_user.record))
