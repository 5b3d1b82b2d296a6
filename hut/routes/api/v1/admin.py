from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from hut.decorators import hotel_access_required, role_required
from hut.extensions import get_services

api_admin_bp = Blueprint("api_admin", __name__)


@api_admin_bp.get("/owner-dashboard")
@login_required
@role_required("platform_admin")
def owner_dashboard():
    return jsonify(get_services().hotels.owner_summary())


@api_admin_bp.post("/hotels")
@login_required
@role_required("platform_admin")
def onboard_hotel():
    payload = request.get_json(silent=True) or {}
    return jsonify(get_services().hotels.onboard_hotel(payload)), 201


@api_admin_bp.post("/hotels/<hotel_id>/commission")
@login_required
@role_required("platform_admin")
def update_commission(hotel_id):
    payload = request.get_json(silent=True) or {}
    return jsonify(get_services().hotels.update_commission(hotel_id, payload.get("commission_rate")))


@api_admin_bp.post("/hotels/<hotel_id>/settle")
@login_required
@role_required("platform_admin")
def settle_payouts(hotel_id):
    return jsonify(get_services().hotels.settle_payouts(hotel_id))


@api_admin_bp.get("/hotels/<hotel_id>/dashboard")
@login_required
@hotel_access_required
def hotel_dashboard(hotel_id):
    return jsonify(
        get_services().hotels.hotel_dashboard(
            hotel_id,
            booking_reference=request.args.get("booking_reference"),
            check_in_date=request.args.get("check_in_date"),
            check_out_date=request.args.get("check_out_date"),
        )
    )


@api_admin_bp.post("/hotels/<hotel_id>/profile")
@login_required
@role_required("platform_admin")
def update_profile(hotel_id):
    payload = request.get_json(silent=True) or {}
    return jsonify(get_services().hotels.update_profile(hotel_id, payload))


@api_admin_bp.post("/hotels/<hotel_id>/rooms/<room_id>")
@login_required
@hotel_access_required
def update_room(hotel_id, room_id):
    payload = request.get_json(silent=True) or {}
    room = get_services().hotels.update_room(
        hotel_id,
        room_id,
        price_per_night=payload.get("price_per_night"),
        total_units=payload.get("total_units"),
    )
    return jsonify(room)


@api_admin_bp.post("/hotels/<hotel_id>/premium")
@login_required
@role_required("hotel_admin", "platform_admin")
@hotel_access_required
def activate_premium(hotel_id):
    return jsonify(get_services().hotels.activate_premium(hotel_id, user_id=current_user.id)), 201
