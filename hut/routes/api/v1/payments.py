from flask import Blueprint, jsonify, request

from hut.extensions import get_services

api_payment_bp = Blueprint("api_payment", __name__)


@api_payment_bp.get("/callback/<provider>")
def payment_callback(provider):
    reference = (request.args.get("reference") or request.args.get("tx_ref") or "").strip()
    booking = get_services().bookings.confirm_payment(provider, reference, callback_params=request.args.to_dict())
    return jsonify({"booking_id": booking["id"], "status": booking["status"]})
