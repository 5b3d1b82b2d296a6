from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from hut.extensions import get_services

api_wallet_bp = Blueprint("api_wallet", __name__)


@api_wallet_bp.get("")
@login_required
def wallet_summary():
    return jsonify(get_services().wallet.summary(current_user.id))


@api_wallet_bp.post("/topup")
@login_required
def top_up():
    payload = request.get_json(silent=True) or {}
    result = get_services().wallet.top_up(current_user.id, payload.get("amount"), payload.get("reference"))
    return jsonify(result), 201
