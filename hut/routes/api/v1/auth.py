from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user

from hut.extensions import get_services, limiter
from hut.models import SessionUser

api_auth_bp = Blueprint("api_auth", __name__)


@api_auth_bp.post("/register")
@limiter.limit("10 per minute")
def register():
    payload = request.get_json(silent=True) or {}
    services = get_services()
    user = services.auth.register_customer(
        name=payload.get("name"),
        email=payload.get("email"),
        phone=payload.get("phone"),
        password=payload.get("password"),
        confirm_password=payload.get("confirm_password"),
    )
    login_user(SessionUser(services.auth.get_user(user["id"])))
    return jsonify(user), 201


@api_auth_bp.post("/login")
@limiter.limit("20 per minute")
def login():
    payload = request.get_json(silent=True) or {}
    services = get_services()
    user = services.auth.authenticate_user(payload.get("email"), payload.get("password"))
    login_user(SessionUser(services.auth.get_user(user["id"])), remember=bool(payload.get("remember")))
    return jsonify(user)


@api_auth_bp.post("/logout")
@login_required
def logout():
    logout_user()
    return jsonify({"ok": True})


@api_auth_bp.get("/me")
@login_required
def me():
    return jsonify(current_user.record)
