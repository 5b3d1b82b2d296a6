from flask import Blueprint, jsonify

from hut.extensions import cache, get_services

platform_bp = Blueprint("platform", __name__)


@platform_bp.get("/health")
def health():
    return jsonify({"ok": True})


@platform_bp.get("/api/platform-stats")
@cache.cached(timeout=120)
def platform_stats():
    return jsonify(get_services().hotels.platform_stats())
