from flask import Blueprint, jsonify, request
from flask_login import login_required

from hut.decorators import hotel_access_required
from hut.extensions import get_services
from hut.utils.dates import iso_date_offset

api_hotel_bp = Blueprint("api_hotel", __name__)


@api_hotel_bp.get("")
def search():
    return jsonify(
        get_services().hotels.search_hotels(
            destination=request.args.get("destination", ""),
            check_in_date=request.args.get("check_in_date"),
            check_out_date=request.args.get("check_out_date"),
            min_price=request.args.get("min_price", 0, type=int),
            max_price=request.args.get("max_price", 0, type=int),
            sort=request.args.get("sort", "recommended"),
        )
    )


@api_hotel_bp.get("/<hotel_id>/availability")
def availability(hotel_id):
    check_in_date = request.args.get("check_in_date") or iso_date_offset(1)
    check_out_date = request.args.get("check_out_date") or iso_date_offset(2)
    return jsonify(get_services().bookings.hotel_availability(hotel_id, check_in_date, check_out_date))


@api_hotel_bp.get("/<hotel_id>/pricing-insights")
@login_required
@hotel_access_required
def pricing_insights(hotel_id):
    lookback_days = request.args.get("lookback_days", 30, type=int)
    return jsonify(get_services().hotels.pricing_insights(hotel_id, lookback_days=lookback_days))
