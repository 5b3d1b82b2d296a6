from functools import wraps

from flask import abort
from flask_login import current_user

from hut.services.auth_service import can_access_hotel


def role_required(*roles):
    def wrapper(func):
        @wraps(func)
        def inner(*args, **kwargs):
            if not current_user.is_authenticated:
                abort(401)
            if current_user.role not in roles:
                abort(403)
            return func(*args, **kwargs)

        return inner

    return wrapper


def hotel_access_required(func):
    """Route must take ``hotel_id``; hotel admins only reach their own hotels."""

    @wraps(func)
    def inner(*args, **kwargs):
        if not current_user.is_authenticated:
            abort(401)
        if not can_access_hotel(current_user.record, kwargs.get("hotel_id")):
            abort(403)
        return func(*args, **kwargs)

    return inner
