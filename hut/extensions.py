from flask import current_app
from flask_bcrypt import Bcrypt
from flask_caching import Cache
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager

bcrypt = Bcrypt()
cache = Cache()
limiter = Limiter(key_func=get_remote_address, default_limits=[])
login_manager = LoginManager()
login_manager.session_protection = "basic"


def get_services():
    """Services wired to the current app's datastore."""
    return current_app.extensions["hut"]
