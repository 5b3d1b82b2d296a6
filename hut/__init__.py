import logging
import os

from dotenv import load_dotenv
from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from hut.config import config_by_env
from hut.datastore import JsonStore
from hut.errors import register_error_handlers
from hut.extensions import bcrypt, cache, get_services, limiter, login_manager
from hut.models import SessionUser
from hut.routes.api.v1 import api_v1_bp
from hut.routes.platform import platform_bp
from hut.services import build_services


@login_manager.user_loader
def load_user(user_id):
    record = get_services().auth.get_user(user_id)
    return SessionUser(record) if record else None


def create_app(overrides=None, gateway=None):
    load_dotenv()
    env = os.getenv("FLASK_ENV", "development")

    project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_by_env.get(env, config_by_env["development"]))
    if overrides:
        app.config.update(overrides)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)
    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO))

    data_path = app.config["DATA_FILE_PATH"]
    if not os.path.isabs(data_path):
        data_path = os.path.join(project_root, data_path)
    app.config["DATA_FILE_PATH"] = data_path
    os.makedirs(os.path.dirname(data_path), exist_ok=True)

    bcrypt.init_app(app)
    cache.init_app(app)
    limiter.init_app(app)
    login_manager.init_app(app)
    _init_sentry(app)

    store = JsonStore(data_path)
    app.extensions["hut"] = build_services(app.config, store, gateway=gateway)
    app.logger.info("Using datastore %s", data_path)

    register_error_handlers(app)

    app.register_blueprint(platform_bp)
    app.register_blueprint(api_v1_bp, url_prefix="/api/v1")

    return app


def _init_sentry(app):
    dsn = app.config.get("SENTRY_DSN")
    if not dsn:
        return
    try:
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=dsn,
            integrations=[FlaskIntegration()],
            traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.05")),
            environment=os.getenv("FLASK_ENV", "production"),
        )
        app.logger.info("Sentry initialized.")
    except Exception as exc:
        app.logger.warning("Sentry initialization failed: %s", exc)
