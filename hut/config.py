import os
from datetime import timedelta


def env_flag(name, default=False):
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes"}


class BaseConfig:
    APP_NAME = "HuT!"
    SECRET_KEY = os.getenv("SECRET_KEY", "hut-dev-session-secret")
    DATA_FILE_PATH = os.getenv("DATA_FILE_PATH", "instance/hut-data.json")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    CACHE_TYPE = os.getenv("CACHE_TYPE", "SimpleCache")
    CACHE_DEFAULT_TIMEOUT = int(os.getenv("CACHE_DEFAULT_TIMEOUT", "120"))
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_DEFAULT = os.getenv("RATELIMIT_DEFAULT", "200 per day;80 per hour")
    BCRYPT_LOG_ROUNDS = int(os.getenv("BCRYPT_LOG_ROUNDS", "12"))

    SESSION_COOKIE_NAME = "hut.sid"
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = env_flag("SESSION_SECURE_COOKIE")
    PERMANENT_SESSION_LIFETIME = timedelta(days=int(os.getenv("SESSION_DAYS", "7")))
    REMEMBER_COOKIE_HTTPONLY = True

    MIN_PASSWORD_LENGTH = int(os.getenv("MIN_PASSWORD_LENGTH", "8"))
    MIN_SERVICE_FEE = 2500
    DEFAULT_COMMISSION_RATE = float(os.getenv("DEFAULT_COMMISSION_RATE", "0.12"))

    FRAUD_BLOCK_THRESHOLD = 70
    FRAUD_REVIEW_THRESHOLD = 40
    FRAUD_VELOCITY_WINDOW_MINUTES = 60
    FRAUD_VELOCITY_MAX_COUNT = 3
    FRAUD_HIGH_VALUE_NAIRA = 700000

    PAYMENT_PROVIDER = os.getenv("PAYMENT_PROVIDER", "mock").lower()
    MOCK_PAYMENT_MODE = os.getenv("MOCK_PAYMENT_MODE", "instant").lower()
    PAYMENT_TIMEOUT_SECONDS = int(os.getenv("PAYMENT_TIMEOUT_SECONDS", "15"))
    BASE_URL = os.getenv("BASE_URL", "http://localhost:5000")

    SENTRY_DSN = os.getenv("SENTRY_DSN")


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    SESSION_COOKIE_SECURE = False


class ProductionConfig(BaseConfig):
    DEBUG = False
    TESTING = False
    SESSION_COOKIE_SECURE = True


class TestingConfig(BaseConfig):
    TESTING = True
    DATA_FILE_PATH = "instance/hut-test-data.json"
    CACHE_TYPE = "NullCache"
    RATELIMIT_ENABLED = False
    BCRYPT_LOG_ROUNDS = 4
    MOCK_PAYMENT_MODE = "instant"


config_by_env = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


def settings_from(config_class):
    """Plain dict of the upper-case settings on a config class."""
    return {key: getattr(config_class, key) for key in dir(config_class) if key.isupper()}
