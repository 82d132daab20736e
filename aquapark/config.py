import os
from datetime import timedelta


def _env_bool(name, default=False):
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False
    ENV = os.getenv("FLASK_ENV", "development")

    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "dev-secret-change-me")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=1)

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

    # Price added meals from the client payload instead of the meal catalog.
    TRUST_CLIENT_MEAL_PRICE = _env_bool("TRUST_CLIENT_MEAL_PRICE")

    @staticmethod
    def init_app(app):
        if not os.getenv("DATABASE_URL"):
            os.makedirs(app.instance_path, exist_ok=True)
            app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{os.path.join(app.instance_path, 'app.db')}"
        else:
            app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL")


class TestConfig(Config):
    TESTING = True
    JWT_SECRET_KEY = "test-secret-key-with-enough-length-for-hs256"
    LOG_LEVEL = "WARNING"
    TRUST_CLIENT_MEAL_PRICE = False

    @staticmethod
    def init_app(app):
        app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite://"
