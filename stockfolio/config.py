import os
from datetime import timedelta

basedir = os.path.abspath(os.path.dirname(__file__))

DEFAULT_JWT_SECRET = "supersecretkey"


class BaseConfig:
    # Use a secure, random key in production
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", DEFAULT_JWT_SECRET)
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=7)
    JWT_TOKEN_LOCATION = ["headers"]

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", f"sqlite:///{os.path.join(basedir, 'stockfolio.db')}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    BCRYPT_LOG_ROUNDS = 10
    CORS_HEADERS = "Content-Type"

    PORT = int(os.environ.get("PORT", 4000))
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


class DevelopmentConfig(BaseConfig):
    DEBUG = True


class ProductionConfig(BaseConfig):
    DEBUG = False
    # Override DATABASE_URL and JWT_SECRET_KEY via environment vars


class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET_KEY = "testing-secret-key-of-sufficient-length"
    BCRYPT_LOG_ROUNDS = 4
    LOG_LEVEL = "DEBUG"
