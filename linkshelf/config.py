import os
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent.parent


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "default-secret-key")
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", f"sqlite:///{BASE_DIR / 'linkshelf.db'}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    STORAGE_BACKEND = os.environ.get("STORAGE_BACKEND", "sql")
    METADATA_FETCH_TIMEOUT = float(os.environ.get("METADATA_FETCH_TIMEOUT", "10"))
    METADATA_MAX_BYTES = int(os.environ.get("METADATA_MAX_BYTES", "2500000"))
    METADATA_CACHE_TTL_SECONDS = int(
        os.environ.get("METADATA_CACHE_TTL_SECONDS", "300")
    )
    FAVICON_SERVICE_URL = os.environ.get(
        "FAVICON_SERVICE_URL", "https://www.google.com/s2/favicons?domain={host}"
    )
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    STORAGE_BACKEND = "sql"
    METADATA_FETCH_TIMEOUT = 2.0
