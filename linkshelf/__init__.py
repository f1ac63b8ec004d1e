import logging

from flask import Flask, current_app
from flask.logging import default_handler

from linkshelf.config import Config
from linkshelf.extensions import db
from linkshelf.services.cache import TTLCache
from linkshelf.services.metadata import MetadataResolver
from linkshelf.services.storage import StorageService
from linkshelf.storage import build_backend

EXTENSION_KEY = "linkshelf"


def _configure_logging(app: Flask) -> None:
    logger = logging.getLogger("linkshelf")
    logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))
    if default_handler not in logger.handlers:
        logger.addHandler(default_handler)


def build_storage(config) -> StorageService:
    resolver = MetadataResolver(
        cache=TTLCache(ttl_seconds=config["METADATA_CACHE_TTL_SECONDS"]),
        timeout=config["METADATA_FETCH_TIMEOUT"],
        max_bytes=config["METADATA_MAX_BYTES"],
        favicon_template=config["FAVICON_SERVICE_URL"],
    )
    return StorageService(build_backend(config["STORAGE_BACKEND"]), resolver)


def get_storage(app: Flask | None = None) -> StorageService:
    app = app or current_app
    return app.extensions[EXTENSION_KEY]


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)
    _configure_logging(app)

    db.init_app(app)
    app.extensions[EXTENSION_KEY] = build_storage(app.config)

    @app.cli.command("init-db")
    def init_db_command():
        db.create_all()
        print("Initialized Linkshelf database.")

    with app.app_context():
        db.create_all()

    app.logger.info(
        "storage backend %s ready", app.extensions[EXTENSION_KEY].backend.name
    )
    return app
