import asyncio

from linkshelf import create_app, get_storage
from linkshelf.config import TestConfig
from linkshelf.services.storage import StorageService
from linkshelf.storage import MemoryBackend, SqlBackend


class MemoryConfig(TestConfig):
    STORAGE_BACKEND = "memory"
    METADATA_CACHE_TTL_SECONDS = 42


def test_create_app_builds_one_storage_service(app):
    storage = get_storage(app)

    assert isinstance(storage, StorageService)
    assert isinstance(storage.backend, SqlBackend)
    assert get_storage(app) is storage
    with app.app_context():
        assert get_storage() is storage


def test_backend_and_cache_come_from_config():
    app = create_app(MemoryConfig)
    storage = get_storage(app)

    assert isinstance(storage.backend, MemoryBackend)
    assert storage.resolver.cache.ttl_seconds == 42
    assert storage.resolver.timeout == TestConfig.METADATA_FETCH_TIMEOUT


def test_separate_apps_do_not_share_state():
    first = get_storage(create_app(MemoryConfig))
    second = get_storage(create_app(MemoryConfig))

    assert first is not second
    assert first.backend is not second.backend


def test_init_db_command(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["init-db"])

    assert result.exit_code == 0
    assert "Initialized Linkshelf database." in result.output


def test_init_db_keeps_existing_rows(app):
    storage = get_storage(app)
    with app.app_context():
        user = asyncio.run(storage.create_user("ada@example.com", "secret"))

    result = app.test_cli_runner().invoke(args=["init-db"])

    assert result.exit_code == 0
    with app.app_context():
        assert asyncio.run(storage.get_user(user.id)).email == "ada@example.com"
