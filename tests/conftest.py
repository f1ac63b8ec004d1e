import httpx
import pytest

from linkshelf import create_app
from linkshelf.config import TestConfig
from linkshelf.extensions import db
from linkshelf.services.cache import TTLCache
from linkshelf.services.metadata import MetadataResolver
from linkshelf.services.storage import StorageService
from linkshelf.storage import build_backend


def _key(url):
    parsed = httpx.URL(url)
    return parsed.host, parsed.path or "/"


class FakeWeb:
    """Serves canned pages to an httpx.MockTransport and records each request."""

    def __init__(self):
        self.pages = {}
        self.calls = []

    def add(self, url, html, status=200, headers=None):
        self.pages[_key(url)] = (status, html, headers or {})

    def handler(self, request):
        self.calls.append(str(request.url))
        page = self.pages.get((request.url.host, request.url.path or "/"))
        if page is None:
            raise httpx.ConnectError("connection refused", request=request)
        status, html, headers = page
        return httpx.Response(status, text=html, headers=headers)

    def transport(self):
        return httpx.MockTransport(self.handler)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.drop_all()
        db.create_all()
    yield app


@pytest.fixture
def web():
    return FakeWeb()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def resolver(web, clock):
    return MetadataResolver(
        cache=TTLCache(ttl_seconds=300, clock=clock),
        transport=web.transport(),
        timeout=1.0,
    )


@pytest.fixture(params=["sql", "memory"])
def storage(request, app, resolver):
    service = StorageService(build_backend(request.param), resolver)
    with app.app_context():
        yield service
