import asyncio

import httpx

from linkshelf.records import Metadata
from linkshelf.services.cache import TTLCache
from linkshelf.services.metadata import (
    MetadataResolver,
    extract_metadata,
    favicon_service_url,
)

FULL_PAGE = """
<html><head>
  <title>  Example
     Domain </title>
  <meta property="og:title" content="OG Example">
  <meta name="description" content="Plain description">
  <meta property="og:description" content="OG description">
  <link rel="shortcut icon" href="/shortcut.ico">
  <link rel="icon" href="/static/icon.png">
</head><body></body></html>
"""

OG_ONLY_PAGE = """
<html><head>
  <meta property="og:title" content="Only OG">
  <meta property="og:description" content="Only OG description">
  <link rel="Shortcut Icon" href="https://cdn.example/fav.ico">
</head></html>
"""


def test_extract_prefers_semantic_tags():
    metadata = extract_metadata(FULL_PAGE, "https://example.com/page")

    assert metadata.title == "Example Domain"
    assert metadata.description == "Plain description"
    assert metadata.icon == "https://example.com/static/icon.png"


def test_extract_falls_back_to_open_graph_and_shortcut_icon():
    metadata = extract_metadata(OG_ONLY_PAGE, "https://example.com/")

    assert metadata.title == "Only OG"
    assert metadata.description == "Only OG description"
    assert metadata.icon == "https://cdn.example/fav.ico"


def test_extract_bare_page_uses_url_and_favicon_service():
    metadata = extract_metadata("<html><body>hi</body></html>", "https://bare.test/x")

    assert metadata.title == "https://bare.test/x"
    assert metadata.description is None
    assert metadata.icon == "https://www.google.com/s2/favicons?domain=bare.test"


def test_blank_title_counts_as_absent():
    html = '<title>   </title><meta property="og:title" content="From OG">'

    assert extract_metadata(html, "https://a.test/").title == "From OG"


def test_favicon_service_url_needs_a_host():
    assert favicon_service_url("https://sub.example.org/a?b=1") == (
        "https://www.google.com/s2/favicons?domain=sub.example.org"
    )
    assert favicon_service_url("not a url") is None


def test_resolve_caches_successful_results(resolver, web, clock):
    web.add("https://example.com/page", FULL_PAGE)

    first = asyncio.run(resolver.resolve("https://example.com/page"))
    clock.advance(299)
    second = asyncio.run(resolver.resolve("https://example.com/page"))

    assert first == second
    assert len(web.calls) == 1

    clock.advance(2)
    asyncio.run(resolver.resolve("https://example.com/page"))
    assert len(web.calls) == 2


def test_resolve_degrades_on_error_status_without_caching(resolver, web):
    web.add("https://down.test/", "<title>Server Error</title>", status=503)

    first = asyncio.run(resolver.resolve("https://down.test/"))
    second = asyncio.run(resolver.resolve("https://down.test/"))

    assert first == Metadata(title="https://down.test/", description=None, icon=None)
    assert second == first
    assert len(web.calls) == 2


def test_resolve_degrades_on_connection_error(resolver, web):
    metadata = asyncio.run(resolver.resolve("https://unreachable.test/"))

    assert metadata.title == "https://unreachable.test/"
    assert metadata.icon is None
    assert len(resolver.cache) == 0


def test_resolve_recovers_after_transient_failure(resolver, web):
    asyncio.run(resolver.resolve("https://flaky.test/"))
    web.add("https://flaky.test/", "<title>Back up</title>")

    metadata = asyncio.run(resolver.resolve("https://flaky.test/"))

    assert metadata.title == "Back up"


def test_resolve_is_total_for_garbage_input(resolver):
    for url in ["not a url", "", "http://", "ftp://files.test/x", "https://[::1"]:
        metadata = asyncio.run(resolver.resolve(url))
        assert metadata.title
        assert metadata.description is None


def test_resolve_tolerates_malformed_html(resolver, web):
    web.add("https://broken.test/", "<html><head><title>Broken<meta <<<>>> </head")

    metadata = asyncio.run(resolver.resolve("https://broken.test/"))

    assert metadata.title


def test_resolve_times_out_slow_fetches(web):
    async def slow_handler(request):
        await asyncio.sleep(5)
        return httpx.Response(200, text="<title>Too late</title>")

    resolver = MetadataResolver(
        cache=TTLCache(), transport=httpx.MockTransport(slow_handler), timeout=0.05
    )

    metadata = asyncio.run(resolver.resolve("https://slow.test/"))

    assert metadata.title == "https://slow.test/"
    assert len(resolver.cache) == 0


def test_concurrent_resolves_of_same_url_both_succeed(resolver, web):
    web.add("https://same.test/", "<title>Same</title>")

    async def resolve_twice():
        return await asyncio.gather(
            resolver.resolve("https://same.test/"),
            resolver.resolve("https://same.test/"),
        )

    results = asyncio.run(resolve_twice())

    assert [m.title for m in results] == ["Same", "Same"]
    assert 1 <= len(web.calls) <= 2


def test_body_is_truncated_at_max_bytes(web):
    web.add("https://big.test/", "<title>Big</title>" + "x" * 10_000)
    resolver = MetadataResolver(
        cache=TTLCache(), transport=web.transport(), max_bytes=5_000
    )

    metadata = asyncio.run(resolver.resolve("https://big.test/"))

    assert metadata.title == "Big"
