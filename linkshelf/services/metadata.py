from __future__ import annotations

import asyncio
import logging
import warnings
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import urljoin, urlparse

import httpx
from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning

from linkshelf.records import Metadata
from linkshelf.services.cache import TTLCache

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": "LinkshelfBot/1.0 (+https://linkshelf.local)",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}
DEFAULT_FAVICON_SERVICE = "https://www.google.com/s2/favicons?domain={host}"
UNTITLED = "Untitled"


@dataclass
class FetchedPage:
    html: str
    final_url: str
    status_code: int


class FetchError(Exception):
    pass


Extractor = Callable[[BeautifulSoup], Optional[str]]


def _normalize_error(exc: Exception) -> str:
    message = str(exc).strip()
    if message:
        return message
    return exc.__class__.__name__


def _clean(value) -> str | None:
    if value is None:
        return None
    text = " ".join(str(value).split())
    return text or None


def _meta_content(soup: BeautifulSoup, attr: str, wanted: str) -> str | None:
    for tag in soup.find_all("meta"):
        if (tag.get(attr) or "").strip().lower() == wanted:
            content = _clean(tag.get("content"))
            if content:
                return content
    return None


def _rel_tokens(tag) -> list[str]:
    rel = tag.get("rel") or []
    if isinstance(rel, str):
        rel = rel.split()
    return [token.lower() for token in rel]


def _link_href(soup: BeautifulSoup, rel: list[str]) -> str | None:
    for tag in soup.find_all("link"):
        if _rel_tokens(tag) == rel:
            href = _clean(tag.get("href"))
            if href:
                return href
    return None


def title_tag(soup: BeautifulSoup) -> str | None:
    if soup.title is None:
        return None
    return _clean(soup.title.get_text())


def og_title(soup: BeautifulSoup) -> str | None:
    return _meta_content(soup, "property", "og:title")


def meta_description(soup: BeautifulSoup) -> str | None:
    return _meta_content(soup, "name", "description")


def og_description(soup: BeautifulSoup) -> str | None:
    return _meta_content(soup, "property", "og:description")


def icon_link(soup: BeautifulSoup) -> str | None:
    return _link_href(soup, ["icon"])


def shortcut_icon_link(soup: BeautifulSoup) -> str | None:
    return _link_href(soup, ["shortcut", "icon"])


TITLE_EXTRACTORS: tuple[Extractor, ...] = (title_tag, og_title)
DESCRIPTION_EXTRACTORS: tuple[Extractor, ...] = (meta_description, og_description)
ICON_EXTRACTORS: tuple[Extractor, ...] = (icon_link, shortcut_icon_link)


def first_present(soup: BeautifulSoup, extractors) -> str | None:
    for extractor in extractors:
        value = extractor(soup)
        if value:
            return value
    return None


def favicon_service_url(url: str, template: str = DEFAULT_FAVICON_SERVICE) -> str | None:
    try:
        host = urlparse(url).hostname
    except ValueError:
        return None
    if not host:
        return None
    return template.format(host=host)


def degraded_metadata(url: str) -> Metadata:
    return Metadata(title=(url or "").strip() or UNTITLED, description=None, icon=None)


def _looks_like_xml(html: str) -> bool:
    leading = html.lstrip()[:200].lower()
    return (
        leading.startswith("<?xml")
        or leading.startswith("<rss")
        or leading.startswith("<feed")
    )


def build_soup(html: str) -> BeautifulSoup:
    if _looks_like_xml(html):
        try:
            return BeautifulSoup(html, "xml")
        except Exception:
            pass
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)
        return BeautifulSoup(html, "lxml")


def extract_metadata(
    html: str,
    url: str,
    final_url: str | None = None,
    favicon_template: str = DEFAULT_FAVICON_SERVICE,
) -> Metadata:
    soup = build_soup(html)
    title = first_present(soup, TITLE_EXTRACTORS) or degraded_metadata(url).title
    description = first_present(soup, DESCRIPTION_EXTRACTORS)
    icon = first_present(soup, ICON_EXTRACTORS)
    if icon:
        icon = urljoin(final_url or url, icon)
    else:
        icon = favicon_service_url(final_url or url, favicon_template)
    return Metadata(title=title, description=description, icon=icon)


class MetadataResolver:
    """Turns a URL into display metadata, consulting the cache before the network.

    Resolution is total: fetch errors, timeouts, non-2xx responses and
    unparsable bodies all produce the degraded result, which is not cached.
    """

    def __init__(
        self,
        cache: TTLCache | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
        max_bytes: int = 2_500_000,
        favicon_template: str = DEFAULT_FAVICON_SERVICE,
    ):
        self.cache = cache if cache is not None else TTLCache()
        self.timeout = timeout
        self.max_bytes = max_bytes
        self.favicon_template = favicon_template
        self.transport = transport

    async def _download(self, url: str) -> FetchedPage:
        async with httpx.AsyncClient(
            follow_redirects=True,
            timeout=self.timeout,
            headers=DEFAULT_HEADERS,
            transport=self.transport,
        ) as client, client.stream("GET", url) as response:
            if not response.is_success:
                raise FetchError(f"HTTP {response.status_code}")
            chunks = []
            total = 0
            async for chunk in response.aiter_bytes():
                chunks.append(chunk[: self.max_bytes - total])
                total += len(chunks[-1])
                if total >= self.max_bytes:
                    break
            data = b"".join(chunks)
            encoding = response.encoding or "utf-8"
            try:
                html = data.decode(encoding, errors="ignore")
            except LookupError:
                html = data.decode("utf-8", errors="ignore")
            return FetchedPage(
                html=html,
                final_url=str(response.url),
                status_code=response.status_code,
            )

    async def fetch_html(self, url: str) -> FetchedPage:
        # The client timeout applies per operation; wait_for bounds the whole fetch.
        try:
            return await asyncio.wait_for(self._download(url), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise FetchError(f"timed out after {self.timeout}s") from exc
        except Exception as exc:
            raise FetchError(_normalize_error(exc)) from exc

    async def resolve(self, url: str) -> Metadata:
        cached = self.cache.get(url)
        if cached is not None:
            logger.debug("metadata cache hit for %s", url)
            return cached
        logger.debug("metadata cache miss for %s", url)

        try:
            page = await self.fetch_html(url)
        except FetchError as exc:
            logger.warning("metadata fetch failed for %s: %s", url, exc)
            return degraded_metadata(url)

        try:
            metadata = extract_metadata(
                page.html,
                url,
                final_url=page.final_url,
                favicon_template=self.favicon_template,
            )
        except Exception as exc:
            logger.warning(
                "metadata parse failed for %s: %s", url, _normalize_error(exc)
            )
            return degraded_metadata(url)

        self.cache.set(url, metadata)
        return metadata
