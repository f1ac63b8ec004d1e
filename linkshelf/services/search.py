from __future__ import annotations

from typing import Iterable

from linkshelf.records import Link


def _safe(value: str | None) -> str:
    return value or ""


def link_matches(link: Link, query: str) -> bool:
    q = query.lower()
    fields = (link.title, link.url, link.description, link.notes)
    return any(q in _safe(value).lower() for value in fields)


def filter_links(links: Iterable[Link], query: str | None) -> list[Link]:
    # Whitespace is a real query; only None or "" means no filter.
    if not query:
        return list(links)
    return [link for link in links if link_matches(link, query)]
