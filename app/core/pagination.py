"""Hypermedia links for paged list responses."""

from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import urljoin

from app.config import LinkConfig

DEFAULT_OFFSET = 0
DEFAULT_LIMIT = 10


def to_non_negative_int_or_default(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        number = value
    elif isinstance(value, float) and value.is_integer():
        number = int(value)
    elif isinstance(value, str):
        try:
            number = int(value.strip())
        except ValueError:
            return default
    else:
        return default
    return number if number >= 0 else default


def to_positive_int_or_default(value: Any, default: int) -> int:
    number = to_non_negative_int_or_default(value, default)
    return number if number > 0 else default


def absolute_url(path: str, links: LinkConfig) -> str:
    if links.base_url:
        return urljoin(links.base_url, path)
    if not path.startswith("/"):
        path = "/" + path
    return f"http://{links.host}:{links.port}{path}"


def _href(url: str, offset: int, limit: int) -> dict[str, str]:
    return {"href": f"{url}?offset={offset}&limit={limit}"}


def add_page_metadata(
    envelope: Mapping[str, Any],
    path: str,
    *,
    offset: Any = DEFAULT_OFFSET,
    limit: Any = DEFAULT_LIMIT,
    length: Any = 0,
    links: LinkConfig | None = None,
) -> Mapping[str, Any]:
    """Return ``envelope`` plus a ``_links`` mapping with self/prev/next.

    ``prev`` exists when ``offset > 0`` and is not clamped at zero. ``next``
    exists when the page is full (``length >= limit``); there is no total count,
    so an exactly full last page still advertises ``next``.

    An envelope that already carries ``_links`` is returned unchanged.
    """
    if "_links" in envelope:
        return envelope

    links = links or LinkConfig()
    offset_n = to_non_negative_int_or_default(offset, DEFAULT_OFFSET)
    limit_n = to_positive_int_or_default(limit, DEFAULT_LIMIT)
    length_n = to_non_negative_int_or_default(length, 0)

    url = absolute_url(path, links)

    page_links: dict[str, dict[str, str]] = {"self": _href(url, offset_n, limit_n)}
    if offset_n > 0:
        page_links["prev"] = _href(url, offset_n - limit_n, limit_n)
    if length_n >= limit_n:
        page_links["next"] = _href(url, offset_n + limit_n, limit_n)

    decorated = dict(envelope)
    decorated["_links"] = page_links
    return decorated
