"""Turn the backend's list responses into :class:`Page` objects.

The admin API is not uniform: some endpoints answer ``{items, page,
totalPages, total}``, others wrap the data in ``{success, data: {...}}``,
name the item list after the resource (``logs``, ``users``...) and nest the
counters in a ``pagination`` object. Missing page or item counts raise
:class:`PayloadError` instead of being defaulted. The current page number is
the one exception: servers that omit it are echoing the requested page.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from adminconsole.domain.models import Page, PageRequest
from adminconsole.errors import PayloadError

_ITEM_KEYS = ("items", "results")
_PAGE_KEYS = ("page", "currentPage")
_TOTAL_PAGES_KEYS = ("totalPages", "pages")
_TOTAL_KEYS = ("total", "totalItems", "totalCount")
_ENVELOPE_KEYS = ("success", "message")
_MAX_ENVELOPE_DEPTH = 3


def _first_present(source: Mapping[str, Any], keys: Iterable[str]) -> tuple[Optional[str], Any]:
    for key in keys:
        if key in source and source[key] is not None:
            return key, source[key]
    return None, None


def _count(source: Mapping[str, Any], keys: tuple[str, ...], label: str, minimum: int) -> int:
    key, value = _first_present(source, keys)
    if key is None:
        raise PayloadError(f"list payload is missing {label} (expected one of {', '.join(keys)})")
    if isinstance(value, bool) or not isinstance(value, int):
        if isinstance(value, str) and value.strip().isdigit():
            value = int(value)
        else:
            raise PayloadError(f"list payload field {key!r} is not an integer: {value!r}")
    if value < minimum:
        raise PayloadError(f"list payload field {key!r} is below {minimum}: {value}")
    return value


def _locate_items(payload: Mapping[str, Any], item_keys: tuple[str, ...]) -> tuple[Mapping[str, Any], list]:
    level: Any = payload
    for _ in range(_MAX_ENVELOPE_DEPTH):
        if not isinstance(level, Mapping):
            break
        key, items = _first_present(level, item_keys)
        if key is not None:
            if not isinstance(items, (list, tuple)):
                raise PayloadError(f"list payload field {key!r} is not a list")
            return level, list(items)
        level = level.get("data")
    raise PayloadError(f"list payload has no item list (expected one of {', '.join(item_keys)})")


def page_from_payload(
    payload: Any,
    request: PageRequest,
    *,
    items_keys: Iterable[str] = (),
    total_keys: Iterable[str] = (),
) -> Page:
    """Build a :class:`Page` for *request* out of a raw *payload*.

    ``totalPages`` and the item total are required. A payload without a
    page number is taken to be the page that was asked for.
    """

    if isinstance(payload, Page):
        return payload
    if not isinstance(payload, Mapping):
        raise PayloadError(f"list payload must be an object, got {type(payload).__name__}")

    level, items = _locate_items(payload, tuple(items_keys) + _ITEM_KEYS)
    for item in items:
        if not isinstance(item, Mapping):
            raise PayloadError(f"list item is not an object: {item!r}")

    pagination = level.get("pagination")
    counters = pagination if isinstance(pagination, Mapping) else level

    page_number = request.page_number
    if _first_present(counters, _PAGE_KEYS)[0] is not None:
        page_number = _count(counters, _PAGE_KEYS, "the page number", 1)
    total_pages = _count(counters, _TOTAL_PAGES_KEYS, "the page count", 0)
    total_items = _count(counters, tuple(total_keys) + _TOTAL_KEYS, "the item total", 0)

    return Page(
        page_number=page_number,
        page_size=request.page_size,
        total_pages=total_pages,
        total_items=total_items,
        items=tuple(items),
    )


def items_from_payload(payload: Any, *, items_keys: Iterable[str] = ()) -> list:
    """Extract only the item list; used by exports, which ignore paging."""

    if isinstance(payload, (list, tuple)):
        items = list(payload)
    elif isinstance(payload, Mapping):
        _, items = _locate_items(payload, tuple(items_keys) + _ITEM_KEYS)
    else:
        raise PayloadError(f"export payload must be an object or a list, got {type(payload).__name__}")
    for item in items:
        if not isinstance(item, Mapping):
            raise PayloadError(f"export row is not an object: {item!r}")
    return items


def stats_from_payload(payload: Any, *, keys: Iterable[str] = ()) -> dict[str, Any]:
    """Unwrap a summary object such as ``{total, serviceable, nonServiceable}``.

    With *keys*, exactly those counters are returned and absent or null ones
    read as 0, which is how the dashboards display them.
    """

    if not isinstance(payload, Mapping):
        raise PayloadError(f"stats payload must be an object, got {type(payload).__name__}")
    data = payload.get("data")
    body = data if isinstance(data, Mapping) else payload
    keys = tuple(keys)
    if not keys:
        return {key: value for key, value in body.items() if key not in _ENVELOPE_KEYS}
    return {key: body.get(key) or 0 for key in keys}


__all__ = ["items_from_payload", "page_from_payload", "stats_from_payload"]
