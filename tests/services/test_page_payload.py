import pytest

from adminconsole.application.services.page_payload import items_from_payload, page_from_payload, stats_from_payload
from adminconsole.domain.models import Page, PageRequest
from adminconsole.errors import PayloadError

REQUEST = PageRequest({}, 2, 20)


def test_flat_payload():
    page = page_from_payload(
        {"items": [{"id": 1}], "page": 2, "totalPages": 4, "total": 61},
        REQUEST,
    )

    assert page == Page(page_number=2, page_size=20, total_pages=4, total_items=61, items=({"id": 1},))


def test_enveloped_payload_with_resource_named_items():
    payload = {
        "success": True,
        "data": {
            "logs": [{"_id": "a"}, {"_id": "b"}],
            "pagination": {"currentPage": 1, "totalPages": 1, "totalLogs": 2},
        },
    }

    page = page_from_payload(payload, REQUEST, items_keys=("logs",), total_keys=("totalLogs",))

    assert page.page_number == 1
    assert page.total_items == 2
    assert page.ids("_id") == ("a", "b")


def test_missing_page_number_falls_back_to_request():
    page = page_from_payload({"results": [], "pages": 0, "totalCount": 0}, REQUEST)
    assert page.page_number == 2


def test_missing_page_number_does_not_excuse_missing_counters():
    with pytest.raises(PayloadError, match="page count"):
        page_from_payload({"items": [], "total": 0}, REQUEST)
    with pytest.raises(PayloadError, match="item total"):
        page_from_payload({"pagination": {"totalPages": 1}, "items": []}, REQUEST)


def test_numeric_strings_are_accepted():
    page = page_from_payload({"items": [], "totalPages": "3", "total": "41"}, REQUEST)
    assert (page.total_pages, page.total_items) == (3, 41)


@pytest.mark.parametrize(
    "payload",
    [
        {"items": [], "total": 0},
        {"items": [], "totalPages": 1},
        {"totalPages": 1, "total": 0},
        {"items": "nope", "totalPages": 1, "total": 0},
        {"items": [1, 2], "totalPages": 1, "total": 2},
        {"items": [], "totalPages": -1, "total": 0},
        {"items": [], "totalPages": 1.5, "total": 0},
        [],
        None,
    ],
)
def test_malformed_payloads(payload):
    with pytest.raises(PayloadError):
        page_from_payload(payload, REQUEST)


def test_items_only_for_exports():
    assert items_from_payload([{"a": 1}]) == [{"a": 1}]
    assert items_from_payload({"data": {"users": [{"a": 2}]}}, items_keys=("users",)) == [{"a": 2}]
    with pytest.raises(PayloadError):
        items_from_payload("csv text")


def test_stats_summary_is_unwrapped_and_zero_filled():
    keys = ("total", "serviceable", "nonServiceable")

    stats = stats_from_payload({"success": True, "data": {"total": 12, "serviceable": 9}}, keys=keys)

    assert stats == {"total": 12, "serviceable": 9, "nonServiceable": 0}
    assert stats_from_payload({"total": 3, "serviceable": None}, keys=keys)["serviceable"] == 0


def test_stats_without_keys_keeps_body_minus_envelope():
    assert stats_from_payload({"success": True, "message": "ok", "active": 4}) == {"active": 4}
    with pytest.raises(PayloadError):
        stats_from_payload(["total", 3])
