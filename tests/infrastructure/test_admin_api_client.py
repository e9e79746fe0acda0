"""Tests for AdminApiClient and ResourceEndpoint against an httpx mock transport."""

import json

import httpx
import pytest

from adminconsole.application.presets import AUDIT_LOGS, PINCODES, USERS
from adminconsole.errors import PayloadError, TransportError
from adminconsole.infrastructure.services.admin_api_client import AdminApiClient


def _client(handler, token="secret"):
    http = httpx.Client(transport=httpx.MockTransport(handler))
    return AdminApiClient("https://shop.example/api/", token=token, http_client=http)


def test_fetch_page_sends_page_limit_and_aliases():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"success": True, "data": {"logs": [], "totalPages": 0, "totalLogs": 0}})

    endpoint = _client(handler).resource(AUDIT_LOGS)
    endpoint.fetch_page(
        {"search": "", "user": "u-7", "actionType": "LOGOUT", "entity": "", "startDate": "2024-01-01", "endDate": ""},
        3,
        20,
    )

    request = seen[0]
    assert request.url.path == "/api/superadmin/audit"
    assert dict(request.url.params) == {
        "page": "3",
        "limit": "20",
        "userId": "u-7",
        "action": "LOGOUT",
        "startDate": "2024-01-01",
    }
    assert request.headers["Authorization"] == "Bearer secret"


def test_boolean_filters_are_sent_as_words():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"pincodes": [], "totalPages": 0, "totalPincodes": 0})

    _client(handler).resource(PINCODES).fetch_page({"isServiceable": False}, 1, 10)

    assert seen[0].url.params["isServiceable"] == "false"


def test_no_token_no_authorization_header():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={})

    _client(handler, token=None).request("GET", "/ping")

    assert "Authorization" not in seen[0].headers


def test_server_message_becomes_transport_error():
    def handler(request):
        return httpx.Response(403, json={"success": False, "message": "Superadmin only"})

    with pytest.raises(TransportError, match="Superadmin only") as info:
        _client(handler).request("GET", "/superadmin/users")

    assert info.value.status_code == 403


def test_unauthorised_without_message():
    def handler(request):
        return httpx.Response(401)

    with pytest.raises(TransportError, match="Session expired"):
        _client(handler).request("GET", "/superadmin/users")


def test_connection_failure_becomes_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError, match="connection refused") as info:
        _client(handler).request("GET", "/superadmin/users")

    assert info.value.status_code is None


def test_invalid_json_is_a_payload_error():
    def handler(request):
        return httpx.Response(200, content=b"<html>")

    with pytest.raises(PayloadError):
        _client(handler).request("GET", "/superadmin/users")


def test_export_rows_asks_for_one_large_page():
    seen = []
    rows = [{"_id": "a"}, {"_id": "b"}]

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"data": {"logs": rows, "pagination": {"total": 2, "pages": 1}}})

    exported = _client(handler).resource(AUDIT_LOGS).export_rows({"entity": "User"}, 10_000)

    assert exported == rows
    assert seen[0].url.params["page"] == "1"
    assert seen[0].url.params["limit"] == "10000"
    assert seen[0].url.params["resource"] == "User"


def test_mutate_and_delete():
    seen = []

    def handler(request):
        seen.append((request.method, request.url.path, request.content))
        return httpx.Response(200, json={"success": True})

    endpoint = _client(handler).resource(PINCODES)
    endpoint.mutate("560001", {"isServiceable": True})
    endpoint.mutate("560001", {}, method="PATCH", suffix="/toggle")
    endpoint.delete("560001")

    assert seen[0][:2] == ("PUT", "/api/superadmin/pincodes/560001")
    assert json.loads(seen[0][2]) == {"isServiceable": True}
    assert seen[1][:2] == ("PATCH", "/api/superadmin/pincodes/560001/toggle")
    assert seen[2][:2] == ("DELETE", "/api/superadmin/pincodes/560001")


def test_fetch_stats_reads_summary_endpoint():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"success": True, "data": {"total": 120, "serviceable": 98, "nonServiceable": 22}})

    stats = _client(handler).resource(PINCODES).fetch_stats()

    assert seen[0].method == "GET"
    assert seen[0].url.path == "/api/superadmin/pincodes/stats"
    assert stats == {"total": 120, "serviceable": 98, "nonServiceable": 22}


def test_fetch_stats_without_summary_endpoint():
    def handler(request):
        raise AssertionError("no request expected")

    with pytest.raises(TransportError, match="no stats endpoint"):
        _client(handler).resource(USERS).fetch_stats()

def test_empty_body_returns_none():
    def handler(request):
        return httpx.Response(204)

    assert _client(handler).request("DELETE", "/superadmin/users/1") is None


def test_base_url_needs_scheme():
    with pytest.raises(ValueError):
        AdminApiClient("localhost:5000/api")
