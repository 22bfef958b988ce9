"""Tests for the HTTP client: query strings, auth header and error mapping."""

from datetime import date

import httpx
import pytest

from ledger_client.domain.accounting import (
    AuthenticationError,
    BackendRejectedError,
    LedgerGroup,
    TransportError,
)
from ledger_client.services.api_client import ApiClient, extract_error_message, to_query_string


def client_with(handler, token: str = "") -> ApiClient:
    http_client = httpx.Client(
        base_url="http://backend.test/rest",
        transport=httpx.MockTransport(handler),
    )
    return ApiClient(http_client=http_client, token=token)


class TestQueryString:

    def test_skips_none_values(self):
        assert to_query_string({"max": 10, "offset": None, "sort": "code"}) == "max=10&sort=code"

    def test_formats_enums_dates_and_bools(self):
        query = to_query_string({
            "ledgerGroup": LedgerGroup.ASSET,
            "asOf": date(2026, 3, 31),
            "archived": False,
        })

        assert query == "ledgerGroup=ASSET&asOf=2026-03-31&archived=false"

    def test_empty(self):
        assert to_query_string(None) == ""
        assert to_query_string({"a": None}) == ""


class TestRequests:

    def test_attaches_auth_token_and_query(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["token"] = request.headers.get("X-Auth-Token")
            return httpx.Response(200, json=[{"id": "acc-1"}])

        client = client_with(handler, token="secret")

        data = client.get("/ledgerAccount/index.json", params={"max": 5})

        assert data == [{"id": "acc-1"}]
        assert seen["url"] == "http://backend.test/rest/ledgerAccount/index.json?max=5"
        assert seen["token"] == "secret"

    def test_no_token_header_when_anonymous(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["has_token"] = "X-Auth-Token" in request.headers
            return httpx.Response(204)

        assert client_with(handler).delete("/voucher/delete/v-1.json") is None
        assert seen["has_token"] is False

    def test_backend_rejection_carries_server_message(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"message": "Period is closed"})

        with pytest.raises(BackendRejectedError) as exc_info:
            client_with(handler).post("/ledgerTransactionGroup/post/1.json")

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Period is closed"
        assert exc_info.value.retryable

    def test_unauthorized_clears_token(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"detail": "Authentication required"})

        client = client_with(handler, token="expired")

        with pytest.raises(AuthenticationError):
            client.get("/voucher/index.json")

        assert client.token is None

    def test_transport_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError) as exc_info:
            client_with(handler).get("/ledgerAccount/index.json")

        assert "try again" in exc_info.value.message

    def test_nothing_is_retried(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url.path)
            return httpx.Response(503, text="Service Unavailable")

        with pytest.raises(BackendRejectedError):
            client_with(handler).get("/ledgerAccount/index.json")

        assert len(calls) == 1

    def test_csrf_token_for_create_and_edit(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={
                "SYNCHRONIZER_TOKEN": "tok",
                "SYNCHRONIZER_URI": request.url.path,
                "ignored": True,
            })

        client = client_with(handler)

        assert client.csrf_token("voucher") == {
            "SYNCHRONIZER_TOKEN": "tok",
            "SYNCHRONIZER_URI": "/rest/voucher/create.json",
        }
        assert client.csrf_token("voucher", "v-1")["SYNCHRONIZER_URI"] == "/rest/voucher/edit/v-1.json"


class TestErrorMessage:

    @pytest.mark.parametrize("body,expected", [
        ({"message": "Bad thing"}, "Bad thing"),
        ({"error": "Nope"}, "Nope"),
        ({"detail": "Not found"}, "Not found"),
        ({"errors": [{"field": "amount", "message": "Amount required"}]}, "Amount required"),
    ])
    def test_json_bodies(self, body, expected):
        response = httpx.Response(400, json=body)

        assert extract_error_message(response) == expected

    def test_falls_back_to_reason_phrase(self):
        response = httpx.Response(500, text="<html>oops</html>")

        assert extract_error_message(response) == "Internal Server Error"
