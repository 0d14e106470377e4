"""Tests for the shared HTTP client."""

import json

import httpx
import pytest

from scalable_converter.services.shared.http_client import HTTPClient, HTTPClientError


def make_client(handler) -> HTTPClient:
    client = HTTPClient(headers={"User-Agent": "tests"})
    client._client = httpx.Client(transport=httpx.MockTransport(handler))
    return client


class TestHTTPClient:
    """Tests for HTTPClient request handling."""

    def test_get_json(self):
        """Test JSON decoding and query parameters."""

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["range"] == "1d"
            return httpx.Response(200, json={"ok": True})

        with make_client(handler) as client:
            assert client.get_json("https://example.test/chart", params={"range": "1d"}) == {
                "ok": True
            }

    def test_post_json_sends_body_and_headers(self):
        """Test that JSON bodies and default headers are sent."""

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["User-Agent"] == "tests"
            assert json.loads(request.read()) == [{"idType": "ID_ISIN"}]
            return httpx.Response(200, json=[{"data": []}])

        with make_client(handler) as client:
            assert client.post_json("https://example.test/map", json=[{"idType": "ID_ISIN"}]) == [
                {"data": []}
            ]

    def test_status_error_raises_client_error(self):
        """Test that HTTP errors carry status code and body."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, text="Too Many Requests")

        with make_client(handler) as client:
            with pytest.raises(HTTPClientError) as exc_info:
                client.get("https://example.test/map")

        assert exc_info.value.status_code == 429
        assert exc_info.value.response_body == "Too Many Requests"

    def test_close_resets_client(self):
        """Test that close drops the underlying httpx client."""
        client = HTTPClient()
        assert client.client is client.client
        client.close()
        assert client._client is None
