"""
Unit tests for Transport.

Tests cover:
- URL joining
- Response envelope unwrapping
- Error envelopes, HTTP errors, invalid JSON and connection failures
- Endpoint configuration and fallback to the process configuration
"""

import httpx
import pytest

from ee_do import TransportError
from ee_do import config
from ee_do.transport import Transport, _build_api_url


def make_transport(handler, api_url="http://ee.test/api"):
    t = Transport(http_transport=httpx.MockTransport(handler))
    t.configure(api_url)
    return t


class TestBuildApiUrl:
    @pytest.mark.parametrize(
        "base, path, expected",
        [
            ("http://ee.test/api", "/algorithms", "http://ee.test/api/algorithms"),
            ("http://ee.test/api/", "algorithms", "http://ee.test/api/algorithms"),
            ("http://ee.test/api/", "/algorithms", "http://ee.test/api/algorithms"),
            ("http://ee.test/api", "https://other.test/x", "https://other.test/x"),
        ],
    )
    def test_join(self, base, path, expected):
        assert _build_api_url(base, path) == expected


class TestSend:
    """Tests for the blocking request path."""

    def test_returns_data_member(self):
        t = make_transport(lambda request: httpx.Response(200, json={"data": {"a": 1}}))

        assert t.send("/algorithms") == {"a": 1}

    def test_body_without_envelope(self):
        t = make_transport(lambda request: httpx.Response(200, json=[1, 2]))

        assert t.send("/value") == [1, 2]

    def test_get_params_in_query(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": None})

        make_transport(handler).send("/value", {"json": "1"})

        assert seen[0].method == "GET"
        assert seen[0].url.params["json"] == "1"

    def test_post_params_in_body(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": None})

        make_transport(handler).send("/value", {"json": "1"}, method="POST")

        assert seen[0].method == "POST"
        assert seen[0].content == b"json=1"

    def test_error_envelope(self):
        t = make_transport(lambda request: httpx.Response(200, json={"error": {"message": "bad request"}}))

        with pytest.raises(TransportError) as exc_info:
            t.send("/algorithms")

        assert str(exc_info.value) == "bad request"
        assert exc_info.value.status == 200
        assert exc_info.value.url == "http://ee.test/api/algorithms"

    def test_http_error_without_envelope(self):
        t = make_transport(lambda request: httpx.Response(503, json={}))

        with pytest.raises(TransportError) as exc_info:
            t.send("/algorithms")

        assert exc_info.value.status == 503
        assert "HTTP 503" in str(exc_info.value)

    def test_invalid_json(self):
        t = make_transport(lambda request: httpx.Response(200, content=b"<html>"))

        with pytest.raises(TransportError, match="Invalid JSON"):
            t.send("/algorithms")

    def test_connection_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        t = make_transport(handler)

        with pytest.raises(TransportError, match="connection refused") as exc_info:
            t.send("/algorithms")

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


class TestSendAsync:
    """Tests for the asynchronous request path."""

    @pytest.mark.asyncio
    async def test_returns_data_member(self):
        t = make_transport(lambda request: httpx.Response(200, json={"data": {"a": 1}}))

        assert await t.send_async("/algorithms") == {"a": 1}

    @pytest.mark.asyncio
    async def test_error_envelope(self):
        t = make_transport(lambda request: httpx.Response(500, json={"error": {"message": "boom"}}))

        with pytest.raises(TransportError, match="boom"):
            await t.send_async("/algorithms")


class TestEndpoints:
    """Tests for endpoint configuration."""

    def test_falls_back_to_process_configuration(self, monkeypatch):
        monkeypatch.setitem(config._global_config, "api_url", "http://configured.test/api")
        monkeypatch.setitem(config._global_config, "tile_url", "http://configured.test/map")

        t = Transport()

        assert t.api_url == "http://configured.test/api"
        assert t.tile_url == "http://configured.test/map"

    def test_configure_keeps_missing_urls(self):
        t = Transport()
        t.configure("http://a.test/api", "http://a.test/map")

        t.configure(tile_url="http://b.test/map")

        assert t.api_url == "http://a.test/api"
        assert t.tile_url == "http://b.test/map"

    def test_reset(self, monkeypatch):
        monkeypatch.setitem(config._global_config, "api_url", "http://configured.test/api")
        t = Transport()
        t.configure("http://a.test/api")

        t.reset()

        assert t.api_url == "http://configured.test/api"

    def test_timeout(self, monkeypatch):
        monkeypatch.setitem(config._global_config, "timeout", 12.0)

        assert Transport().timeout == 12.0
        assert Transport(timeout=3).timeout == 3
