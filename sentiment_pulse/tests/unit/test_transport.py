"""
SENTIMENT PULSE — Tests for the Resilient HTTP Transport
"""
import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from sentiment_pulse.config.settings import DataSourceSettings
from sentiment_pulse.data.errors import TransportError
from sentiment_pulse.data.transport import ResilientTransport, rapidapi_headers


class FakeResponse:
    def __init__(self, status=200, body=None, reason="OK", json_error=None):
        self.status = status
        self.reason = reason
        self._body = body
        self._json_error = json_error

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    async def json(self, content_type=None):
        if self._json_error:
            raise self._json_error
        return self._body


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def get(self, url, headers=None, params=None):
        self.requests.append({"url": url, "headers": headers, "params": params})
        if self.error:
            raise self.error
        return self.response

    async def close(self):
        pass


def make_transport(**overrides) -> ResilientTransport:
    values = dict(backoff_base_seconds=2.0, backoff_jitter_seconds=0.0)
    values.update(overrides)
    return ResilientTransport(DataSourceSettings(**values))


class TestBackoff:
    def test_exponential_without_jitter(self):
        transport = make_transport()
        assert [transport.backoff_delay(a) for a in range(3)] == [2.0, 4.0, 8.0]

    def test_jitter_is_bounded(self):
        transport = make_transport(backoff_jitter_seconds=1.0)
        for _ in range(50):
            assert 2.0 <= transport.backoff_delay(0) <= 3.0


class TestFetchJson:
    @pytest.mark.asyncio
    async def test_returns_first_success(self):
        transport = make_transport()
        with patch.object(transport, "_get_once", AsyncMock(return_value={"ok": True})) as get_once, \
                patch("sentiment_pulse.data.transport.asyncio.sleep", AsyncMock()) as sleep:
            assert await transport.fetch_json("https://example.com/x") == {"ok": True}
        assert get_once.await_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self):
        transport = make_transport()
        side_effect = [TransportError("boom"), TransportError("boom"), {"ok": True}]
        with patch.object(transport, "_get_once", AsyncMock(side_effect=side_effect)), \
                patch("sentiment_pulse.data.transport.asyncio.sleep", AsyncMock()) as sleep:
            assert await transport.fetch_json("https://example.com/x", max_retries=3) == {"ok": True}
        assert [c.args[0] for c in sleep.await_args_list] == [2.0, 4.0]

    @pytest.mark.asyncio
    async def test_exhaustion_raises_transport_error(self):
        transport = make_transport()
        failure = TransportError("HTTP 503", url="https://example.com/x", status=503)
        with patch.object(transport, "_get_once", AsyncMock(side_effect=failure)) as get_once, \
                patch("sentiment_pulse.data.transport.asyncio.sleep", AsyncMock()) as sleep:
            with pytest.raises(TransportError) as exc_info:
                await transport.fetch_json("https://example.com/x", max_retries=3)
        assert get_once.await_count == 3
        assert sleep.await_count == 2
        assert exc_info.value.status == 503

    @pytest.mark.asyncio
    async def test_merges_extra_headers(self):
        transport = make_transport()
        with patch.object(transport, "_get_once", AsyncMock(return_value={})) as get_once:
            await transport.fetch_json(
                "https://example.com/x", extra_headers=rapidapi_headers("secret", "example.com")
            )
        headers = get_once.await_args.args[1]
        assert headers["Accept"] == "application/json"
        assert "User-Agent" in headers
        assert headers["X-RapidAPI-Key"] == "secret"
        assert headers["X-RapidAPI-Host"] == "example.com"


class TestSingleRequest:
    @pytest.mark.asyncio
    async def test_parses_json_body(self):
        transport = make_transport()
        transport._session = FakeSession(FakeResponse(body={"data": [1]}))
        assert await transport._get_once("https://example.com/x", {}, None) == {"data": [1]}
        assert transport.requests_made == 1

    @pytest.mark.asyncio
    async def test_non_2xx_is_failure(self):
        transport = make_transport()
        transport._session = FakeSession(FakeResponse(status=429, reason="Too Many Requests"))
        with pytest.raises(TransportError) as exc_info:
            await transport._get_once("https://example.com/x", {}, None)
        assert exc_info.value.status == 429

    @pytest.mark.asyncio
    async def test_bad_json_is_failure(self):
        transport = make_transport()
        transport._session = FakeSession(FakeResponse(json_error=ValueError("Expecting value")))
        with pytest.raises(TransportError, match="invalid JSON"):
            await transport._get_once("https://example.com/x", {}, None)

    @pytest.mark.asyncio
    async def test_timeout_is_failure(self):
        transport = make_transport()
        transport._session = FakeSession(error=asyncio.TimeoutError())
        with pytest.raises(TransportError, match="timed out"):
            await transport._get_once("https://example.com/x", {}, None)

    @pytest.mark.asyncio
    async def test_one_lock_per_host(self):
        transport = make_transport()
        a = transport._host_lock("https://query1.finance.yahoo.com/v8/finance/chart/SPY")
        b = transport._host_lock("https://query1.finance.yahoo.com/v7/finance/options/SPY")
        c = transport._host_lock("https://query2.finance.yahoo.com/v8/finance/chart/SPY")
        assert a is b
        assert a is not c

    @pytest.mark.asyncio
    async def test_context_manager_closes_session(self):
        transport = make_transport()
        async with transport:
            assert transport._session is not None
        assert transport._session is None
