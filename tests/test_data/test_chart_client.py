"""Tests for the Yahoo chart client with mocked HTTP responses."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from dropwatch.data.chart_client import BASE_URL, ChartClient, parse_chart
from dropwatch.errors import DecodeError, EmptyDataError, TransportError


def _mock_response(status_code: int = 200, payload=None, json_error: Exception | None = None):
    resp = MagicMock()
    resp.status_code = status_code
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = payload
    resp.text = ""
    return resp


def _client_returning(resp) -> AsyncMock:
    client = AsyncMock()
    client.get.return_value = resp
    return client


def test_parse_chart_drops_null_bars(chart_payload):
    series = parse_chart("FSF.NZ", chart_payload)

    assert len(series) == 2
    assert series.high == (2.60, 2.70)
    assert series.close == (2.58, 2.66)
    assert series.open == (2.50, 2.55)
    assert series.low == (2.45, 2.50)
    assert series.timestamps[0] == datetime(2025, 1, 2, tzinfo=timezone.utc)


def test_parse_chart_sorts_bars_oldest_first():
    payload = {"chart": {"result": [{
        "timestamp": [1735948800, 1735776000],
        "indicators": {"quote": [{
            "open": [3.0, 1.0], "high": [3.0, 1.0], "low": [3.0, 1.0], "close": [3.0, 1.0],
        }]},
    }]}}
    series = parse_chart("X", payload)

    assert series.timestamps == (
        datetime(2025, 1, 2, tzinfo=timezone.utc),
        datetime(2025, 1, 4, tzinfo=timezone.utc),
    )
    assert series.close == (1.0, 3.0)


@pytest.mark.parametrize("bad", [float("inf"), float("-inf"), float("nan")])
def test_parse_chart_rejects_non_finite_values(chart_payload, bad):
    chart_payload["chart"]["result"][0]["indicators"]["quote"][0]["high"][0] = bad
    with pytest.raises(DecodeError):
        parse_chart("FSF.NZ", chart_payload)


def test_parse_chart_empty_result():
    with pytest.raises(EmptyDataError):
        parse_chart("FAKE", {"chart": {"result": [], "error": None}})


def test_parse_chart_null_result_includes_error_description():
    payload = {"chart": {"result": None, "error": {"code": "Not Found", "description": "No data found"}}}
    with pytest.raises(EmptyDataError, match="No data found"):
        parse_chart("FAKE", payload)


def test_parse_chart_all_bars_null():
    payload = {"chart": {"result": [{
        "timestamp": [1735776000],
        "indicators": {"quote": [{"open": [None], "high": [None], "low": [None], "close": [None]}]},
    }]}}
    with pytest.raises(EmptyDataError):
        parse_chart("FAKE", payload)


def test_parse_chart_without_timestamps_is_empty():
    payload = {"chart": {"result": [{"indicators": {"quote": [{}]}}]}}
    with pytest.raises(EmptyDataError):
        parse_chart("FAKE", payload)


def test_parse_chart_malformed_payload():
    with pytest.raises(DecodeError):
        parse_chart("FAKE", {"unexpected": True})


def test_parse_chart_wrong_types():
    payload = {"chart": {"result": [{
        "timestamp": ["yesterday"],
        "indicators": {"quote": [{"open": [1.0], "high": [1.0], "low": [1.0], "close": [1.0]}]},
    }]}}
    with pytest.raises(DecodeError):
        parse_chart("FAKE", payload)


def test_parse_chart_misaligned_arrays():
    payload = {"chart": {"result": [{
        "timestamp": [1735776000, 1735862400],
        "indicators": {"quote": [{"open": [1.0], "high": [1.0, 2.0], "low": [1.0, 2.0], "close": [1.0, 2.0]}]},
    }]}}
    with pytest.raises(DecodeError, match="misaligned"):
        parse_chart("FAKE", payload)


@pytest.mark.asyncio
async def test_fetch_parses_response(chart_payload):
    client = _client_returning(_mock_response(payload=chart_payload))
    source = ChartClient(client=client)

    series = await source.fetch("FSF.NZ", "6mo", "1d")

    assert len(series) == 2
    client.get.assert_called_once_with(
        f"{BASE_URL}/FSF.NZ", params={"range": "6mo", "interval": "1d"},
    )


@pytest.mark.asyncio
async def test_fetch_network_error_is_transport_error():
    client = AsyncMock()
    client.get.side_effect = httpx.ConnectError("connection refused")
    source = ChartClient(client=client)

    with pytest.raises(TransportError) as exc_info:
        await source.fetch("FSF.NZ", "6mo", "1d")
    assert exc_info.value.symbol == "FSF.NZ"


@pytest.mark.asyncio
async def test_fetch_timeout_is_transport_error():
    client = AsyncMock()
    client.get.side_effect = httpx.ReadTimeout("timed out")
    source = ChartClient(client=client)

    with pytest.raises(TransportError):
        await source.fetch("FSF.NZ", "6mo", "1d")


@pytest.mark.asyncio
async def test_fetch_http_error_includes_description():
    payload = {"chart": {"result": None, "error": {
        "code": "Not Found", "description": "No data found, symbol may be delisted",
    }}}
    client = _client_returning(_mock_response(status_code=404, payload=payload))
    source = ChartClient(client=client)

    with pytest.raises(TransportError, match="HTTP 404: No data found"):
        await source.fetch("NOPE.NZ", "6mo", "1d")


@pytest.mark.asyncio
async def test_fetch_non_json_is_decode_error():
    client = _client_returning(_mock_response(json_error=ValueError("Expecting value")))
    source = ChartClient(client=client)

    with pytest.raises(DecodeError):
        await source.fetch("FSF.NZ", "6mo", "1d")


@pytest.mark.asyncio
async def test_injected_client_is_not_closed():
    client = AsyncMock()
    source = ChartClient(client=client)
    await source.aclose()
    client.aclose.assert_not_called()


@pytest.mark.asyncio
async def test_default_client_sends_browser_user_agent():
    source = ChartClient(timeout=5)
    client = source._get_client()
    try:
        assert client.headers["User-Agent"] == "Mozilla/5.0"
        assert source._get_client() is client
    finally:
        await source.aclose()
