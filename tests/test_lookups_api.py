"""Tests for lookup tables and the broker placeholder endpoints."""

import pytest
from fastapi import status


@pytest.mark.asyncio
async def test_exchanges(client):
    response = await client.get("/api/data/exchanges")

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["status"] == "success"
    assert body["message"] == "Exchanges fetched successfully."
    assert body["data"] == [
        {"id": 10, "name": "NSE", "fullName": "National Stock Exchange"},
        {"id": 11, "name": "MCX", "fullName": "Multi Commodity Exchange"},
        {"id": 12, "name": "BSE", "fullName": "Bombay Stock Exchange"},
    ]
    assert "totalRecords" not in body


@pytest.mark.asyncio
async def test_segments(client):
    response = await client.get("/api/data/segments")

    body = response.json()
    assert body["message"] == "Segments fetched successfully."
    assert [segment["id"] for segment in body["data"]] == [10, 11, 12, 20]


@pytest.mark.asyncio
async def test_instrument_types(client):
    response = await client.get("/api/data/instrument-types")

    body = response.json()
    assert body["message"] == "Instrument types fetched successfully."
    assert len(body["data"]) == 36
    futidx = [row for row in body["data"] if row["id"] == 11]
    assert sorted(row["segmentId"] for row in futidx) == [11, 20]


@pytest.mark.asyncio
async def test_exchange_segments(client):
    response = await client.get("/api/data/exchange-segments")

    body = response.json()
    assert len(body["data"]) == 8
    assert {"exchangeId": 11, "segmentId": 20, "exchangeName": "MCX", "segmentName": "Commodity Derivatives"} in body["data"]


@pytest.mark.asyncio
async def test_market_status(client):
    response = await client.get("/api/data/market-status")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"] == {"NSE": "OPEN", "BSE": "CLOSED"}


@pytest.mark.asyncio
async def test_quotes_requires_symbols(client):
    response = await client.get("/api/data/quotes")

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    body = response.json()
    assert body["status"] == "fail"
    assert body["message"] == "Symbols query parameter is required for quotes."


@pytest.mark.asyncio
async def test_quotes(client):
    response = await client.get("/api/data/quotes", params={"symbols": "NSE:SBIN-EQ"})

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"] == {"NSE:SBIN-EQ": {"ltp": 100.5, "volume": 100000}}


@pytest.mark.asyncio
async def test_history_requires_range(client):
    response = await client.get("/api/data/history/NSE:SBIN-EQ", params={"resolution": "D"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == (
        "Symbol, resolution, range_from, and range_to query parameters are required for historical data."
    )


@pytest.mark.asyncio
async def test_history(client):
    response = await client.get(
        "/api/data/history/NSE:SBIN-EQ",
        params={"resolution": "D", "range_from": "2023-01-01", "range_to": "2023-01-02"},
    )

    assert response.status_code == status.HTTP_200_OK
    candles = response.json()["data"]
    assert len(candles) == 2
    assert candles[0] == {"time": "2023-01-01", "open": 100, "high": 105, "low": 98, "close": 103, "volume": 5000}
