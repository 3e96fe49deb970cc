"""Tests for the /power HTTP routes."""

import pytest
from httpx import AsyncClient

from conftest import ms, seed_list, utc


@pytest.mark.asyncio
async def test_kwh_invalid_type(client: AsyncClient):
    resp = await client.get("/power/kwh/bogus/1")
    assert resp.status_code == 400
    assert resp.json()["error"] == "InvalidArgumentError"


@pytest.mark.asyncio
async def test_kwh_invalid_count(client: AsyncClient):
    resp = await client.get("/power/kwh/hour/many")
    assert resp.status_code == 400
    assert "must be an integer or a keyword" in resp.json()["message"]


@pytest.mark.asyncio
async def test_kwh_hour_short_read(client: AsyncClient, db_session):
    await seed_list(db_session, "hours", [{"timestamp": h, "kwh": 1.5} for h in range(6)])

    resp = await client.get("/power/kwh/hour/1000")

    assert resp.status_code == 200
    assert resp.headers["cache-control"] == "public, max-age=300"
    data = resp.json()
    assert data["count"] == 6
    assert data["requested"] == 1000
    assert data["total"] == 9.0
    assert "version" in data


@pytest.mark.asyncio
async def test_kwh_default_count(client: AsyncClient, db_session):
    await seed_list(db_session, "days", [{"timestamp": d, "kwh": 10.0 + d} for d in range(3)])
    resp = await client.get("/power/kwh/day")
    assert resp.status_code == 200
    assert resp.json()["list"][0]["kwh"] == 12.0


@pytest.mark.asyncio
async def test_kwh_year_not_implemented(client: AsyncClient):
    resp = await client.get("/power/kwh/year")
    assert resp.status_code == 501
    assert resp.json()["error"] == "QueryNotImplementedError"


@pytest.mark.asyncio
async def test_kwh_over_empty_list(client: AsyncClient):
    resp = await client.get("/power/kwh/week/4")
    assert resp.status_code == 404
    assert resp.json()["error"] == "EmptyAggregateError"


@pytest.mark.asyncio
async def test_kwh_date_usage(client: AsyncClient):
    resp = await client.get("/power/kwh/date")
    assert resp.status_code == 200
    assert "usage" in resp.json()


@pytest.mark.asyncio
async def test_kwh_date_year(client: AsyncClient):
    assert (await client.get("/power/kwh/date/2016")).status_code == 200
    assert (await client.get("/power/kwh/date/2001")).status_code == 400
    assert (await client.get("/power/kwh/date/16")).status_code == 400


@pytest.mark.asyncio
async def test_kwh_date_day(client: AsyncClient, db_session):
    await seed_list(
        db_session,
        "days",
        [{"timestamp": ms(utc(2017, 3, 31)), "kwh": 77.3696, "total": 773696, "perHour": [32237] * 24}],
    )
    resp = await client.get("/power/kwh/date/2017/03/30")

    assert resp.status_code == 200
    assert resp.json()["kwh"] == 77.3696
    assert len(resp.json()["perHour"]) == 24

    missing = await client.get("/power/kwh/date/2017/03/29")
    assert missing.status_code == 404
    assert missing.json()["error"] == "NotFoundError"


@pytest.mark.asyncio
async def test_kwh_date_month(client: AsyncClient, db_session):
    await seed_list(
        db_session,
        "months",
        [{"timestamp": ms(utc(2017, 4, 1)), "kwh": 1000.0, "perDay": [10000] * 31}],
    )
    resp = await client.get("/power/kwh/date/2017/03")
    assert resp.status_code == 200
    assert resp.json()["description"] == "kWh usage for March, 2017."
    assert resp.json()["perDay"] == [1.0] * 31


@pytest.mark.asyncio
async def test_kwh_date_bad_month(client: AsyncClient):
    resp = await client.get("/power/kwh/date/2017/13")
    assert resp.status_code == 400
    assert resp.json()["error"] == "OutOfRangeError"


@pytest.mark.asyncio
async def test_watts(client: AsyncClient, db_session):
    await seed_list(
        db_session,
        "seconds",
        [{"time": "2017-03-30T12:00:00.000Z", "kwh": 0.001, "watt": 360} for _ in range(3)],
    )
    resp = await client.get("/power/watts/20")

    assert resp.status_code == 200
    assert resp.json()["watt"] == 360
    assert resp.json()["interval"] == 20
    assert resp.headers["cache-control"] == "public, max-age=5"

    default = await client.get("/power/watts")
    assert default.json()["interval"] == 10


@pytest.mark.asyncio
async def test_watts_bad_interval(client: AsyncClient):
    resp = await client.get("/power/watts/soon")
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_watts_hour(client: AsyncClient, db_session):
    await seed_list(
        db_session,
        "minutes",
        [{"time": f"12:{i:02d}", "kwh": 0.01, "watt": 600, "perSecond": [600] * 60} for i in range(60)],
    )
    resp = await client.get("/power/watts/hour")

    assert resp.status_code == 200
    assert len(resp.json()["items"]) == 60
    assert resp.json()["items"][0]["time"] == "12:00"


@pytest.mark.asyncio
async def test_meter_total_roundtrip(client: AsyncClient):
    assert (await client.get("/power/meter/total")).status_code == 404

    first = await client.put("/power/meter/total", json={"value": 10000})
    assert first.status_code == 200
    assert first.json()["oldValue"] is None

    second = await client.put("/power/meter/total", json={"value": 20000})
    assert second.json()["oldValue"] == 10000
    assert second.json()["delta"] == 10000
    assert second.json()["meterUpdates"] == 2

    total = await client.get("/power/meter/total")
    assert total.json()["value"] == 20000
    assert total.json()["delta"] == 10000


@pytest.mark.asyncio
async def test_meter_total_rejects_text(client: AsyncClient):
    resp = await client.put("/power/meter/total", json={"value": "lots"})
    assert resp.status_code == 422
