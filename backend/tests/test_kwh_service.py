"""Tests for the kWh query router."""

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from conftest import ms, seed_list, utc
from powermeter.errors import (
    EmptyAggregateError,
    InvalidArgumentError,
    QueryNotImplementedError,
)
from powermeter.services.kwh_service import KwhService


@pytest.fixture
def kwh(store, clock):
    return KwhService(store, clock=clock)


@pytest.mark.asyncio
async def test_unknown_type(kwh):
    with pytest.raises(InvalidArgumentError, match="one of the keywords"):
        await kwh.handle_kwh("bogus", 1)


@pytest.mark.asyncio
@pytest.mark.parametrize("count", [0, -3, "3", 1.5, None])
async def test_bad_count(kwh, count):
    with pytest.raises(InvalidArgumentError):
        await kwh.handle_kwh("hour", count)


@pytest.mark.asyncio
async def test_this_only_for_month(kwh):
    with pytest.raises(InvalidArgumentError, match="only valid for month"):
        await kwh.handle_kwh("day", "this")


@pytest.mark.asyncio
async def test_year_not_implemented(kwh):
    with pytest.raises(QueryNotImplementedError):
        await kwh.handle_kwh("year", 1)


@pytest.mark.asyncio
async def test_hour_short_read_noted(db_session, kwh):
    await seed_list(
        db_session,
        "hours",
        [{"timestamp": ms(utc(2017, 3, 30, h)), "kwh": 1.0 + h} for h in range(6)],
    )
    result = await kwh.handle_kwh("hour", 1000)

    assert result["count"] == 6
    assert len(result["list"]) == 6
    assert result["requested"] == 1000
    assert result["description"].startswith("kWh consumption per hour for 1000 hours.")
    assert "1000 hours was asked for, but only 6 hours was found." in result["description"]
    assert result["total"] == 21.0
    assert result["max"] == 6.0
    assert result["min"] == 1.0


@pytest.mark.asyncio
async def test_hour_exact_read(db_session, kwh):
    await seed_list(db_session, "hours", [{"timestamp": h, "kwh": 2.0} for h in range(6)])
    result = await kwh.handle_kwh("hour", 2)

    assert result["count"] == 2
    assert "requested" not in result
    assert result["description"] == "kWh consumption per hour for 2 hours."
    assert result["average"] == 2.0


@pytest.mark.asyncio
async def test_day_converts_per_hour(db_session, kwh):
    await seed_list(
        db_session,
        "days",
        [
            {"timestamp": 1, "kwh": 24.0, "total": 240000, "perHour": [10000] * 24},
            {"timestamp": 2, "kwh": 12.0, "total": 120000, "perMinute": [5000] * 24},
        ],
    )
    result = await kwh.handle_kwh("day", 2)

    assert result["total"] == 36.0
    assert result["list"][0]["perHour"] == [1.0] * 24
    # legacy record renamed and converted
    assert result["list"][1]["perHour"] == [0.5] * 24


@pytest.mark.asyncio
async def test_week_converts_per_day(db_session, kwh):
    await seed_list(
        db_session, "weeks", [{"timestamp": 1, "kwh": 70.0, "perDay": [100000] * 7}]
    )
    result = await kwh.handle_kwh("week", 1)
    assert result["list"][0]["perDay"] == [10.0] * 7
    assert result["description"] == "kWh consumption per week for 1 weeks."


@pytest.mark.asyncio
async def test_short_day_read_names_found_count(db_session, kwh):
    await seed_list(db_session, "days", [{"timestamp": 1, "kwh": 24.0, "perHour": [10000] * 24}])
    result = await kwh.handle_kwh("day", 7)
    assert result["description"] == (
        "kWh consumption per day for 1 days. 7 days was asked for, but only 1 days was found."
    )


@pytest.mark.asyncio
async def test_month_count(db_session, kwh):
    await seed_list(
        db_session,
        "months",
        [
            {"timestamp": 1, "kwh": 300.0, "perDay": [100000] * 30},
            {"timestamp": 2, "kwh": 310.0, "perDay": [100000] * 31},
        ],
    )
    result = await kwh.handle_kwh("month", 3)

    assert result["count"] == 2
    assert result["total"] == 610.0
    assert result["list"][1]["perDay"] == [10.0] * 31
    assert result["description"].startswith("kWh consumption per month for 3 months.")
    assert "3 months was asked for" in result["description"]


@pytest.mark.asyncio
async def test_range_over_empty_list_fails(kwh):
    with pytest.raises(EmptyAggregateError):
        await kwh.handle_kwh("day", 7)


@pytest.mark.asyncio
async def test_today_sums_minutes_since_midnight(db_session, store):
    now = utc(2017, 3, 30, 0, 30)
    await seed_list(db_session, "minutes", [{"timestamp": i, "kwh": 0.01} for i in range(40)])

    result = await KwhService(store, clock=lambda: now).handle_kwh("today")

    assert result["kwh"] == 0.3
    assert result["description"] == "kWh used today from midnight to now."
    assert result["date"] == now.isoformat()


@pytest.mark.asyncio
async def test_today_counts_elapsed_minutes_on_dst_change(db_session, store):
    # clocks jump from 02:00 to 03:00, so noon is 11 hours after midnight
    now = datetime(2017, 3, 26, 12, tzinfo=ZoneInfo("Europe/Oslo"))
    yesterday = [{"timestamp": i, "kwh": 1.0} for i in range(60)]
    today = [{"timestamp": 60 + i, "kwh": 0.01} for i in range(660)]
    await seed_list(db_session, "minutes", yesterday + today)

    result = await KwhService(store).handle_kwh("today", now=now)

    assert result["kwh"] == 6.6


@pytest.mark.asyncio
async def test_today_at_midnight_is_zero(db_session, store):
    await seed_list(db_session, "minutes", [{"timestamp": 1, "kwh": 5.0}])
    result = await KwhService(store).handle_kwh("today", now=utc(2017, 3, 30))
    assert result["kwh"] == 0.0


@pytest.mark.asyncio
async def test_current_month(db_session, store):
    now = utc(2017, 3, 4, 12)
    # day records are stamped one day after the day they describe
    await seed_list(
        db_session,
        "days",
        [
            {"timestamp": ms(utc(2017, 2, 28)), "kwh": 99.0},  # Feb 27
            {"timestamp": ms(utc(2017, 3, 1)), "kwh": 99.0},   # Feb 28
            {"timestamp": ms(utc(2017, 3, 2)), "kwh": 10.0},   # Mar 1
            {"timestamp": ms(utc(2017, 3, 3)), "kwh": 10.0},   # Mar 2
            {"timestamp": ms(utc(2017, 3, 4)), "kwh": 10.0},   # Mar 3
        ],
    )
    await seed_list(db_session, "minutes", [{"timestamp": i, "kwh": 0.01} for i in range(720)])

    result = await KwhService(store, clock=lambda: now).handle_kwh("month", "this")

    assert result["kwh"] == 37.2
    assert result["description"] == "kWh used so far this month, March 2017"


@pytest.mark.asyncio
async def test_current_month_on_first_day(db_session, store):
    now = utc(2017, 3, 1, 1)
    await seed_list(db_session, "days", [{"timestamp": ms(utc(2017, 3, 1)), "kwh": 50.0}])
    await seed_list(db_session, "minutes", [{"timestamp": i, "kwh": 0.1} for i in range(60)])

    result = await KwhService(store).handle_kwh("month", "this", now=now)
    assert result["kwh"] == 6.0


@pytest.mark.asyncio
async def test_seconds(db_session, kwh, now):
    await seed_list(
        db_session,
        "seconds",
        [
            {"timestamp": 1, "kwh": 0.009, "watt": 3000},
            {"timestamp": 2, "kwh": 0.001, "watt": 360.6},
            {"timestamp": 3, "kwh": 0.002, "watt": 720.2},
            {"timestamp": 4, "kwh": 0.003, "watt": 1080.9},
        ],
    )
    result = await kwh.handle_kwh("seconds", 30)

    assert result["count"] == 30
    assert result["timestamp"] == ms(now)
    assert [item["watt"] for item in result["list"]] == [360, 720, 1080]
    assert result["summary"]["kwh"]["total"] == 0.006
    assert result["summary"]["watts"] == {"average": 720, "max": 1080, "min": 360}
    assert result["description"] == "kWh and Watt consumption per second for 30 seconds"
