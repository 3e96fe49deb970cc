"""Power meter API routes: kWh, watts and meter total."""

from fastapi import APIRouter, Depends, Response

from powermeter import __version__
from powermeter.api.deps import (
    get_date_lookup_service,
    get_kwh_service,
    get_meter_service,
    get_watts_service,
)
from powermeter.errors import InvalidArgumentError
from powermeter.schemas.power import (
    ErrorOut,
    MeterAuditOut,
    MeterTotalOut,
    MeterTotalUpdate,
    WattsOut,
    WattsSeries,
)
from powermeter.services import DateLookupService, KwhService, MeterService, WattsService

router = APIRouter(
    responses={
        400: {"model": ErrorOut},
        404: {"model": ErrorOut},
        501: {"model": ErrorOut},
        503: {"model": ErrorOut},
    },
)

# Cache-Control max-age (seconds) per kWh query type
KWH_MAX_AGE = {
    "seconds": 1,
    "today": 60,
    "hour": 5 * 60,
    "day": 10 * 60,
    "week": 10 * 60,
    "month": 10 * 60,
    "year": 10 * 60,
}


def _cache(response: Response, max_age: int) -> None:
    response.headers["Cache-Control"] = f"public, max-age={max_age}"


# --- kWh by calendar date ---

@router.get("/kwh/date")
async def kwh_date_usage(response: Response):
    """Usage of the date lookup endpoints."""
    _cache(response, 864000)
    return {
        "version": __version__,
        "description": "Get power usage information for a given date, month or year.",
        "usage": "/power/kwh/date/:year?/:month?/:day?",
    }


@router.get("/kwh/date/{year}")
async def kwh_date_year(
    year: str,
    response: Response,
    lookup: DateLookupService = Depends(get_date_lookup_service),
):
    """Year totals: the year is validated but no data is aggregated yet."""
    lookup.assert_year(year)
    _cache(response, 8640000)
    return {
        "version": __version__,
        "description": "Get power usage for the entire year. No data yet.",
    }


@router.get("/kwh/date/{year}/{month}")
async def kwh_date_month(
    year: str,
    month: str,
    response: Response,
    lookup: DateLookupService = Depends(get_date_lookup_service),
):
    """kWh for one calendar month, with the per-day breakdown."""
    data = await lookup.get_month_summary(year, month)
    _cache(response, 86400)
    return {**data, "version": __version__}


@router.get("/kwh/date/{year}/{month}/{day}")
async def kwh_date_day(
    year: str,
    month: str,
    day: str,
    response: Response,
    lookup: DateLookupService = Depends(get_date_lookup_service),
):
    """kWh for one calendar day, with the per-hour breakdown."""
    data = await lookup.find_by_date(year, month, day)
    _cache(response, 864000)
    return data


# --- kWh over the most recent buckets ---

@router.get("/kwh/{type}")
@router.get("/kwh/{type}/{count}")
async def kwh(
    type: str,
    response: Response,
    count: str = "1",
    kwh_service: KwhService = Depends(get_kwh_service),
):
    """kWh for the last ``count`` seconds/hours/days/weeks/months, or today."""
    if type not in KWH_MAX_AGE:
        raise InvalidArgumentError("/power/kwh/:type called with invalid type")

    parsed: int | str = count
    if count != "this":
        try:
            parsed = int(count)
        except ValueError:
            raise InvalidArgumentError(
                f"last param must be an integer or a keyword. got: {count}"
            ) from None

    data = await kwh_service.handle_kwh(type, parsed)
    _cache(response, KWH_MAX_AGE[type])
    return {**data, "version": __version__}


# --- watts ---

@router.get("/watts/hour", response_model=WattsSeries)
async def watts_hour(
    response: Response,
    watts: WattsService = Depends(get_watts_service),
):
    """Average watts per minute over the last hour."""
    data = await watts.get_watts_last_hour_series()
    _cache(response, 30)
    return data


@router.get("/watts", response_model=WattsOut)
@router.get("/watts/{interval}", response_model=WattsOut)
async def watts_interval(
    response: Response,
    interval: str = "10",
    watts: WattsService = Depends(get_watts_service),
):
    """Current usage in watts averaged over ``interval`` seconds."""
    if not interval.isdigit():
        raise InvalidArgumentError(
            "Invalid interval given to /watts/:interval. It must either be an "
            'Integer representing seconds, or the keyword "hour".'
        )
    data = await watts.get_watts(int(interval))
    _cache(response, 5)
    return data


# --- meter total ---

@router.get("/meter/total", response_model=MeterTotalOut)
async def meter_total(
    response: Response,
    meter: MeterService = Depends(get_meter_service),
):
    """Current power meter total registered on the server."""
    data = await meter.get_total()
    _cache(response, 6)
    return data


@router.put("/meter/total", response_model=MeterAuditOut)
async def put_meter_total(
    body: MeterTotalUpdate,
    meter: MeterService = Depends(get_meter_service),
):
    """Register a new absolute meter reading."""
    return await meter.put_total(body.value)
