"""Tests for the holiday calendar, its cache and the HTTP holiday source."""

import asyncio
from datetime import date

import httpx
import pytest

from worktime.engine.aggregator import aggregate_facility
from worktime.engine.domain import AttendanceEntry, EmployeeProfile
from worktime.engine.holidays import (HolidayCache, HolidayCalendar,
                                      HolidaySource, HttpHolidaySource,
                                      fallback_holidays, years_around)


# ── Calendar ────────────────────────────────────────────────────────
def test_sunday_is_holiday_without_data():
    assert HolidayCalendar().is_holiday(date(2024, 3, 3))


def test_saturday_is_not_holiday():
    assert not HolidayCalendar().is_holiday(date(2024, 3, 2))


def test_listed_weekday_is_holiday():
    calendar = HolidayCalendar(frozenset({date(2024, 3, 20)}))
    assert calendar.is_holiday(date(2024, 3, 20))
    assert not calendar.is_holiday(date(2024, 3, 21))


def test_years_around():
    assert years_around(2024) == (2023, 2024, 2025)


# ── Cache ───────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_cache_merges_years(fake_source):
    source = fake_source({2023: {date(2023, 12, 31)}, 2024: {date(2024, 3, 20)}})
    cache = HolidayCache(source, ttl_seconds=3600, timeout=1.0)

    calendar = await cache.calendar_for([2023, 2024, 2025])

    assert date(2023, 12, 31) in calendar.holidays
    assert date(2024, 3, 20) in calendar.holidays
    assert sorted(source.calls) == [2023, 2024, 2025]


@pytest.mark.asyncio
async def test_cache_reuses_fresh_entries(fake_source):
    source = fake_source({2024: {date(2024, 3, 20)}})
    cache = HolidayCache(source, ttl_seconds=3600, timeout=1.0)

    await cache.calendar_for([2024])
    await cache.calendar_for([2024])

    assert source.calls == [2024]
    assert cache.cached_years() == [2024]


@pytest.mark.asyncio
async def test_expired_entries_are_refetched(fake_source):
    source = fake_source({2024: set()})
    cache = HolidayCache(source, ttl_seconds=0, timeout=1.0)

    await cache.calendar_for([2024])
    await cache.calendar_for([2024])

    assert source.calls == [2024, 2024]


@pytest.mark.asyncio
async def test_failed_year_falls_back_without_affecting_others(fake_source):
    source = fake_source({2024: {date(2024, 3, 20)}}, failing=[2023])
    cache = HolidayCache(source, ttl_seconds=3600, timeout=1.0, cache_fallbacks=False)

    calendar = await cache.calendar_for([2023, 2024])

    assert date(2024, 3, 20) in calendar.holidays
    assert fallback_holidays(2023) <= calendar.holidays
    # Fallback years are retried on the next call
    assert cache.cached_years() == [2024]
    await cache.calendar_for([2023, 2024])
    assert source.calls.count(2023) == 2


@pytest.mark.asyncio
async def test_fallbacks_cached_when_enabled(fake_source):
    source = fake_source(failing=[2023])
    cache = HolidayCache(source, ttl_seconds=3600, timeout=1.0, cache_fallbacks=True)

    await cache.calendar_for([2023])
    await cache.calendar_for([2023])

    assert source.calls == [2023]


class _SlowSource(HolidaySource):
    async def fetch(self, year):
        if year == 2023:
            await asyncio.sleep(5)
        return {date(year, 7, 15)}


@pytest.mark.asyncio
async def test_timeout_falls_back_per_year():
    cache = HolidayCache(_SlowSource(), ttl_seconds=3600, timeout=0.05)

    calendar = await cache.calendar_for([2023, 2024])

    assert date(2024, 7, 15) in calendar.holidays
    assert date(2023, 7, 15) not in calendar.holidays
    assert date(2023, 1, 1) in calendar.holidays


def test_fallback_list_has_fixed_national_holidays():
    days = fallback_holidays(2024)
    assert date(2024, 1, 1) in days
    assert date(2024, 11, 23) in days
    assert len(days) == 10


# ── HTTP source ─────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_http_source_parses_date_keys():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/2024.json"
        return httpx.Response(200, json={"2024-01-01": "New Year", "2024-03-20": "Equinox"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        source = HttpHolidaySource("https://holidays.test/api/{year}.json", client=client)
        days = await source.fetch(2024)

    assert days == {date(2024, 1, 1), date(2024, 3, 20)}


@pytest.mark.asyncio
async def test_http_error_triggers_fallback():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        source = HttpHolidaySource("https://holidays.test/api/{year}.json", client=client)
        cache = HolidayCache(source, ttl_seconds=3600, timeout=1.0)
        calendar = await cache.calendar_for([2024])

    assert calendar.holidays == fallback_holidays(2024)


@pytest.mark.asyncio
async def test_unexpected_payload_triggers_fallback():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=["2024-01-01"])

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        source = HttpHolidaySource("https://holidays.test/api/{year}.json", client=client)
        cache = HolidayCache(source, ttl_seconds=3600, timeout=1.0)
        calendar = await cache.calendar_for([2024])

    assert calendar.holidays == fallback_holidays(2024)


class _BrokenSource(HolidaySource):
    def __init__(self):
        self.calls = []

    async def fetch(self, year):
        self.calls.append(year)
        if year == 2023:
            raise ConnectionError("socket reset")
        return {date(year, 7, 15)}


@pytest.mark.asyncio
async def test_unexpected_source_error_falls_back():
    source = _BrokenSource()
    cache = HolidayCache(source, ttl_seconds=3600, timeout=1.0)

    calendar = await cache.calendar_for([2023, 2024, 2025])

    assert fallback_holidays(2023) <= calendar.holidays
    assert date(2024, 7, 15) in calendar.holidays
    assert date(2025, 7, 15) in calendar.holidays
    assert sorted(source.calls) == [2023, 2024, 2025]


@pytest.mark.asyncio
async def test_aggregation_survives_source_error(memory_store):
    memory_store.add_employee(
        EmployeeProfile(
            id=1,
            name="Sato Ken",
            employee_code="E001",
            category="care",
            salary_type="hourly",
            cutoff_type="20",
            facility_id=1,
            facility_name="Iwade",
            company_special=False,
        )
    )
    memory_store.records.append(
        AttendanceEntry(employee_id=1, date=date(2024, 3, 4), check_in="09:00", check_out="17:00")
    )
    cache = HolidayCache(_BrokenSource(), ttl_seconds=3600, timeout=1.0)

    report = await aggregate_facility(memory_store, cache, 1, "2024-03")

    assert report.employees[0].weekday_hours == 8.0


def test_fallback_list_respects_year_ranges():
    recent = fallback_holidays(2024)
    older = fallback_holidays(2015)

    assert date(2024, 2, 23) in recent
    assert date(2024, 8, 11) in recent
    assert date(2024, 12, 23) not in recent
    assert date(2015, 2, 23) not in older
    assert date(2015, 8, 11) not in older
    assert date(2015, 12, 23) in older
