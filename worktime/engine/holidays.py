"""
Holiday calendar: Sundays plus public holidays fetched per year.

Public holidays come from a ``HolidaySource``. ``HolidayCache`` owns the
per-year entries, fetches missing years concurrently with a timeout per
year and falls back to a fixed-date list for any year that fails.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

import httpx

from worktime.core.config import settings

logger = logging.getLogger(__name__)

SUNDAY = 6

# Fixed-date national holidays used when a year cannot be fetched, as
# (month, day, first year, last year). Equinoxes, Happy Monday dates and
# substitute holidays are not covered, so the list is approximate.
FALLBACK_HOLIDAYS = (
    (1, 1, None, None),
    (2, 11, None, None),
    (2, 23, 2020, None),
    (4, 29, None, None),
    (5, 3, None, None),
    (5, 4, None, None),
    (5, 5, None, None),
    (8, 11, 2016, None),
    (11, 3, None, None),
    (11, 23, None, None),
    (12, 23, 1989, 2018),
)


def fallback_holidays(year: int) -> frozenset[date]:
    return frozenset(
        date(year, month, day)
        for month, day, first, last in FALLBACK_HOLIDAYS
        if (first is None or year >= first) and (last is None or year <= last)
    )


class HolidaySource(ABC):
    """Fetches the public holidays of one calendar year."""

    @abstractmethod
    async def fetch(self, year: int) -> set[date]:
        raise NotImplementedError


class HttpHolidaySource(HolidaySource):
    """Reads a JSON object keyed by ISO date, one document per year."""

    def __init__(
        self,
        url_template: str | None = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float | None = None,
    ):
        self._url_template = url_template or settings.HOLIDAY_API_URL
        self._client = client
        self._timeout = timeout if timeout is not None else settings.HOLIDAY_FETCH_TIMEOUT_SECONDS

    async def fetch(self, year: int) -> set[date]:
        url = self._url_template.format(year=year)
        if self._client is not None:
            resp = await self._client.get(url, timeout=self._timeout)
        else:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.get(url)
        resp.raise_for_status()

        payload = resp.json()
        if not isinstance(payload, dict):
            raise ValueError(f"Unexpected holiday payload for {year}")
        return {date.fromisoformat(key) for key in payload}


@dataclass(frozen=True)
class HolidayCalendar:
    holidays: frozenset[date] = frozenset()

    def is_holiday(self, day: date) -> bool:
        return day.weekday() == SUNDAY or day in self.holidays


@dataclass(frozen=True)
class _YearEntry:
    dates: frozenset[date]
    fetched_at: float


def years_around(year: int) -> tuple[int, int, int]:
    return year - 1, year, year + 1


class HolidayCache:
    """Per-year holiday sets with a TTL.

    Entries are immutable; a refresh replaces the whole entry, so readers
    never observe a half-filled year. Fills are serialised by a lock.
    """

    def __init__(
        self,
        source: HolidaySource,
        *,
        ttl_seconds: int | None = None,
        timeout: float | None = None,
        cache_fallbacks: bool | None = None,
    ):
        self._source = source
        self._ttl = ttl_seconds if ttl_seconds is not None else settings.HOLIDAY_CACHE_TTL_SECONDS
        self._timeout = timeout if timeout is not None else settings.HOLIDAY_FETCH_TIMEOUT_SECONDS
        self._cache_fallbacks = (
            cache_fallbacks if cache_fallbacks is not None else settings.HOLIDAY_CACHE_FALLBACKS
        )
        self._entries: dict[int, _YearEntry] = {}
        self._lock = asyncio.Lock()

    def _fresh(self, year: int, now: float) -> bool:
        entry = self._entries.get(year)
        return entry is not None and now - entry.fetched_at < self._ttl

    async def _fetch_year(self, year: int) -> tuple[frozenset[date], bool]:
        try:
            dates = await asyncio.wait_for(self._source.fetch(year), timeout=self._timeout)
            return frozenset(dates), True
        except Exception as exc:  # any failure degrades this year only
            logger.warning(
                "Holiday fetch for %s failed (%s); using fixed-date fallback",
                year,
                exc.__class__.__name__,
            )
            return fallback_holidays(year), False

    async def calendar_for(self, years: Iterable[int]) -> HolidayCalendar:
        wanted = sorted(set(years))
        result: dict[int, frozenset[date]] = {}

        async with self._lock:
            now = time.monotonic()
            missing = [y for y in wanted if not self._fresh(y, now)]
            if missing:
                fetched = await asyncio.gather(*(self._fetch_year(y) for y in missing))
                for year, (dates, ok) in zip(missing, fetched):
                    if ok or self._cache_fallbacks:
                        self._entries[year] = _YearEntry(dates, time.monotonic())
                    result[year] = dates
                logger.info("Holiday calendar loaded for years %s", missing)

            for year in wanted:
                if year not in result:
                    result[year] = self._entries[year].dates

        merged: set[date] = set()
        for dates in result.values():
            merged |= dates
        return HolidayCalendar(frozenset(merged))

    def cached_years(self) -> list[int]:
        return sorted(self._entries)
