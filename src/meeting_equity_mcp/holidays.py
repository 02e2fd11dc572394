"""Holiday lookups: the gateway protocol, an in-memory table and a Nager.Date client."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable, Mapping
from datetime import date
from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from .errors import GatewayError
from .types import Holiday, HolidayCheck

logger = logging.getLogger(__name__)

NAGER_API_BASE = "https://date.nager.at/api/v3"
DEFAULT_CACHE_TTL = 7 * 24 * 60 * 60
_RETRYABLE_STATUS = {429, 500, 502, 503, 504}


class HolidayGateway(Protocol):
    """Answers whether a local date is a holiday in a country.

    Implementations raise :class:`GatewayError` when they cannot answer.
    Callers treat any other exception the same way (holiday status unknown).
    """

    async def is_holiday(self, local_date: date, country_code: str) -> HolidayCheck: ...


def find_holiday(day: date, holidays: Iterable[Holiday]) -> Holiday | None:
    """Return the holiday falling on *day*, if any."""
    for holiday in holidays:
        if holiday.date == day:
            return holiday
    return None


def upcoming_holidays(
    holidays: Iterable[Holiday], from_date: date, count: int = 5
) -> list[Holiday]:
    """Return the next *count* holidays strictly after *from_date*, soonest first."""
    later = sorted((h for h in holidays if h.date > from_date), key=lambda h: h.date)
    return later[:count]


def _check(holiday: Holiday | None) -> HolidayCheck:
    if holiday is None:
        return HolidayCheck(is_holiday=False)
    return HolidayCheck(is_holiday=True, name=holiday.name)


class StaticHolidayGateway:
    """Holiday lookups against an in-memory table keyed by country code."""

    def __init__(self, holidays: Mapping[str, Iterable[Holiday]] | None = None) -> None:
        self._holidays: dict[str, list[Holiday]] = {
            code.upper(): list(items) for code, items in (holidays or {}).items()
        }

    def holidays_for(self, country_code: str) -> list[Holiday]:
        return list(self._holidays.get(country_code.upper(), []))

    async def is_holiday(self, local_date: date, country_code: str) -> HolidayCheck:
        return _check(find_holiday(local_date, self.holidays_for(country_code)))


class NagerDateHolidayGateway:
    """Holiday lookups against the Nager.Date public API.

    Fetches a whole year per country and caches it for ``cache_ttl`` seconds.
    Concurrent lookups for the same (country, year) share one request.
    Transport errors and 5xx/429 responses are retried with exponential
    backoff (``backoff * 2**(n - 1)`` seconds before retry n); a 404 means the API has no
    data for the country and is cached as "no holidays".
    """

    def __init__(
        self,
        base_url: str = NAGER_API_BASE,
        *,
        timeout: float = 10.0,
        retries: int = 3,
        backoff: float = 1.0,
        cache_ttl: float = DEFAULT_CACHE_TTL,
        client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.retries = max(1, retries)
        self.backoff = backoff
        self.cache_ttl = cache_ttl
        self._client = client or httpx.AsyncClient(
            timeout=timeout, headers={"Accept": "application/json"}
        )
        self._owns_client = client is None
        self._clock = clock
        self._sleep = sleep
        self._cache: dict[tuple[str, int], tuple[float, list[Holiday]]] = {}
        self._locks: dict[tuple[str, int], asyncio.Lock] = {}

    async def __aenter__(self) -> "NagerDateHolidayGateway":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _cached(self, key: tuple[str, int]) -> list[Holiday] | None:
        entry = self._cache.get(key)
        if entry is None:
            return None
        fetched_at, holidays = entry
        if self._clock() - fetched_at > self.cache_ttl:
            del self._cache[key]
            return None
        return holidays

    async def fetch_holidays(self, country_code: str, year: int) -> list[Holiday]:
        """Return all public holidays for *country_code* in *year*."""
        if not isinstance(country_code, str) or len(country_code) != 2:
            raise GatewayError(
                "Valid ISO 3166-1 alpha-2 country code required", country_code
            )
        if not 2000 <= year <= 2100:
            raise GatewayError(f"Valid year required (2000-2100), got {year}", country_code)

        key = (country_code.upper(), year)
        cached = self._cached(key)
        if cached is not None:
            return cached

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            cached = self._cached(key)
            if cached is not None:
                return cached
            holidays = await self._fetch_with_retry(*key)
            self._cache[key] = (self._clock(), holidays)
            return holidays

    async def _fetch_with_retry(self, country_code: str, year: int) -> list[Holiday]:
        url = f"{self.base_url}/PublicHolidays/{year}/{country_code}"
        last_error: Exception | None = None

        for attempt in range(self.retries):
            if attempt:
                delay = self.backoff * 2 ** (attempt - 1)
                logger.info(
                    "Retry attempt %d/%d for %s after %.1fs",
                    attempt + 1,
                    self.retries,
                    url,
                    delay,
                )
                await self._sleep(delay)
            try:
                response = await self._client.get(url)
            except httpx.HTTPError as e:
                last_error = e
                continue

            if response.status_code == 404:
                logger.warning("No holiday data found for country: %s", country_code)
                return []
            if response.status_code in _RETRYABLE_STATUS:
                last_error = GatewayError(
                    f"Holiday API request failed: {response.status_code}", country_code
                )
                continue
            if response.is_error:
                raise GatewayError(
                    f"Holiday API request failed: {response.status_code}", country_code
                )
            return self._parse(response, country_code)

        raise GatewayError(
            f"Failed to fetch holidays for {country_code} {year} after "
            f"{self.retries} attempts: {last_error}",
            country_code,
        ) from last_error

    @staticmethod
    def _parse(response: httpx.Response, country_code: str) -> list[Holiday]:
        try:
            payload = response.json()
            return [Holiday.model_validate(item) for item in payload]
        except (ValueError, TypeError, ValidationError) as e:
            raise GatewayError(f"Malformed holiday response: {e}", country_code) from e

    async def is_holiday(self, local_date: date, country_code: str) -> HolidayCheck:
        holidays = await self.fetch_holidays(country_code, local_date.year)
        return _check(find_holiday(local_date, holidays))

    async def prefetch(
        self, country_codes: Iterable[str], years: Iterable[int] | None = None
    ) -> int:
        """Warm the cache concurrently; returns how many (country, year) pairs loaded.

        Failures are logged and skipped.
        """
        if years is None:
            current = date.today().year
            years = (current, current + 1)
        keys = [(c, y) for c in sorted(set(country_codes)) for y in years]
        results = await asyncio.gather(
            *(self.fetch_holidays(c, y) for c, y in keys), return_exceptions=True
        )
        loaded = 0
        for (code, year), result in zip(keys, results):
            if isinstance(result, GatewayError):
                logger.warning("Could not prefetch holidays for %s %d: %s", code, year, result)
            elif isinstance(result, BaseException):
                raise result
            else:
                loaded += 1
        return loaded
