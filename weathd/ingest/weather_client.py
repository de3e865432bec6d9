"""weatherapi.com client with a per-category cache of the last good payload."""

import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx

from weathd.config.defaults import DEFAULT_REQUEST_TIMEOUT, WEATHERAPI_BASE_URL
from weathd.config.schema import ApiRequestConfig
from weathd.models.common import Category, utc_now_iso
from weathd.models.location import render_location
from weathd.models.weather import CacheEntry

logger = logging.getLogger(__name__)

# Name of the hourly flag on each endpoint that accepts one
_HOURLY_PARAM = {Category.CURRENT: "hour", Category.FORECAST: "hourly"}


class FetchError(Exception):
    """A category fetch failed. The cache slot is left as it was."""

    def __init__(self, category: Category, message: str):
        super().__init__(message)
        self.category = category


class TransportError(FetchError):
    """The provider could not be reached or answered with garbage."""

    def __init__(self, category: Category, detail: str):
        super().__init__(category, f"{category} request failed: {detail}")
        self.detail = detail


class ProviderError(FetchError):
    """The provider answered with an application-level error document."""

    def __init__(self, category: Category, document: dict[str, Any]):
        error = document.get("error")
        if isinstance(error, dict):
            self.code = error.get("code")
            self.message = str(error.get("message", ""))
        else:
            self.code = None
            self.message = str(error)
        super().__init__(
            category, f"{category} provider error {self.code}: {self.message}"
        )
        self.document = document


@dataclass(frozen=True)
class FetchOutcome:
    category: Category
    entry: CacheEntry | None = None
    error: FetchError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class FetchReport:
    current: FetchOutcome | None = None
    forecast: FetchOutcome | None = None
    alerts: FetchOutcome | None = None

    def outcomes(self) -> list[FetchOutcome]:
        return [o for o in (self.current, self.forecast, self.alerts) if o is not None]

    def errors(self) -> list[FetchError]:
        return [o.error for o in self.outcomes() if o.error is not None]


class WeatherClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = WEATHERAPI_BASE_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self._clock = clock
        self._cache: dict[Category, CacheEntry | None] = {c: None for c in Category}

    def cached(self, category: Category) -> CacheEntry | None:
        return self._cache[category]

    def cached_current(self) -> CacheEntry | None:
        return self._cache[Category.CURRENT]

    def cached_forecast(self) -> CacheEntry | None:
        return self._cache[Category.FORECAST]

    def cached_alerts(self) -> CacheEntry | None:
        return self._cache[Category.ALERTS]

    def fetch_all(self, config: ApiRequestConfig) -> FetchReport:
        """Fetch every enabled category. Disabled categories stay None.

        Each category succeeds or fails on its own.
        """
        outcomes: dict[str, FetchOutcome | None] = {}
        for category in Category:
            if not config.requests.enabled(category):
                outcomes[category.value] = None
                continue
            try:
                entry = self.fetch_category(category, config)
                outcomes[category.value] = FetchOutcome(category, entry=entry)
            except FetchError as e:
                outcomes[category.value] = FetchOutcome(category, error=e)
        return FetchReport(**outcomes)

    def fetch_category(self, category: Category, config: ApiRequestConfig) -> CacheEntry:
        """Fetch one category and replace its cache slot on success.

        Raises TransportError or ProviderError; the slot is untouched then.
        """
        url = f"{self.base_url}/{category.value}.json"
        params = self._params(category, config)

        try:
            resp = httpx.post(
                url,
                headers={"key": self._api_key},
                params=params,
                timeout=self.timeout,
            )
        except httpx.RequestError as e:
            raise TransportError(category, str(e) or type(e).__name__) from e

        try:
            document = resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise TransportError(
                category, f"HTTP {resp.status_code}, undecodable body: {e}"
            ) from e
        if not isinstance(document, dict):
            raise TransportError(
                category, f"HTTP {resp.status_code}, expected a JSON object"
            )

        if document.get("error"):
            raise ProviderError(category, document)
        if resp.status_code >= 400:
            raise TransportError(category, f"HTTP {resp.status_code}")

        entry = CacheEntry(
            payload=document, fetched_at=self._clock(), fetched_at_iso=utc_now_iso()
        )
        self._cache[category] = entry
        logger.debug("Cached %s payload at %s", category, entry.fetched_at_iso)
        return entry

    def _params(self, category: Category, config: ApiRequestConfig) -> dict[str, str]:
        params = {"q": render_location(config.location)}
        if category in _HOURLY_PARAM:
            if config.forecast_days is not None:
                params["days"] = str(config.forecast_days)
            if config.include_hourly is not None:
                params[_HOURLY_PARAM[category]] = str(config.include_hourly).lower()
        return params
