"""Per-API-key weather client with a freshness-aware cache and optional polling."""

import json
import logging
import threading
import time
from datetime import datetime

import requests
from apscheduler.schedulers.background import BackgroundScheduler

from cache import WeatherCache
from config import DEFAULT_POLL_INTERVAL, MIN_POLL_INTERVAL, mask_key
from data_sources.openweather import fetch_weather
from errors import ConstructionError, InvalidArgument
from models import Mode

log = logging.getLogger(__name__)


class WeatherClient:
    """Weather lookups for one API key.

    In ``Mode.POLLING`` a background scheduler re-fetches every cached city
    each ``poll_interval`` seconds, starting right away. In ``Mode.ON_DEMAND``
    cities are only fetched when a lookup finds them missing or stale.

    Network calls never run while the cache lock is held. Two callers asking
    for the same stale city at once may both fetch it; the last store wins.
    """

    def __init__(self, api_key, mode=Mode.ON_DEMAND, poll_interval=DEFAULT_POLL_INTERVAL,
                 *, fetcher=None, registry=None, clock=time.time, session=None):
        if api_key is None or not str(api_key).strip():
            raise InvalidArgument("API key is empty")
        self._api_key = api_key
        self._mode = Mode.parse(mode)
        self._poll_interval = max(MIN_POLL_INTERVAL, int(poll_interval))
        self._registry = registry
        self._cache = WeatherCache(clock=clock)
        self._state_lock = threading.Lock()
        self._closed = False
        self._scheduler = None

        self._owns_session = session is None and fetcher is None
        try:
            self._session = requests.Session() if self._owns_session else session
        except Exception as e:
            raise ConstructionError(f"Could not open HTTP session: {e}") from e
        self._fetcher = fetcher or self._fetch_with_session

        if self._mode is Mode.POLLING:
            try:
                self._start_polling()
            except Exception as e:
                self._close_session()
                raise ConstructionError(f"Could not start polling: {e}") from e

    # ── Properties ────────────────────────────────────────────────────

    @property
    def api_key(self):
        return self._api_key

    @property
    def mode(self):
        return self._mode

    @property
    def poll_interval(self):
        return self._poll_interval

    @property
    def closed(self):
        return self._closed

    @property
    def is_polling(self):
        scheduler = self._scheduler
        return scheduler is not None and scheduler.running

    def cached_cities(self):
        return self._cache.snapshot_keys()

    # ── Lookups ───────────────────────────────────────────────────────

    def get_weather(self, city):
        """Return the canonical weather record for a city, from cache when fresh."""
        if city is None or not str(city).strip():
            raise InvalidArgument("City required")
        city = str(city).strip()

        cached = self._cache.get_fresh(city)
        if cached is not None:
            return cached.to_dict()
        return self._fetch_and_store(city).to_dict()

    def get_weather_json(self, city):
        """Same as get_weather, serialized as a JSON string."""
        return json.dumps(self.get_weather(city), ensure_ascii=False)

    def _fetch_and_store(self, city):
        report = self._fetcher(city, self._api_key)
        # put() is a no-op once delete() has closed the cache
        if self._cache.put(city, report) is not None:
            log.info("Weather updated for %s", city)
        return report

    def _fetch_with_session(self, city, api_key):
        return fetch_weather(city, api_key, session=self._session)

    # ── Polling ───────────────────────────────────────────────────────

    def _start_polling(self):
        self._scheduler = BackgroundScheduler(daemon=True)
        self._scheduler.add_job(
            self.refresh_all, "interval",
            seconds=self._poll_interval,
            next_run_time=datetime.now(),
            id="refresh_all",
            max_instances=1,
            coalesce=True,
        )
        self._scheduler.start()
        log.info("Polling started for key %s every %ds",
                 mask_key(self._api_key), self._poll_interval)

    def refresh_all(self):
        """Re-fetch every cached city. Failures are logged and skipped."""
        cities = self._cache.snapshot_keys()
        if not cities:
            return 0
        log.info("Refreshing weather for %d cities", len(cities))
        refreshed = 0
        for city in cities:
            try:
                self._fetch_and_store(city)
                refreshed += 1
            except Exception:
                log.exception("Failed to refresh weather for %s", city)
        return refreshed

    # ── Teardown ──────────────────────────────────────────────────────

    def delete(self):
        """Stop polling, drop cached data and unregister. Safe to call repeatedly."""
        with self._state_lock:
            if self._closed:
                return
            self._closed = True
            scheduler, self._scheduler = self._scheduler, None

        if scheduler is not None and scheduler.running:
            scheduler.shutdown(wait=False)
            log.info("Polling stopped for key %s", mask_key(self._api_key))
        self._cache.close()
        self._close_session()
        if self._registry is not None:
            # only unregister if the key still maps to this instance
            self._registry.discard(self._api_key, self)

    close = delete

    def _close_session(self):
        if self._owns_session and self._session is not None:
            self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.delete()

    def __repr__(self):
        return (f"WeatherClient(api_key={mask_key(self._api_key)!r}, "
                f"mode={self._mode.name}, poll_interval={self._poll_interval})")
