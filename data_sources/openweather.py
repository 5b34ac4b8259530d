"""OpenWeatherMap current-weather client and response normalizer."""

import logging

import requests

from config import OPENWEATHER_URL, REQUEST_TIMEOUT
from errors import TransportError, UpstreamError
from models import Conditions, SunTimes, Temperature, WeatherReport, Wind

log = logging.getLogger(__name__)


def fetch_current(city, api_key, session=None, url=OPENWEATHER_URL, timeout=REQUEST_TIMEOUT):
    """Fetch the raw current-weather payload for a city.

    Raises UpstreamError for any non-200 answer (with the provider's
    ``message`` when the body carries one) and TransportError when the
    request itself fails.
    """
    http = session or requests
    params = {"q": city, "appid": api_key}
    try:
        resp = http.get(url, params=params, timeout=timeout)
    except requests.RequestException as e:
        raise TransportError(f"I/O error when calling API: {e}") from e

    if resp.status_code != 200:
        message = _error_message(resp)
        log.warning("OpenWeather returned HTTP %s for %s", resp.status_code, city)
        raise UpstreamError(resp.status_code, message)

    try:
        return resp.json()
    except ValueError as e:
        raise TransportError(f"Unreadable response body for {city}") from e


def fetch_weather(city, api_key, session=None):
    """Fetch and normalize current weather for a city."""
    return parse_current(fetch_current(city, api_key, session=session), city)


def _error_message(resp):
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("message") is not None:
        return str(body["message"])
    return None


def parse_current(raw, city):
    """Parse an OpenWeather response into a WeatherReport, defaulting absent fields."""
    if not isinstance(raw, dict):
        raw = {}

    conditions = None
    weather = raw.get("weather")
    if isinstance(weather, list) and weather:
        w = _section(weather[0])
        conditions = Conditions(
            main=_as_str(w.get("main"), ""),
            description=_as_str(w.get("description"), ""),
        )

    main = _section(raw.get("main"))
    wind = _section(raw.get("wind"))
    sys = _section(raw.get("sys"))

    return WeatherReport(
        name=_as_str(raw.get("name"), city),
        conditions=conditions,
        temperature=Temperature(
            temp=_as_float(main.get("temp"), 0.0),
            feels_like=_as_float(main.get("feels_like"), 0.0),
        ),
        visibility=_as_int(raw.get("visibility"), 0),
        wind=Wind(speed=_as_float(wind.get("speed"), 0.0)),
        datetime=_as_int(raw.get("dt"), 0),
        sys=SunTimes(
            sunrise=_as_int(sys.get("sunrise"), 0),
            sunset=_as_int(sys.get("sunset"), 0),
        ),
        timezone=_as_int(raw.get("timezone"), 0),
    )


def _section(value):
    return value if isinstance(value, dict) else {}


def _as_str(value, default):
    if value is None:
        return default
    return str(value)


def _as_float(value, default):
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_int(value, default):
    # bool is an int subclass but never a meaningful reading here
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default
