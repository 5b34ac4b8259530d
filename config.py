"""Constants and defaults for the OpenWeather client."""

import os

# Provider endpoint (current weather by city name)
OPENWEATHER_URL = os.getenv(
    "OPENWEATHER_URL", "https://api.openweathermap.org/data/2.5/weather"
)
REQUEST_TIMEOUT = float(os.getenv("OPENWEATHER_TIMEOUT", "10"))  # seconds

# Cache
FRESHNESS_WINDOW = 600  # 10 min before a cached city is refetched
CACHE_CAPACITY = 10     # cities kept per client, LRU beyond that

# Background polling (seconds)
MIN_POLL_INTERVAL = 60
DEFAULT_POLL_INTERVAL = 60


def mask_key(api_key):
    """Return the API key with all but the last 4 characters hidden, for logs."""
    if not api_key:
        return ""
    tail = api_key[-4:]
    return "*" * max(len(api_key) - 4, 0) + tail
