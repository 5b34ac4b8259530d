"""Command-line lookup of current weather through the per-key client registry."""

import argparse
import json
import logging
import os
import sys

from config import DEFAULT_POLL_INTERVAL
from errors import WeatherClientError
from models import Mode
from registry import registry

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
log = logging.getLogger(__name__)


def _parse_args(argv):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("cities", nargs="+", metavar="CITY")
    parser.add_argument("--api-key", default=os.getenv("OPENWEATHER_API_KEY"),
                        help="OpenWeather API key (default: $OPENWEATHER_API_KEY)")
    parser.add_argument("--mode", default=Mode.ON_DEMAND.value,
                        choices=[m.value for m in Mode])
    parser.add_argument("--interval", type=int, default=DEFAULT_POLL_INTERVAL,
                        help="polling interval in seconds (minimum 60)")
    return parser.parse_args(argv)


def main(argv=None):
    args = _parse_args(argv)
    try:
        client = registry.create(args.api_key, Mode.parse(args.mode), args.interval)
    except WeatherClientError as e:
        log.error("Could not create client: %s", e)
        return 1

    status = 0
    try:
        for city in args.cities:
            try:
                print(json.dumps(client.get_weather(city), ensure_ascii=False))
            except WeatherClientError as e:
                log.error("Lookup failed for %s: %s", city, e)
                status = 1
    finally:
        client.delete()
    return status


if __name__ == "__main__":
    sys.exit(main())
