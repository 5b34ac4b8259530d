"""Dataclasses for weather data."""

import enum
from dataclasses import dataclass, field, asdict
from typing import Any, Optional

from errors import InvalidArgument


class Mode(enum.Enum):
    ON_DEMAND = "on_demand"
    POLLING = "polling"

    @classmethod
    def parse(cls, value):
        """Accept a Mode or its name/value in any case."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower().replace("-", "_")
            for mode in cls:
                if key in (mode.value, mode.name.lower()):
                    return mode
        raise InvalidArgument(f"Unknown mode: {value!r}")


@dataclass(frozen=True)
class CacheEntry:
    payload: Any
    fetched_at: float  # epoch seconds


@dataclass
class Conditions:
    main: str
    description: str


@dataclass
class Temperature:
    temp: float = 0.0
    feels_like: float = 0.0


@dataclass
class Wind:
    speed: float = 0.0


@dataclass
class SunTimes:
    sunrise: int = 0
    sunset: int = 0


@dataclass
class WeatherReport:
    name: str
    conditions: Optional[Conditions] = None
    temperature: Temperature = field(default_factory=Temperature)
    visibility: int = 0
    wind: Wind = field(default_factory=Wind)
    datetime: int = 0
    sys: SunTimes = field(default_factory=SunTimes)
    timezone: int = 0

    def to_dict(self):
        """Canonical output record. ``weather`` is left out when there are no conditions."""
        out = {}
        if self.conditions is not None:
            out["weather"] = asdict(self.conditions)
        out["temperature"] = asdict(self.temperature)
        out["visibility"] = self.visibility
        out["wind"] = asdict(self.wind)
        out["datetime"] = self.datetime
        out["sys"] = asdict(self.sys)
        out["timezone"] = self.timezone
        out["name"] = self.name
        return out
