"""Shared pytest fixtures for the weather client test suite."""

from __future__ import annotations

import threading
from typing import Any

import pytest

from data_sources.openweather import parse_current
from registry import ClientRegistry


class FakeClock:
    """Manually advanced clock returning epoch seconds."""

    def __init__(self, start: float = 1_690_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingFetcher:
    """Fetcher stand-in that records calls and can fail for chosen cities."""

    def __init__(self, failing: set[str] | None = None) -> None:
        self.calls: list[str] = []
        self.failing = failing or set()
        self._lock = threading.Lock()

    def __call__(self, city: str, api_key: str):
        with self._lock:
            self.calls.append(city)
        if city in self.failing:
            raise RuntimeError(f"boom for {city}")
        return parse_current({"name": city, "main": {"temp": 280.0 + len(self.calls)}}, city)

    def count(self, city: str) -> int:
        with self._lock:
            return self.calls.count(city)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fetcher() -> CountingFetcher:
    return CountingFetcher()


@pytest.fixture
def registry() -> ClientRegistry:
    reg = ClientRegistry()
    yield reg
    reg.close_all()


@pytest.fixture
def sample_payload() -> dict[str, Any]:
    return {
        "weather": [{"main": "Clear", "description": "clear sky"}],
        "main": {"temp": 280.1, "feels_like": 278.0},
        "visibility": 10000,
        "wind": {"speed": 3.6},
        "dt": 1690000000,
        "sys": {"sunrise": 1689990000, "sunset": 1690030000},
        "timezone": 3600,
        "name": "Test",
    }
