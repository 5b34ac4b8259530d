"""Exceptions raised by the weather client.

    WeatherClientError   (base)
    +-- InvalidArgument  (blank API key or city, unknown mode)
    +-- UpstreamError    (provider answered with a non-200 status)
    +-- TransportError   (request could not complete)
    +-- ConstructionError (client could not be built)
"""


class WeatherClientError(Exception):
    """Base exception for all weather client errors."""


class InvalidArgument(WeatherClientError, ValueError):
    """Raised for empty/blank arguments the client cannot work with."""


class UpstreamError(WeatherClientError):
    """Raised when the provider returns a non-success response.

    ``status_code`` is the HTTP status; ``message`` is the provider's own
    ``message`` field when the error body could be parsed, else ``None``.
    """

    def __init__(self, status_code, message=None):
        self.status_code = status_code
        self.message = message
        reason = f"HTTP {status_code}"
        if message:
            reason += f": {message}"
        super().__init__(reason)


class TransportError(WeatherClientError):
    """Raised when the call to the provider fails before a usable response."""


class ConstructionError(WeatherClientError):
    """Raised when a client cannot be constructed (transport or scheduler setup)."""
