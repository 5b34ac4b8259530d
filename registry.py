"""One WeatherClient per API key, created at most once even under concurrent calls."""

import logging
import threading

from client import WeatherClient
from config import DEFAULT_POLL_INTERVAL, mask_key
from errors import ConstructionError, InvalidArgument, WeatherClientError
from models import Mode

log = logging.getLogger(__name__)


class ClientRegistry:
    """Table of live clients keyed by API key.

    The first successful ``create`` for a key wins; later calls get the same
    instance back regardless of their mode/interval arguments. A failed
    construction leaves no entry, so the next call tries again.
    """

    def __init__(self, client_factory=WeatherClient):
        self._client_factory = client_factory
        self._clients = {}
        self._key_locks = {}  # api_key -> [lock, callers using it]
        self._lock = threading.Lock()

    def create(self, api_key, mode=Mode.ON_DEMAND, poll_interval=DEFAULT_POLL_INTERVAL,
               **client_kwargs):
        if api_key is None or not str(api_key).strip():
            raise InvalidArgument("API key is empty")

        with self._lock:
            client = self._clients.get(api_key)
            if client is not None:
                return client
            slot = self._key_locks.setdefault(api_key, [threading.Lock(), 0])
            slot[1] += 1

        try:
            # Construction runs outside the table lock so other keys are not blocked.
            with slot[0]:
                with self._lock:
                    client = self._clients.get(api_key)
                    if client is not None:
                        return client
                client = self._construct(api_key, mode, poll_interval, client_kwargs)
                with self._lock:
                    self._clients[api_key] = client
                log.info("Created %r", client)
                return client
        finally:
            with self._lock:
                slot[1] -= 1
                if slot[1] == 0:
                    del self._key_locks[api_key]

    def _construct(self, api_key, mode, poll_interval, client_kwargs):
        try:
            return self._client_factory(
                api_key, mode, poll_interval, registry=self, **client_kwargs
            )
        except WeatherClientError:
            log.warning("Client construction failed for key %s", mask_key(api_key))
            raise
        except Exception as e:
            log.exception("Client construction failed for key %s", mask_key(api_key))
            raise ConstructionError(f"Could not create client: {e}") from e

    def remove(self, api_key):
        """Drop the entry for api_key if present. Does not stop the client."""
        with self._lock:
            self._clients.pop(api_key, None)

    def discard(self, api_key, client):
        """Drop the entry for api_key only if it is still this client."""
        with self._lock:
            if self._clients.get(api_key) is client:
                del self._clients[api_key]

    def get(self, api_key):
        with self._lock:
            return self._clients.get(api_key)

    def keys(self):
        with self._lock:
            return list(self._clients)

    def close_all(self):
        """Delete every registered client (stops their polling)."""
        with self._lock:
            clients = list(self._clients.values())
        for client in clients:
            client.delete()
        with self._lock:
            self._clients.clear()

    def __contains__(self, api_key):
        with self._lock:
            return api_key in self._clients

    def __len__(self):
        with self._lock:
            return len(self._clients)


registry = ClientRegistry()


def create_client(api_key, mode=Mode.ON_DEMAND, poll_interval=DEFAULT_POLL_INTERVAL, **client_kwargs):
    """Create (or return the existing) client for api_key in the process-wide registry."""
    return registry.create(api_key, mode, poll_interval, **client_kwargs)
