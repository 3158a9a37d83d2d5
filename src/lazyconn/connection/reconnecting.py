import time

from lazyconn import settings
from lazyconn.attributes import TTL_ATTRIBUTE
from lazyconn.connection.decorator import ConnectionDecorator
from lazyconn.connection.lazy import LazyConnection
from lazyconn.errors import InvalidArgumentError
from lazyconn.settings import logger


def _validate_ttl(ttl):
    if isinstance(ttl, bool) or not isinstance(ttl, (int, float)) or ttl <= 0:
        raise InvalidArgumentError(f"The connection TTL must be a positive number of seconds, {ttl!r} given")
    return ttl


class ReconnectingConnection(ConnectionDecorator):
    """Replaces the physical connection of a ``LazyConnection`` once it is older than ``ttl`` seconds.

    Expiry is checked when an operation needs the connection; an open
    transaction always keeps the current connection. The TTL may be changed
    at any time and applies from the next operation on.
    """

    def __init__(self, connection: LazyConnection, ttl=None, clock=time.monotonic):
        if not isinstance(connection, LazyConnection):
            raise InvalidArgumentError(
                f"{type(self).__name__} wraps a LazyConnection, {type(connection).__name__} given"
            )
        super().__init__(connection)
        self._ttl = _validate_ttl(settings.DEFAULT_TTL if ttl is None else ttl)
        self._clock = clock
        self._last_connected_at = None
        self._connection_count = 0
        if connection.is_connected():
            self._last_connected_at = self._clock()
            self._connection_count = 1

    @property
    def ttl(self):
        return self._ttl

    @ttl.setter
    def ttl(self, value):
        self._ttl = _validate_ttl(value)

    @property
    def last_connected_at(self):
        return self._last_connected_at

    def get_connection_count(self):
        return self._connection_count

    def _expired(self):
        return self._clock() - self._last_connected_at > self._ttl

    def _resolve(self):
        inner = self._inner
        if inner.is_connected():
            if self._last_connected_at is None:
                # connected through the wrapped handle directly
                self._last_connected_at = self._clock()
                self._connection_count += 1
                return inner.handle
            if inner.in_transaction() or not self._expired():
                return inner.handle
            logger.info(f'Connection older than {self._ttl}s, reconnecting')
            inner.close()

        handle = inner.connect()
        self._last_connected_at = self._clock()
        self._connection_count += 1
        return handle

    def get_attribute(self, key):
        if isinstance(key, str):
            if key != TTL_ATTRIBUTE:
                raise InvalidArgumentError(f"Unknown attribute key: {key!r}")
            return self._ttl
        return self._inner.get_attribute(key)

    def set_attribute(self, key, value):
        if isinstance(key, str):
            if key != TTL_ATTRIBUTE:
                raise InvalidArgumentError(f"Unknown attribute key: {key!r}")
            self.ttl = value
            return True
        return self._inner.set_attribute(key, value)
