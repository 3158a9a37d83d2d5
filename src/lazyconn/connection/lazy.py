import time

from lazyconn import drivers
from lazyconn.attributes import (
    READ_ONLY_ATTRIBUTES,
    STATUS_ATTRIBUTES,
    Attr,
    ParamType,
    normalize_key,
    normalize_value,
)
from lazyconn.base import NO_ERROR, BaseConnection, ConnectionParameters, ensure_connection
from lazyconn.settings import logger


class LazyConnection(BaseConnection):
    """Holds connection parameters and opens the physical connection on first use.

    Attributes set before the connection exists are cached and replayed, in
    the order they were set, every time a physical connection is opened.
    Inspecting state (error codes, transaction status, attributes) never
    forces a connection.
    """

    def __init__(self, dsn, username=None, password=None, options=None, attributes=None):
        self.params = ConnectionParameters(dsn, username, password, options or {})
        self.connected_at = None
        self._handle = None
        self._attributes = {}
        for key, value in (attributes or {}).items():
            self.set_attribute(key, value)

    def _resolve(self):
        return self.connect()

    @property
    def handle(self):
        """The physical driver connection, or ``None`` while disconnected."""
        return self._handle

    def connect(self):
        if self._handle is not None:
            return self._handle

        handle = drivers.connect(self.params)
        try:
            for key, value in self._attributes.items():
                logger.debug(f'Replaying attribute {key.name} = {value!r}')
                handle.set_attribute(key, value)
        except Exception:
            handle.close()
            raise

        self._handle = handle
        self.connected_at = time.monotonic()
        return handle

    def is_connected(self):
        return self._handle is not None

    def close(self):
        handle, self._handle = self._handle, None
        self.connected_at = None
        if handle is not None:
            handle.close()

    def get_attribute(self, key):
        key = normalize_key(key)
        if self._handle is not None:
            return self._handle.get_attribute(key)
        if key == Attr.DRIVER_NAME:
            return self.params.driver
        if key in STATUS_ATTRIBUTES:
            return ''
        return self._attributes.get(key)

    def set_attribute(self, key, value):
        key = normalize_key(key)
        if key in READ_ONLY_ATTRIBUTES:
            return False
        value = normalize_value(key, value)
        result = True
        if self._handle is not None:
            result = self._handle.set_attribute(key, value)
            if not result:
                return result
        # Re-setting a key moves it to the end of the replay order
        self._attributes.pop(key, None)
        self._attributes[key] = value
        return result

    @ensure_connection
    def begin_transaction(self):
        return self._handle.begin_transaction()

    @ensure_connection
    def commit(self):
        return self._handle.commit()

    @ensure_connection
    def rollback(self):
        return self._handle.rollback()

    def in_transaction(self):
        if self._handle is None:
            return False
        return self._handle.in_transaction()

    @ensure_connection
    def exec(self, sql):
        return self._handle.exec(sql)

    @ensure_connection
    def query(self, sql, fetch_mode=None, *fetch_args):
        return self._handle.query(sql, fetch_mode, *fetch_args)

    @ensure_connection
    def prepare(self, sql, options=None):
        return self._handle.prepare(sql, options)

    @ensure_connection
    def quote(self, value, param_type=ParamType.STR):
        return self._handle.quote(value, param_type)

    def error_code(self):
        if self._handle is None:
            return NO_ERROR.sqlstate
        return self._handle.error_code()

    def error_info(self):
        if self._handle is None:
            return NO_ERROR
        return self._handle.error_info()

    def last_insert_id(self, name=None):
        if self._handle is None:
            return ''
        return self._handle.last_insert_id(name)
