from lazyconn.attributes import ParamType
from lazyconn.base import BaseConnection, ensure_connection


class ConnectionDecorator(BaseConnection):
    """Holds an inner connection and forwards every operation to it.

    Operations that need a live connection go through ``_resolve`` first, so
    subclasses can refresh the inner connection before it is used.
    """

    def __init__(self, connection: BaseConnection):
        self._inner = connection

    @property
    def inner(self):
        return self._inner

    def connect(self):
        self._resolve()
        return self._inner.connect()

    def is_connected(self):
        return self._inner.is_connected()

    def close(self):
        self._inner.close()

    @ensure_connection
    def begin_transaction(self):
        return self._inner.begin_transaction()

    @ensure_connection
    def commit(self):
        return self._inner.commit()

    @ensure_connection
    def rollback(self):
        return self._inner.rollback()

    def in_transaction(self):
        return self._inner.in_transaction()

    @ensure_connection
    def exec(self, sql):
        return self._inner.exec(sql)

    @ensure_connection
    def query(self, sql, fetch_mode=None, *fetch_args):
        return self._inner.query(sql, fetch_mode, *fetch_args)

    @ensure_connection
    def prepare(self, sql, options=None):
        return self._inner.prepare(sql, options)

    @ensure_connection
    def quote(self, value, param_type=ParamType.STR):
        return self._inner.quote(value, param_type)

    def get_attribute(self, key):
        return self._inner.get_attribute(key)

    def set_attribute(self, key, value):
        return self._inner.set_attribute(key, value)

    def error_code(self):
        return self._inner.error_code()

    def error_info(self):
        return self._inner.error_info()

    def last_insert_id(self, name=None):
        return self._inner.last_insert_id(name)
