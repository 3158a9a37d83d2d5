import time
from collections.abc import Mapping

from lazyconn.attributes import Attr, ParamType, normalize_key
from lazyconn.base import BaseConnection, ensure_connection
from lazyconn.connection.decorator import ConnectionDecorator
from lazyconn.errors import InvalidArgumentError, InvalidStatementClassError
from lazyconn.profile_log import ProfilingLog
from lazyconn.settings import logger
from lazyconn.statement import StatementDecorator, normalize_statement_class


class ProfilingStatement(StatementDecorator):
    """Reports one execution record per ``execute`` call to its profiler.

    Built by the driver through the statement class installed by
    ``ProfilingConnection``; never instantiated directly.
    """

    def __init__(self, statement, connection):
        super().__init__(statement)
        self._connection = connection
        self._params = {}

    def bind_value(self, param, value, param_type=ParamType.STR):
        result = self._statement.bind_value(param, value, param_type)
        if result:
            self._params[param] = value
        return result

    def bind_param(self, param, variable, param_type=ParamType.STR):
        result = self._statement.bind_param(param, variable, param_type)
        if result:
            self._params[param] = variable()
        return result

    def execute(self, params=None):
        t0 = time.perf_counter()
        result = self._statement.execute(params)
        duration = time.perf_counter() - t0

        if params is None:
            logged = self._params
        elif isinstance(params, Mapping):
            logged = dict(params)
        else:
            logged = list(params)
        self._connection.log(self.query_string, duration, logged)
        self._params = {}
        return result


class ProfilingConnection(ConnectionDecorator):
    """Times every statement execution on the wrapped connection."""

    statement_class = ProfilingStatement

    def __init__(self, connection: BaseConnection):
        super().__init__(connection)
        self._log = ProfilingLog()
        self._inner.set_attribute(Attr.STATEMENT_CLASS, (self.statement_class, (self,)))

    def is_connected(self):
        is_connected = getattr(self._inner, 'is_connected', None)
        if is_connected is None:
            return True
        return is_connected()

    def _profile(self, method, sql, *args):
        t0 = time.perf_counter()
        result = method(sql, *args)
        self.log(sql, time.perf_counter() - t0)
        return result

    @ensure_connection
    def exec(self, sql):
        return self._profile(self._inner.exec, sql)

    @ensure_connection
    def query(self, sql, fetch_mode=None, *fetch_args):
        return self._profile(self._inner.query, sql, fetch_mode, *fetch_args)

    def set_attribute(self, key, value):
        if not isinstance(key, str) and normalize_key(key) == Attr.STATEMENT_CLASS:
            cls = self._check_statement_class(value)
            # Statements always report to this profiler, whatever args were given
            value = (cls, (self,))
        return self._inner.set_attribute(key, value)

    def _check_statement_class(self, value):
        cls = value[0] if isinstance(value, (tuple, list)) and value else value
        name = cls.__name__ if isinstance(cls, type) else type(cls).__name__
        if not isinstance(cls, type) or not issubclass(cls, ProfilingStatement):
            raise InvalidStatementClassError(
                f"The statement class of a profiling connection must be {ProfilingStatement.__name__}"
                f" or a subclass of it, {name} given"
            )
        try:
            normalize_statement_class(value)
        except InvalidArgumentError as exc:
            raise InvalidStatementClassError(str(exc)) from exc
        return cls

    def log(self, sql, duration, params=None):
        """Record one execution of ``sql`` that took ``duration`` seconds."""
        record = self._log.add(sql, duration, params)
        logger.debug(f'Executed statement #{record.iteration} in {duration:.6f}s: {sql}')
        return record

    def get_log(self):
        return self._log.snapshot()

    def get_executed_statements(self, combined_reruns=False):
        snapshot = self._log.snapshot()
        return snapshot.aggregates if combined_reruns else snapshot.records

    @property
    def total_duration(self):
        return self._log.total_duration

    def total_count(self, include_reruns=True):
        return self._log.total_count if include_reruns else len(self._log.aggregates)
