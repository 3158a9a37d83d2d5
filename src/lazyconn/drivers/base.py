from __future__ import annotations

import warnings
from abc import abstractmethod

from lazyconn import settings
from lazyconn.attributes import (
    READ_ONLY_ATTRIBUTES,
    Attr,
    ErrMode,
    FetchMode,
    ParamType,
    normalize_key,
    normalize_value,
)
from lazyconn.base import NO_ERROR, BaseConnection, ConnectionParameters, ErrorInfo
from lazyconn.drivers.placeholders import QMARK, PlaceholderError, bind_args, compile_sql, normalize_param
from lazyconn.errors import (
    DatabaseConnectionError,
    InvalidArgumentError,
    StatementError,
    TransactionError,
)
from lazyconn.settings import logger
from lazyconn.statement import BaseStatement


class DriverConnection(BaseConnection):
    """A physical connection opened through a DB-API module.

    The DB-API connection runs in autocommit mode; ``begin_transaction`` opens
    an explicit transaction which ``commit``/``rollback`` close again.
    Subclasses provide the driver specific hooks.
    """
    driver_name = ''
    marker = QMARK

    def __init__(self, params: ConnectionParameters):
        self.params = params
        self._errmode = ErrMode.from_setting(settings.DEFAULT_ERRMODE)
        self._fetch_mode = FetchMode.DICT
        self._statement_class = None
        self._error = NO_ERROR

        options = dict(params.options)
        attribute_options = {
            key: options.pop(key)
            for key in list(options)
            if isinstance(key, int) and not isinstance(key, bool)
        }

        try:
            self._connection = self._open(params, options)
        except (OSError, ValueError, *self.database_errors) as exc:
            raise DatabaseConnectionError(f"Unable to connect to {self.driver_name} database: {exc}") from exc

        try:
            for key, value in attribute_options.items():
                self.set_attribute(key, value)
        except Exception:
            self._connection.close()
            self._connection = None
            raise

    @property
    @abstractmethod
    def database_errors(self) -> tuple:
        pass

    @abstractmethod
    def _open(self, params: ConnectionParameters, options: dict):
        pass

    @abstractmethod
    def _begin(self):
        pass

    @abstractmethod
    def _commit(self):
        pass

    @abstractmethod
    def _rollback(self):
        pass

    @abstractmethod
    def _in_transaction(self) -> bool:
        pass

    @abstractmethod
    def _last_insert_id(self, name=None):
        pass

    @abstractmethod
    def _server_version(self) -> str:
        pass

    @abstractmethod
    def _client_version(self) -> str:
        pass

    def _server_info(self) -> str:
        return self._server_version()

    def _connection_status(self) -> str:
        return 'Connected'

    def _error_info_from(self, exc) -> ErrorInfo:
        return ErrorInfo(getattr(exc, 'sqlstate', None) or 'HY000', None, str(exc))

    @property
    def raw(self):
        """The underlying DB-API connection."""
        if self._connection is None:
            raise DatabaseConnectionError(f'The {self.driver_name} connection has been closed')
        return self._connection

    def connect(self):
        self.raw
        return self

    def is_connected(self):
        return self._connection is not None

    def close(self):
        if self._connection is None:
            return
        logger.info(f'Closing {self.driver_name} connection')
        try:
            self._connection.close()
        finally:
            self._connection = None

    def __del__(self):  # pragma: no cover - best effort cleanup
        if getattr(self, '_connection', None) is None:
            return
        try:
            self.close()
        except Exception as exc:
            logger.warning(f'Failed to close {self.driver_name} connection: {exc}')

    def _handle_error(self, exc, target=None, default=None):
        """Record ``exc`` and react according to the configured error mode."""
        if isinstance(exc, PlaceholderError):
            info = ErrorInfo(exc.sqlstate, None, str(exc))
        else:
            info = self._error_info_from(exc)
        self._error = info
        if target is not None:
            target._error = info
        message = f'SQLSTATE[{info.sqlstate}]: {info.message}'
        if self._errmode == ErrMode.EXCEPTION:
            raise StatementError(message, info.sqlstate, info.driver_code) from exc
        if self._errmode == ErrMode.WARNING:
            warnings.warn(message, RuntimeWarning, stacklevel=3)
        logger.debug(f'Statement failed: {message}')
        return default

    def _decorate(self, statement):
        if self._statement_class is None:
            return statement
        cls, args = self._statement_class
        return cls(statement, *args)

    def begin_transaction(self):
        if self.in_transaction():
            raise TransactionError('There is already an active transaction')
        try:
            self._begin()
        except self.database_errors as exc:
            return self._handle_error(exc, default=False)
        return True

    def commit(self):
        if not self.in_transaction():
            raise TransactionError('There is no active transaction')
        try:
            self._commit()
        except self.database_errors as exc:
            return self._handle_error(exc, default=False)
        return True

    def rollback(self):
        if not self.in_transaction():
            raise TransactionError('There is no active transaction')
        try:
            self._rollback()
        except self.database_errors as exc:
            return self._handle_error(exc, default=False)
        return True

    def in_transaction(self):
        if self._connection is None:
            return False
        return self._in_transaction()

    def exec(self, sql):
        self._error = NO_ERROR
        logger.debug(f'Executing statement: {sql}')
        cursor = self.raw.cursor()
        try:
            cursor.execute(sql)
            return max(cursor.rowcount, 0)
        except self.database_errors as exc:
            return self._handle_error(exc)
        finally:
            cursor.close()

    def prepare(self, sql, options=None):
        self._error = NO_ERROR
        try:
            statement = DriverStatement(self, sql, options)
        except PlaceholderError as exc:
            return self._handle_error(exc)
        return self._decorate(statement)

    def query(self, sql, fetch_mode=None, *fetch_args):
        self._error = NO_ERROR
        try:
            statement = DriverStatement(self, sql)
        except PlaceholderError as exc:
            return self._handle_error(exc)
        if fetch_mode is not None:
            statement.set_fetch_mode(fetch_mode, *fetch_args)
        if not statement.execute():
            return None
        return self._decorate(statement)

    def quote(self, value, param_type=ParamType.STR):
        self.raw
        text = '' if value is None else str(value)
        return "'" + text.replace("'", "''") + "'"

    def get_attribute(self, key):
        key = normalize_key(key)
        if key == Attr.ERRMODE:
            return self._errmode
        if key == Attr.DEFAULT_FETCH_MODE:
            return self._fetch_mode
        if key == Attr.STATEMENT_CLASS:
            return self._statement_class
        if key == Attr.DRIVER_NAME:
            return self.driver_name
        if key == Attr.SERVER_VERSION:
            return self._server_version()
        if key == Attr.CLIENT_VERSION:
            return self._client_version()
        if key == Attr.SERVER_INFO:
            return self._server_info()
        return self._connection_status()

    def set_attribute(self, key, value):
        key = normalize_key(key)
        if key in READ_ONLY_ATTRIBUTES:
            return False
        value = normalize_value(key, value)
        if key == Attr.ERRMODE:
            self._errmode = value
        elif key == Attr.DEFAULT_FETCH_MODE:
            self._fetch_mode = value
        else:
            self._statement_class = value
        return True

    def error_code(self):
        return self._error.sqlstate

    def error_info(self):
        return self._error

    def last_insert_id(self, name=None):
        try:
            value = self._last_insert_id(name)
        except self.database_errors as exc:
            return self._handle_error(exc)
        return '' if value is None else str(value)


class DriverStatement(BaseStatement):
    """A statement compiled for one driver connection."""

    def __init__(self, connection: DriverConnection, sql: str, options=None):
        self._connection = connection
        self.query_string = sql
        self.options = dict(options or {})
        self._compiled = compile_sql(sql, connection.marker)
        self._bound = {}
        self._cursor = None
        self._row_count = 0
        self._fetch_mode = connection.get_attribute(Attr.DEFAULT_FETCH_MODE)
        self._fetch_args = ()
        self._error = NO_ERROR

    def _bind(self, param, value, param_type):
        try:
            key = normalize_param(param)
            if key not in self._compiled.keys:
                raise PlaceholderError(f'Parameter {param!r} is not defined in the statement')
        except PlaceholderError as exc:
            return self._connection._handle_error(exc, target=self, default=False)
        self._bound[key] = (value, ParamType(param_type))
        return True

    def bind_value(self, param, value, param_type=ParamType.STR):
        return self._bind(param, value, param_type)

    def bind_param(self, param, variable, param_type=ParamType.STR):
        """Bind a zero-argument callable that is read when the statement executes."""
        if not callable(variable):
            raise InvalidArgumentError(f'bind_param expects a callable, {type(variable).__name__} given')
        return self._bind(param, variable, param_type)

    def execute(self, params=None):
        self._error = NO_ERROR
        try:
            args = bind_args(self._compiled, params, self._bound)
        except PlaceholderError as exc:
            return self._connection._handle_error(exc, target=self, default=False)

        self.close_cursor()
        logger.debug(f'Executing statement: {self.query_string} with params: {args}')
        cursor = self._connection.raw.cursor()
        try:
            if args is None:
                cursor.execute(self._compiled.sql)
            else:
                cursor.execute(self._compiled.sql, args)
        except self._connection.database_errors as exc:
            cursor.close()
            return self._connection._handle_error(exc, target=self, default=False)
        self._cursor = cursor
        self._row_count = max(cursor.rowcount, 0)
        return True

    def _columns(self):
        if self._cursor is None or self._cursor.description is None:
            return None
        return [column[0] for column in self._cursor.description]

    def _shape(self, row, columns, mode):
        mode = self._fetch_mode if mode is None else FetchMode(mode)
        if mode == FetchMode.TUPLE:
            return tuple(row)
        if mode == FetchMode.COLUMN:
            return row[self._fetch_args[0] if self._fetch_args else 0]
        return dict(zip(columns, row))

    def fetch(self, mode=None):
        columns = self._columns()
        if columns is None:
            return None
        row = self._cursor.fetchone()
        if row is None:
            return None
        return self._shape(row, columns, mode)

    def fetch_all(self, mode=None):
        columns = self._columns()
        if columns is None:
            return []
        return [self._shape(row, columns, mode) for row in self._cursor.fetchall()]

    def fetch_column(self, column=0):
        if self._columns() is None:
            return None
        row = self._cursor.fetchone()
        if row is None:
            return None
        return row[column]

    def set_fetch_mode(self, mode, *args):
        try:
            self._fetch_mode = FetchMode(mode)
        except ValueError:
            raise InvalidArgumentError(f'Invalid fetch mode: {mode!r}') from None
        self._fetch_args = args
        return True

    def row_count(self):
        return self._row_count

    def column_count(self):
        columns = self._columns()
        return len(columns) if columns else 0

    def close_cursor(self):
        if self._cursor is not None:
            self._cursor.close()
            self._cursor = None
        return True

    def error_code(self):
        return self._error.sqlstate

    def error_info(self):
        return self._error
