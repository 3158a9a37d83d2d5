from abc import ABC, abstractmethod

from lazyconn.attributes import ParamType
from lazyconn.errors import InvalidArgumentError


class BaseStatement(ABC):
    """A prepared statement and, once executed, its result cursor."""

    query_string: str

    @abstractmethod
    def bind_value(self, param, value, param_type=ParamType.STR) -> bool:
        pass

    @abstractmethod
    def bind_param(self, param, variable, param_type=ParamType.STR) -> bool:
        pass

    @abstractmethod
    def execute(self, params=None) -> bool:
        pass

    @abstractmethod
    def fetch(self, mode=None):
        pass

    @abstractmethod
    def fetch_all(self, mode=None):
        pass

    @abstractmethod
    def fetch_column(self, column=0):
        pass

    @abstractmethod
    def set_fetch_mode(self, mode, *args) -> bool:
        pass

    @abstractmethod
    def row_count(self) -> int:
        pass

    @abstractmethod
    def column_count(self) -> int:
        pass

    @abstractmethod
    def close_cursor(self) -> bool:
        pass

    @abstractmethod
    def error_code(self):
        pass

    @abstractmethod
    def error_info(self):
        pass

    def __iter__(self):
        while True:
            row = self.fetch()
            if row is None:
                return
            yield row


class StatementDecorator(BaseStatement):
    """Forwards every statement operation to the wrapped statement.

    Subclasses are installed with ``Attr.STATEMENT_CLASS`` and are built as
    ``cls(statement, *args)`` by the driver.
    """

    def __init__(self, statement: BaseStatement):
        self._statement = statement

    @property
    def query_string(self):
        return self._statement.query_string

    @property
    def inner(self):
        return self._statement

    def bind_value(self, param, value, param_type=ParamType.STR):
        return self._statement.bind_value(param, value, param_type)

    def bind_param(self, param, variable, param_type=ParamType.STR):
        return self._statement.bind_param(param, variable, param_type)

    def execute(self, params=None):
        return self._statement.execute(params)

    def fetch(self, mode=None):
        return self._statement.fetch(mode)

    def fetch_all(self, mode=None):
        return self._statement.fetch_all(mode)

    def fetch_column(self, column=0):
        return self._statement.fetch_column(column)

    def set_fetch_mode(self, mode, *args):
        return self._statement.set_fetch_mode(mode, *args)

    def row_count(self):
        return self._statement.row_count()

    def column_count(self):
        return self._statement.column_count()

    def close_cursor(self):
        return self._statement.close_cursor()

    def error_code(self):
        return self._statement.error_code()

    def error_info(self):
        return self._statement.error_info()


def normalize_statement_class(value):
    """Return ``None`` or a ``(cls, args)`` pair for ``Attr.STATEMENT_CLASS``."""
    if value is None:
        return None
    if isinstance(value, type):
        value = (value, ())
    if not isinstance(value, (tuple, list)) or not 1 <= len(value) <= 2:
        raise InvalidArgumentError(f"Statement class must be a class or a (class, args) pair, {value!r} given")
    cls = value[0]
    args = tuple(value[1]) if len(value) == 2 and value[1] is not None else ()
    if not isinstance(cls, type) or not issubclass(cls, StatementDecorator):
        raise InvalidArgumentError(
            f"Statement class must be a subclass of {StatementDecorator.__name__}, {cls!r} given"
        )
    return cls, args
