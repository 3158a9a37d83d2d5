from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from functools import wraps
from types import MappingProxyType
from typing import Any, Mapping, NamedTuple

from lazyconn import utils
from lazyconn.attributes import ParamType


class ErrorInfo(NamedTuple):
    sqlstate: str
    driver_code: Any
    message: str | None


NO_ERROR = ErrorInfo('00000', None, None)


@dataclass(frozen=True)
class ConnectionParameters:
    dsn: str
    username: str | None = None
    password: str | None = field(default=None, repr=False)
    options: Mapping[Any, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'options', MappingProxyType(dict(self.options or {})))

    @property
    def driver(self) -> str:
        return utils.split_dsn(self.dsn)[0]

    @property
    def target(self) -> str:
        """The DSN without its driver scheme."""
        return utils.split_dsn(self.dsn)[1]


def ensure_connection(func):
    """Resolve the physical connection before running ``func``."""
    @wraps(func)
    def wrapper(self, *args, **kwargs):
        self._resolve()
        return func(self, *args, **kwargs)
    return wrapper


class BaseConnection(ABC):
    """Operations shared by driver connections and every decorating handle."""

    def _resolve(self):
        return self

    @abstractmethod
    def connect(self):
        pass

    @abstractmethod
    def is_connected(self) -> bool:
        pass

    @abstractmethod
    def close(self):
        pass

    @abstractmethod
    def begin_transaction(self) -> bool:
        pass

    @abstractmethod
    def commit(self) -> bool:
        pass

    @abstractmethod
    def rollback(self) -> bool:
        pass

    @abstractmethod
    def in_transaction(self) -> bool:
        pass

    @abstractmethod
    def exec(self, sql: str):
        pass

    @abstractmethod
    def query(self, sql: str, fetch_mode=None, *fetch_args):
        pass

    @abstractmethod
    def prepare(self, sql: str, options=None):
        pass

    @abstractmethod
    def quote(self, value, param_type=ParamType.STR) -> str:
        pass

    @abstractmethod
    def get_attribute(self, key):
        pass

    @abstractmethod
    def set_attribute(self, key, value) -> bool:
        pass

    @abstractmethod
    def error_code(self) -> str:
        pass

    @abstractmethod
    def error_info(self) -> ErrorInfo:
        pass

    @abstractmethod
    def last_insert_id(self, name=None):
        pass

    def execute(self, sql: str, params=None, options=None):
        """Prepare ``sql`` and execute it with ``params``.

        Returns the executed statement, or ``None`` when either step fails in a
        non-raising error mode.
        """
        statement = self.prepare(sql, options)
        if statement is None or statement.execute(params) is False:
            return None
        return statement

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
