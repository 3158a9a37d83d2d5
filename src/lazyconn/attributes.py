"""Attribute keys and the enumerations used as attribute values.

Attribute keys form a closed set: anything that is not an ``Attr`` member (or
the integer value of one) is rejected with ``InvalidArgumentError``.
"""
from enum import IntEnum

from lazyconn.errors import InvalidArgumentError

TTL_ATTRIBUTE = 'ttl'


class Attr(IntEnum):
    ERRMODE = 1
    DEFAULT_FETCH_MODE = 2
    STATEMENT_CLASS = 3
    DRIVER_NAME = 10
    SERVER_VERSION = 11
    CLIENT_VERSION = 12
    SERVER_INFO = 13
    CONNECTION_STATUS = 14


class ErrMode(IntEnum):
    SILENT = 0
    WARNING = 1
    EXCEPTION = 2

    @classmethod
    def from_setting(cls, value):
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise InvalidArgumentError(f"Unknown error mode: {value!r}") from None
        return cls(value)


class FetchMode(IntEnum):
    DICT = 1
    TUPLE = 2
    COLUMN = 3


class ParamType(IntEnum):
    NULL = 0
    INT = 1
    STR = 2
    LOB = 3
    BOOL = 5


READ_ONLY_ATTRIBUTES = frozenset({
    Attr.DRIVER_NAME,
    Attr.SERVER_VERSION,
    Attr.CLIENT_VERSION,
    Attr.SERVER_INFO,
    Attr.CONNECTION_STATUS,
})

# Reported as '' by handles that are not connected yet
STATUS_ATTRIBUTES = frozenset({
    Attr.SERVER_VERSION,
    Attr.SERVER_INFO,
    Attr.CONNECTION_STATUS,
})


def normalize_key(key) -> Attr:
    if isinstance(key, bool) or not isinstance(key, int):
        raise InvalidArgumentError(f"Attribute key must be an Attr member, {type(key).__name__} given: {key!r}")
    try:
        return Attr(key)
    except ValueError:
        raise InvalidArgumentError(f"Unknown attribute key: {key!r}") from None


def normalize_value(key: Attr, value):
    """Validate ``value`` for a writable attribute and return its canonical form."""
    if key == Attr.ERRMODE:
        try:
            return ErrMode(value)
        except ValueError:
            raise InvalidArgumentError(f"Invalid error mode: {value!r}") from None
    if key == Attr.DEFAULT_FETCH_MODE:
        try:
            return FetchMode(value)
        except ValueError:
            raise InvalidArgumentError(f"Invalid fetch mode: {value!r}") from None
    if key == Attr.STATEMENT_CLASS:
        from lazyconn.statement import normalize_statement_class
        return normalize_statement_class(value)
    return value
