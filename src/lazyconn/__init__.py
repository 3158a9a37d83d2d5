from lazyconn.attributes import TTL_ATTRIBUTE, Attr, ErrMode, FetchMode, ParamType
from lazyconn.base import NO_ERROR, BaseConnection, ConnectionParameters, ErrorInfo
from lazyconn.connection import (
    ConnectionDecorator,
    LazyConnection,
    ProfilingConnection,
    ProfilingStatement,
    ReconnectingConnection,
)
from lazyconn.drivers import connect
from lazyconn.errors import (
    DatabaseConnectionError,
    DatabaseError,
    InvalidArgumentError,
    InvalidStatementClassError,
    StatementError,
    TransactionError,
)
from lazyconn.profile_log import ExecutionRecord, LogSnapshot, RerunAggregate
from lazyconn.statement import BaseStatement, StatementDecorator

__all__ = [
    'Attr',
    'BaseConnection',
    'BaseStatement',
    'ConnectionDecorator',
    'ConnectionParameters',
    'DatabaseConnectionError',
    'DatabaseError',
    'ErrMode',
    'ErrorInfo',
    'ExecutionRecord',
    'FetchMode',
    'InvalidArgumentError',
    'InvalidStatementClassError',
    'LazyConnection',
    'LogSnapshot',
    'NO_ERROR',
    'ParamType',
    'ProfilingConnection',
    'ProfilingStatement',
    'ReconnectingConnection',
    'RerunAggregate',
    'StatementDecorator',
    'StatementError',
    'TTL_ATTRIBUTE',
    'TransactionError',
    'connect',
]
