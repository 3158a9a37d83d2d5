from lazyconn.connection.decorator import ConnectionDecorator
from lazyconn.connection.lazy import LazyConnection
from lazyconn.connection.profiling import ProfilingConnection, ProfilingStatement
from lazyconn.connection.reconnecting import ReconnectingConnection

__all__ = [
    'ConnectionDecorator',
    'LazyConnection',
    'ProfilingConnection',
    'ProfilingStatement',
    'ReconnectingConnection',
]
