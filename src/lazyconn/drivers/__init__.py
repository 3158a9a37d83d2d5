from lazyconn import settings, utils
from lazyconn.base import ConnectionParameters
from lazyconn.errors import DatabaseConnectionError


def get_driver_class(driver: str):
    """Resolve a DSN scheme to its driver class through ``settings.DRIVERS``."""
    try:
        dotted_path = settings.DRIVERS[driver]
    except KeyError:
        raise DatabaseConnectionError(f"Could not find driver for DSN scheme {driver!r}") from None
    return utils.import_string(dotted_path)


def connect(dsn, username=None, password=None, options=None):
    """Open a physical connection right away.

    ``dsn`` may also be a ready made ``ConnectionParameters``.
    """
    if isinstance(dsn, ConnectionParameters):
        params = dsn
    else:
        params = ConnectionParameters(dsn, username, password, options or {})
    return get_driver_class(params.driver)(params)
