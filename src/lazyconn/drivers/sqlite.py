import os
import sqlite3

from lazyconn import settings
from lazyconn.base import ErrorInfo
from lazyconn.drivers.base import DriverConnection
from lazyconn.settings import logger


class SQLiteConnection(DriverConnection):
    """``sqlite::memory:`` or ``sqlite:/path/to/file.db``.

    Extra options are passed to ``sqlite3.connect``; the ``pragmas`` option
    (defaults to ``settings.SQLITE_PRAGMAS``) is applied right after opening.
    """
    driver_name = 'sqlite'

    @property
    def database_errors(self):
        return (sqlite3.Error,)

    def _open(self, params, options):
        db_path = params.target or ':memory:'
        pragmas = options.pop('pragmas', settings.SQLITE_PRAGMAS)
        logger.info(f'Connecting to SQLite database: {db_path}')

        if db_path.startswith('file:'):
            options.setdefault('uri', True)
        elif db_path != ':memory:':
            # Ensure directory exists for file-based databases
            os.makedirs(os.path.dirname(db_path) or '.', exist_ok=True)

        connection = sqlite3.connect(db_path, isolation_level=None, check_same_thread=False, **options)
        try:
            for name, value in (pragmas or {}).items():
                if not str(name).isidentifier():
                    raise ValueError(f'Invalid pragma name: {name!r}')
                connection.execute(f'PRAGMA {name}={value}')
        except (ValueError, sqlite3.Error):
            connection.close()
            raise
        return connection

    def _begin(self):
        self.raw.execute('BEGIN')

    def _commit(self):
        self.raw.execute('COMMIT')

    def _rollback(self):
        self.raw.execute('ROLLBACK')

    def _in_transaction(self):
        return self.raw.in_transaction

    def _last_insert_id(self, name=None):
        return self.raw.execute('SELECT last_insert_rowid()').fetchone()[0]

    def _server_version(self):
        return sqlite3.sqlite_version

    def _client_version(self):
        return sqlite3.sqlite_version

    def _error_info_from(self, exc):
        sqlstate = '23000' if isinstance(exc, sqlite3.IntegrityError) else 'HY000'
        return ErrorInfo(sqlstate, getattr(exc, 'sqlite_errorcode', None), str(exc))
