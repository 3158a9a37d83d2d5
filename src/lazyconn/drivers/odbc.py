from lazyconn.base import ErrorInfo
from lazyconn.drivers.base import DriverConnection
from lazyconn.settings import logger

pyodbc = None


def _get_pyodbc():
    global pyodbc
    if pyodbc is None:
        import importlib
        pyodbc = importlib.import_module('pyodbc')
    return pyodbc


class ODBCConnection(DriverConnection):
    """``odbc:Driver={ODBC Driver 18 for SQL Server};Server=tcp:host,1433;Database=app``

    Everything after the scheme is handed to ``pyodbc.connect`` untouched.
    """
    driver_name = 'odbc'

    @property
    def database_errors(self):
        return (_get_pyodbc().Error,)

    def _open(self, params, options):
        odbc = _get_pyodbc()
        if params.username:
            options.setdefault('uid', params.username)
        if params.password:
            options.setdefault('pwd', params.password)
        logger.info('Connecting to ODBC data source')
        return odbc.connect(params.target, autocommit=True, **options)

    def _begin(self):
        self.raw.autocommit = False

    def _commit(self):
        self.raw.commit()
        self.raw.autocommit = True

    def _rollback(self):
        self.raw.rollback()
        self.raw.autocommit = True

    def _in_transaction(self):
        return not self.raw.autocommit

    def _last_insert_id(self, name=None):
        cursor = self.raw.cursor()
        try:
            row = cursor.execute('SELECT @@IDENTITY').fetchone()
        finally:
            cursor.close()
        return row[0] if row else None

    def _server_version(self):
        return self.raw.getinfo(_get_pyodbc().SQL_DBMS_VER)

    def _client_version(self):
        return _get_pyodbc().version

    def _server_info(self):
        return self.raw.getinfo(_get_pyodbc().SQL_DBMS_NAME)

    def _error_info_from(self, exc):
        if len(exc.args) > 1:
            return ErrorInfo(exc.args[0], None, str(exc.args[1]))
        return ErrorInfo('HY000', None, str(exc))
