from lazyconn import utils
from lazyconn.attributes import ParamType
from lazyconn.drivers.base import DriverConnection
from lazyconn.drivers.placeholders import FORMAT
from lazyconn.settings import logger

psycopg = None


def _get_psycopg():
    global psycopg
    if psycopg is None:
        import importlib
        psycopg = importlib.import_module('psycopg')
        importlib.import_module('psycopg.sql')
    return psycopg


def _format_version(version: int) -> str:
    major = version // 10000
    if major >= 10:
        return f'{major}.{version % 10000}'
    return f'{major}.{version // 100 % 100}.{version % 100}'


class PostgresConnection(DriverConnection):
    """``pgsql:host=localhost;port=5432;dbname=app`` through psycopg 3."""
    driver_name = 'pgsql'
    marker = FORMAT

    @property
    def database_errors(self):
        return (_get_psycopg().Error,)

    def _open(self, params, options):
        pg = _get_psycopg()
        conninfo = utils.parse_dsn_pairs(params.target)
        if params.username:
            conninfo['user'] = params.username
        if params.password:
            conninfo['password'] = params.password
        logger.info(f"Connecting to PostgreSQL database: {conninfo.get('dbname', '')}")
        return pg.connect(autocommit=True, **{**conninfo, **options})

    def _begin(self):
        self.raw.execute('BEGIN')

    def _commit(self):
        self.raw.execute('COMMIT')

    def _rollback(self):
        self.raw.execute('ROLLBACK')

    def _in_transaction(self):
        return self.raw.info.transaction_status != _get_psycopg().pq.TransactionStatus.IDLE

    def _last_insert_id(self, name=None):
        if name:
            return self.raw.execute('SELECT currval(%s)', (name,)).fetchone()[0]
        return self.raw.execute('SELECT lastval()').fetchone()[0]

    def _server_version(self):
        return _format_version(self.raw.info.server_version)

    def _client_version(self):
        return _format_version(_get_psycopg().pq.version())

    def _server_info(self):
        info = self.raw.info
        return f'PID: {info.backend_pid}; Client Encoding: {info.encoding}'

    def _connection_status(self):
        if self.raw.info.status == _get_psycopg().pq.ConnStatus.OK:
            return 'Connection OK; waiting to send.'
        return 'Connection bad'

    def quote(self, value, param_type=ParamType.STR):
        pg = _get_psycopg()
        text = '' if value is None else str(value)
        return pg.sql.Literal(text).as_string(self.raw)
