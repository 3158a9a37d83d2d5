import logging
import os
import sys
from pathlib import Path

import toml

config_path = Path(os.environ.get('LAZYCONN_CONFIG', 'lazyconn.toml'))
SYSTEM_CONFIG = toml.load(config_path.as_posix()) if config_path.is_file() else {}

LAZYCONN_CONFIG = SYSTEM_CONFIG.get('lazyconn', {})

LOG_LEVEL = LAZYCONN_CONFIG.get('log_level', 'INFO')
DEFAULT_TTL = LAZYCONN_CONFIG.get('default_ttl', 60)
DEFAULT_ERRMODE = LAZYCONN_CONFIG.get('default_errmode', 'exception')
SQLITE_PRAGMAS = LAZYCONN_CONFIG.get('sqlite_pragmas', {'foreign_keys': 'ON'})
DRIVERS = {
    'sqlite': 'lazyconn.drivers.sqlite.SQLiteConnection',
    'pgsql': 'lazyconn.drivers.postgres.PostgresConnection',
    'odbc': 'lazyconn.drivers.odbc.ODBCConnection',
    **LAZYCONN_CONFIG.get('drivers', {}),
}

logger = logging.getLogger('lazyconn')
logger.setLevel(logging.getLevelName(LOG_LEVEL))
if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
logger.propagate = True
