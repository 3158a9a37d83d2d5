"""Tests for the PostgreSQL driver connection with a mocked psycopg.

Covers:
- DSN parsing into psycopg connect arguments
- Named markers compiled to %s with percent escaping
- SQLSTATE taken from psycopg errors
- Transactions through the connection transaction status
- last_insert_id, version and status attributes, quoting
"""
from unittest import TestCase
from unittest.mock import MagicMock, patch

import lazyconn
from lazyconn.attributes import Attr, ErrMode
from lazyconn.drivers.postgres import PostgresConnection, _format_version
from lazyconn.errors import DatabaseConnectionError, StatementError


class FakePsycopgError(Exception):
    sqlstate = None


class FakeUniqueViolation(FakePsycopgError):
    sqlstate = '23505'


def make_psycopg():
    pg = MagicMock()
    pg.Error = FakePsycopgError
    pg.pq.TransactionStatus.IDLE = 'idle'
    pg.pq.ConnStatus.OK = 'ok'
    pg.pq.version.return_value = 170002
    return pg


class PostgresTestCase(TestCase):
    def setUp(self):
        self.pg = make_psycopg()
        self.raw = self.pg.connect.return_value
        self.raw.info.transaction_status = 'idle'
        self.cursor = self.raw.cursor.return_value
        self.cursor.rowcount = 1
        self.cursor.description = None

        patcher = patch('lazyconn.drivers.postgres._get_psycopg', return_value=self.pg)
        patcher.start()
        self.addCleanup(patcher.stop)

    def connect(self, dsn='pgsql:host=localhost;port=5432;dbname=app', *args, **kwargs):
        return lazyconn.connect(dsn, *args, **kwargs)


class TestPostgresConnect(PostgresTestCase):
    def test_connect_arguments(self):
        conn = self.connect(
            'pgsql:host=db; port=5433 ;dbname=app',
            'alice', 'secret', {'connect_timeout': 3, Attr.ERRMODE: ErrMode.SILENT},
        )
        self.assertIsInstance(conn, PostgresConnection)
        self.pg.connect.assert_called_once_with(
            autocommit=True,
            host='db', port='5433', dbname='app',
            user='alice', password='secret',
            connect_timeout=3,
        )
        self.assertEqual(conn.get_attribute(Attr.ERRMODE), ErrMode.SILENT)
        self.assertEqual(conn.get_attribute(Attr.DRIVER_NAME), 'pgsql')

    def test_connect_failure(self):
        self.pg.connect.side_effect = FakePsycopgError('connection refused')
        with self.assertRaises(DatabaseConnectionError) as ctx:
            self.connect()
        self.assertIn('connection refused', str(ctx.exception))

    def test_malformed_dsn(self):
        with self.assertRaises(DatabaseConnectionError):
            self.connect('pgsql:host')
        self.pg.connect.assert_not_called()

    def test_close(self):
        conn = self.connect()
        conn.close()
        self.raw.close.assert_called_once_with()
        self.assertFalse(conn.is_connected())


class TestPostgresStatements(PostgresTestCase):
    def test_named_markers_and_percent(self):
        conn = self.connect()
        stmt = conn.prepare("SELECT * FROM t WHERE id = :id AND name LIKE 'a%'")
        self.assertTrue(stmt.execute({'id': 1}))
        self.cursor.execute.assert_called_once_with(
            "SELECT * FROM t WHERE id = %s AND name LIKE 'a%%'", (1,),
        )

    def test_cast_kept(self):
        conn = self.connect()
        conn.execute("SELECT created::date FROM t WHERE id = ?", [5])
        self.cursor.execute.assert_called_once_with("SELECT created::date FROM t WHERE id = %s", (5,))

    def test_exec_without_params(self):
        self.cursor.rowcount = 4
        conn = self.connect()
        self.assertEqual(conn.exec("UPDATE t SET v = 'x'"), 4)
        self.cursor.execute.assert_called_once_with("UPDATE t SET v = 'x'")
        self.cursor.close.assert_called_once_with()

    def test_fetch(self):
        self.cursor.description = [('id',), ('name',)]
        self.cursor.fetchone.return_value = (1, 'x')
        conn = self.connect()
        self.assertEqual(conn.query("SELECT id, name FROM t").fetch(), {'id': 1, 'name': 'x'})

    def test_sqlstate_from_driver(self):
        self.cursor.execute.side_effect = FakeUniqueViolation('duplicate key value')
        conn = self.connect()
        with self.assertRaises(StatementError) as ctx:
            conn.exec("INSERT INTO t VALUES (1)")
        self.assertEqual(ctx.exception.sqlstate, '23505')
        self.assertEqual(conn.error_info(), ('23505', None, 'duplicate key value'))


class TestPostgresState(PostgresTestCase):
    def test_transactions(self):
        conn = self.connect()
        self.assertFalse(conn.in_transaction())
        self.assertTrue(conn.begin_transaction())
        self.raw.execute.assert_called_with('BEGIN')
        self.raw.info.transaction_status = 'intrans'
        self.assertTrue(conn.in_transaction())
        self.assertTrue(conn.commit())
        self.raw.execute.assert_called_with('COMMIT')

    def test_last_insert_id(self):
        self.raw.execute.return_value.fetchone.return_value = (42,)
        conn = self.connect()
        self.assertEqual(conn.last_insert_id(), '42')
        self.raw.execute.assert_called_with('SELECT lastval()')
        conn.last_insert_id('t_id_seq')
        self.raw.execute.assert_called_with('SELECT currval(%s)', ('t_id_seq',))

    def test_status_attributes(self):
        self.raw.info.server_version = 160002
        self.raw.info.backend_pid = 321
        self.raw.info.encoding = 'UTF8'
        self.raw.info.status = 'ok'
        conn = self.connect()
        self.assertEqual(conn.get_attribute(Attr.SERVER_VERSION), '16.2')
        self.assertEqual(conn.get_attribute(Attr.CLIENT_VERSION), '17.2')
        self.assertEqual(conn.get_attribute(Attr.SERVER_INFO), 'PID: 321; Client Encoding: UTF8')
        self.assertEqual(conn.get_attribute(Attr.CONNECTION_STATUS), 'Connection OK; waiting to send.')
        self.raw.info.status = 'bad'
        self.assertEqual(conn.get_attribute(Attr.CONNECTION_STATUS), 'Connection bad')

    def test_quote(self):
        literal = self.pg.sql.Literal
        literal.return_value.as_string.return_value = "'it''s'"
        conn = self.connect()
        self.assertEqual(conn.quote("it's"), "'it''s'")
        literal.assert_called_once_with("it's")
        literal.return_value.as_string.assert_called_once_with(self.raw)


class TestFormatVersion(TestCase):
    def test_versions(self):
        self.assertEqual(_format_version(160002), '16.2')
        self.assertEqual(_format_version(100000), '10.0')
        self.assertEqual(_format_version(90624), '9.6.24')
