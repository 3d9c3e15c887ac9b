"""
Fake connection objects for session tests.

Provides in-memory stand-ins for the SQLAlchemy engine/connection/result and
for a raw PyMySQL connection, so the session layer can be exercised without a
MySQL server.

Usage:
    def test_gtid(fake_engine):
        fake_engine.respond('SHOW MASTER STATUS', ['File', 'Position', ...], [(...)])
"""
import pytest


class FakeResult:
    """Result with the subset of the SQLAlchemy CursorResult API in use."""

    def __init__(self, columns, rows):
        self._columns = list(columns)
        self._rows = list(rows)
        self.closed = False

    def keys(self):
        return list(self._columns)

    def fetchone(self):
        if not self._rows:
            return None
        return self._rows.pop(0)

    def __iter__(self):
        while self._rows:
            yield self._rows.pop(0)

    def close(self):
        self.closed = True


class FakeConnection:
    """SQLAlchemy-like connection answering statements from its engine."""

    def __init__(self, engine):
        self.engine = engine
        self.closed = False
        self.executed = []
        self.results = []
        self.options = {}

    def execution_options(self, **options):
        self.options.update(options)
        return self

    def exec_driver_sql(self, sql):
        self.executed.append(sql)
        response = self.engine.responses.get(sql)
        if response is None:
            raise AssertionError(f'Unexpected statement: {sql}')
        if isinstance(response, Exception):
            raise response
        columns, rows = response
        result = FakeResult(columns, rows)
        self.results.append(result)
        return result

    def close(self):
        if self.engine.close_error is not None:
            raise self.engine.close_error
        self.closed = True


class FakeEngine:
    """Engine handing out FakeConnections and recording them."""

    def __init__(self, url=None, **kwargs):
        self.url = url
        self.kwargs = kwargs
        self.responses = {}
        self.connections = []
        self.close_error = None
        self.disposed = False

    def respond(self, sql, columns=(), rows=()):
        self.responses[sql] = (columns, rows)

    def fail(self, sql, error):
        self.responses[sql] = error

    def connect(self):
        cn = FakeConnection(self)
        self.connections.append(cn)
        return cn

    def dispose(self):
        self.disposed = True


class FakeCursor:

    def __init__(self, dbapi_connection):
        self.dbapi_connection = dbapi_connection
        self.executed = []
        self.closed = False

    def execute(self, sql):
        self.executed.append(sql)
        if self.dbapi_connection.error is not None:
            raise self.dbapi_connection.error

    def fetchone(self):
        return (self.dbapi_connection.version,)

    def close(self):
        self.closed = True


class FakeDbapiConnection:
    """Raw DBAPI connection reporting a configurable server version."""

    def __init__(self, version='8.0.35', error=None):
        self.version = version
        self.error = error
        self.cursors = []
        self.closed = False

    def cursor(self):
        cursor = FakeCursor(self)
        self.cursors.append(cursor)
        return cursor

    def close(self):
        self.closed = True


@pytest.fixture
def fake_engine():
    """A FakeEngine with no canned responses."""
    return FakeEngine()


@pytest.fixture
def engine_factory(fake_engine):
    """Engine factory returning the shared fake_engine and recording its arguments."""
    def factory(url, **kwargs):
        fake_engine.url = url
        fake_engine.kwargs = kwargs
        return fake_engine

    return factory
