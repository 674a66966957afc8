"""Shared fixtures for LogBot tests."""

import pytest

from logbot.config import DatabaseSettings, ServerSettings, Settings
from logbot.context import LogBotContext
from logbot.database import Database, open_connection
from logbot.eventlog import EventLogger
from logbot.resolver import IdentifierResolver
from logbot.schema import install_schema


@pytest.fixture
def db_path(tmp_path):
    """A SQLite file with the LogBot schema installed."""
    path = tmp_path / "logbot.db"
    conn = open_connection(str(path), create=True)
    install_schema(conn)
    conn.close()
    return path


@pytest.fixture
def db(db_path):
    """A connected, ready Database."""
    database = Database()
    assert database.connect(str(db_path)), database.errstr
    yield database
    database.close()


@pytest.fixture
def resolver(db):
    return IdentifierResolver(db)


@pytest.fixture
def logger(resolver):
    return EventLogger(resolver)


@pytest.fixture
def settings(db_path):
    return Settings(
        server=ServerSettings(name="testnet", nick="logbot", channels=["#test"]),
        database=DatabaseSettings(source=f"sqlite:///{db_path}"),
    )


@pytest.fixture
def ctx(settings):
    """A connected LogBotContext for the `testnet` network."""
    context = LogBotContext.create(settings)
    assert context.connect(), context.database.errstr
    yield context
    context.close()


@pytest.fixture
def count(db):
    """Return the number of rows in a table."""
    def _count(table: str) -> int:
        return db.conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
    return _count


@pytest.fixture
def log_rows(db):
    """Return all log rows, oldest first."""
    def _rows() -> list:
        return db.conn.execute("SELECT * FROM log ORDER BY id").fetchall()
    return _rows
