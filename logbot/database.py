"""Storage connection ownership and schema checking.

A `Database` owns the single SQLite connection used by the resolver and the
event logger for the life of the process. It opens the connection, verifies
that the expected tables are present, and refuses to report itself ready
otherwise. Use it as a context manager so the connection is released on
every exit path:

    with Database() as db:
        if not db.connect(source, username, password, settings):
            print(db.errstr)
"""

import sqlite3
from pathlib import Path
from typing import Any

from logbot.errors import ErrorState
from logbot.schema import CASEFOLD, EXPECTED_TABLES

MEMORY = ":memory:"

# Keys in the settings mapping that are sqlite3.connect() arguments rather
# than PRAGMAs.
CONNECT_ARGS = ("timeout", "detect_types")

DEFAULT_FILE_SETTINGS = {"journal_mode": "WAL", "foreign_keys": "ON"}


def casefold_compare(a: str, b: str) -> int:
    """Collation comparing text by its Unicode case folding."""
    a, b = a.casefold(), b.casefold()
    return (a > b) - (a < b)


def source_path(source: str) -> str:
    """Turn a connection source string into a SQLite database path.

    Accepts a plain path, SQLAlchemy-style ``sqlite:///relative.db`` /
    ``sqlite:////absolute.db`` / ``sqlite://`` (in-memory), and DBI-style
    ``dbi:SQLite:dbname=path``. Raises ValueError for anything else.
    """
    source = (source or "").strip()
    if not source:
        raise ValueError("No database source configured")

    lowered = source.lower()
    if lowered.startswith("sqlite://"):
        rest = source[len("sqlite://"):]
        if rest in ("", "/"):
            return MEMORY
        path = rest[1:] if rest.startswith("/") else rest
    elif lowered.startswith("dbi:sqlite:"):
        rest = source[len("dbi:sqlite:"):]
        params = dict(
            part.split("=", 1) for part in rest.split(";") if "=" in part
        )
        path = params.get("dbname") or params.get("database") or rest
    elif "://" in source or lowered.startswith("dbi:"):
        raise ValueError(f"Unsupported database source '{source}': only SQLite is available")
    else:
        path = source

    if path == MEMORY:
        return MEMORY
    return str(Path(path).expanduser())


def open_connection(
    source: str,
    settings: dict[str, Any] | None = None,
    create: bool = False,
) -> sqlite3.Connection:
    """Open an autocommit SQLite connection for `source`.

    Unless `create` is set, the database file must already exist. The
    `CASEFOLD` collation used by the nick and channel columns is registered
    before anything else runs. Settings other than the sqlite3.connect()
    arguments are applied as PRAGMAs.
    Raises ValueError for a bad source and sqlite3.Error if the connection
    cannot be opened.
    """
    path = source_path(source)
    if settings is None:
        settings = {} if path == MEMORY else dict(DEFAULT_FILE_SETTINGS)

    kwargs = {k: settings[k] for k in CONNECT_ARGS if k in settings}
    if path == MEMORY:
        conn = sqlite3.connect(path, isolation_level=None, **kwargs)
    else:
        if create:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        mode = "rwc" if create else "rw"
        uri = f"{Path(path).resolve().as_uri()}?mode={mode}"
        conn = sqlite3.connect(uri, uri=True, isolation_level=None, **kwargs)

    conn.row_factory = sqlite3.Row
    conn.create_collation(CASEFOLD, casefold_compare)
    try:
        for key, value in settings.items():
            if key in CONNECT_ARGS:
                continue
            if not key.replace("_", "").isalnum():
                raise ValueError(f"Invalid database setting name '{key}'")
            conn.execute(f"PRAGMA {key} = {_pragma_value(value)}")
    except Exception:
        conn.close()
        raise
    return conn


def _pragma_value(value: Any) -> str:
    if isinstance(value, bool):
        return "ON" if value else "OFF"
    if isinstance(value, (int, float)):
        return str(value)
    text = str(value)
    if text.replace("_", "").replace("-", "").isalnum():
        return text
    return "'" + text.replace("'", "''") + "'"


class Database(ErrorState):
    """The process's storage connection plus its readiness state."""

    def __init__(self):
        super().__init__()
        self._conn: sqlite3.Connection | None = None
        self.ready = False

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Database is not connected")
        return self._conn

    def connect(
        self,
        source: str,
        username: str | None = None,
        password: str | None = None,
        settings: dict[str, Any] | None = None,
    ) -> bool:
        """Connect to the store and check that the required tables exist.

        `username` and `password` are part of the connection contract but
        SQLite has no use for them. Returns True when the store is ready;
        otherwise False, with the reason in `errstr`.
        """
        self.clear_error()
        self.close()

        try:
            self._conn = open_connection(source, settings)
        except (ValueError, sqlite3.Error) as e:
            self.self_error(f"Unable to connect to database: {e}")
            return False

        if not self._check_tables():
            self.close()
            return False

        self.ready = True
        return True

    def close(self) -> None:
        self.ready = False
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _check_tables(self) -> bool:
        """Return True if every expected table is present in the store."""
        self.clear_error()

        try:
            rows = self.conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table'"
            ).fetchall()
        except sqlite3.Error as e:
            self.self_error(f"Unable to check tables: {e}")
            return False

        present = {r["name"] for r in rows}
        missing = [t for t in EXPECTED_TABLES if t not in present]
        if missing:
            self.self_error(
                f"Missing tables in database ({', '.join(missing)}). Check schema."
            )
            return False
        return True
