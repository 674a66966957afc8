"""Reference schema for the LogBot store.

The bootstrap in `logbot.database` only checks that these tables exist; it
never creates or alters them. `install_schema` is used by the `init-db`
command to set up a fresh SQLite store.

All timestamps are whole seconds since the Unix epoch held in 64-bit INTEGER
columns, so nothing rolls over in 2038.

Nick and channel names compare under the `CASEFOLD` collation, which
`logbot.database.open_connection` registers on every connection it opens.
Other SQLite clients must register a collation of that name before writing
to those tables.
"""

import sqlite3

CASEFOLD = "CASEFOLD"

EXPECTED_TABLES = ("channels", "excerpt", "log", "nicks", "prefixes")


def install_schema(conn: sqlite3.Connection) -> None:
    """Create any of the LogBot tables that do not exist yet."""
    # ── Identifiers ───────────────────────────────────────────
    conn.execute(
        f"""
        CREATE TABLE IF NOT EXISTS nicks (
            id          INTEGER PRIMARY KEY AUTOINCREMENT,
            nick        TEXT    NOT NULL UNIQUE COLLATE {CASEFOLD},
            last_seen   INTEGER NOT NULL CHECK (last_seen >= 0)
        )
        """
    )
    conn.execute(
        f"""
        CREATE TABLE IF NOT EXISTS channels (
            id          INTEGER PRIMARY KEY AUTOINCREMENT,
            name        TEXT    NOT NULL UNIQUE COLLATE {CASEFOLD}
        )
        """
    )
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS prefixes (
            id          INTEGER PRIMARY KEY AUTOINCREMENT,
            prefix      TEXT    NOT NULL UNIQUE COLLATE BINARY
        )
        """
    )

    # ── Event log ─────────────────────────────────────────────
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS log (
            id                  INTEGER PRIMARY KEY AUTOINCREMENT,
            timestamp           INTEGER NOT NULL CHECK (timestamp >= 0),
            channel_id          INTEGER REFERENCES channels(id),
            type                TEXT    NOT NULL
                                CHECK (type IN ('msg', 'action', 'join', 'part', 'quit', 'kick', 'nick', 'topic')),
            nick_id             INTEGER REFERENCES nicks(id),
            nick_prefix_id      INTEGER REFERENCES prefixes(id),
            secondary_nick_id   INTEGER REFERENCES nicks(id),
            secondary_prefix_id INTEGER REFERENCES prefixes(id),
            message             TEXT
        )
        """
    )
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_log_channel_ts ON log (channel_id, timestamp)"
    )

    # ── Excerpts (reserved) ───────────────────────────────────
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS excerpt (
            id              INTEGER PRIMARY KEY AUTOINCREMENT,
            channel_id      INTEGER REFERENCES channels(id),
            start_timestamp INTEGER NOT NULL,
            end_timestamp   INTEGER NOT NULL,
            title           TEXT    NOT NULL DEFAULT '',
            created         INTEGER NOT NULL
        )
        """
    )
    conn.commit()
