"""Append chat events to the `log` table.

Every identifier on the event is resolved to its id before anything is
written. The first resolution that fails aborts the whole call, so a log row
is only ever inserted with all of its references in place.
"""

import sqlite3
import time

from logbot.errors import ErrorState
from logbot.events import EventType, LogEvent
from logbot.resolver import CHANNEL, NICK, PREFIX, IdentifierResolver

# (event attribute, namespace, log column), in resolution order.
IDENTIFIER_FIELDS = (
    ("channel", CHANNEL, "channel_id"),
    ("nick", NICK, "nick_id"),
    ("prefix", PREFIX, "nick_prefix_id"),
    ("secondary", NICK, "secondary_nick_id"),
    ("secondary_prefix", PREFIX, "secondary_prefix_id"),
)


class EventLogger(ErrorState):
    """Appends events to the log table through an `IdentifierResolver`."""

    def __init__(self, resolver: IdentifierResolver):
        super().__init__()
        self.resolver = resolver

    @property
    def db(self):
        return self.resolver.db

    def log(self, event: LogEvent) -> bool:
        """Write `event` as one log row. Returns False on failure, see `errstr`."""
        self.clear_error()

        try:
            kind = EventType(event.type)
        except ValueError:
            self.self_error(f"Unknown event type '{event.type}'")
            return False

        if not self.db.ready:
            self.self_error("Unable to add log entry: database is not ready")
            return False

        ids: dict[str, int | None] = {}
        for attr, ns, column in IDENTIFIER_FIELDS:
            value = getattr(event, attr)
            if not value:
                ids[column] = None
                continue
            ident = self.resolver.resolve(ns, value)
            if ident is None:
                self.self_error(self.resolver.errstr)
                return False
            ids[column] = ident

        timestamp = event.timestamp if event.timestamp is not None else int(time.time())

        try:
            cur = self.db.conn.execute(
                "INSERT INTO log (timestamp, channel_id, type, nick_id, nick_prefix_id, "
                "secondary_nick_id, secondary_prefix_id, message) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    timestamp,
                    ids["channel_id"],
                    kind.value,
                    ids["nick_id"],
                    ids["nick_prefix_id"],
                    ids["secondary_nick_id"],
                    ids["secondary_prefix_id"],
                    event.message,
                ),
            )
        except sqlite3.Error as e:
            self.self_error(f"Unable to add log entry: {e}")
            return False

        if cur.rowcount == 0:
            self.self_error("Log entry addition failed, no rows inserted")
            return False
        return True
