"""Get-or-create resolution of nicks, channels and prefixes to integer ids.

Each namespace lives in its own table with a unique natural-value column.
Lookups for nicks and channels compare Unicode case foldings; prefixes must
match exactly. A missing value is inserted and the new id returned. A nick's
last_seen only ever moves forward, even if the clock steps back.

There is a window between "not found" and the insert in which another
process sharing the store can insert the same value. The unique constraint
then rejects our insert and the resolution fails; it is not retried.
"""

import sqlite3
import time
from dataclasses import dataclass

from logbot.database import Database
from logbot.errors import ErrorState
from logbot.schema import CASEFOLD


@dataclass(frozen=True)
class Namespace:
    name: str
    table: str
    column: str
    nocase: bool
    tracks_seen: bool = False


NICK = Namespace("nick", "nicks", "nick", nocase=True, tracks_seen=True)
CHANNEL = Namespace("channel", "channels", "name", nocase=True)
PREFIX = Namespace("prefix", "prefixes", "prefix", nocase=False)

NAMESPACES = {ns.name: ns for ns in (NICK, CHANNEL, PREFIX)}


def _now() -> int:
    return int(time.time())


class IdentifierResolver(ErrorState):
    """Maps natural values to surrogate keys through a connected `Database`."""

    def __init__(self, db: Database):
        super().__init__()
        self.db = db

    # ── Public API ────────────────────────────────────────────

    def resolve(self, namespace: str | Namespace, value: str, seen: bool = True) -> int | None:
        """Return the id for `value` in `namespace`, creating the row if needed.

        For nicks, a successful lookup also moves `last_seen` to now unless
        `seen` is False. Returns None on failure, with the reason in `errstr`.
        """
        self.clear_error()

        if isinstance(namespace, str):
            ns = NAMESPACES.get(namespace)
            if ns is None:
                return self.self_error(f"Unknown identifier namespace '{namespace}'")
        else:
            ns = namespace

        if not self.db.ready:
            return self.self_error(f"Unable to resolve {ns.name}: database is not ready")
        if not value:
            return self.self_error(f"Unable to resolve {ns.name}: no value given")

        ident = self._get(ns, value, seen)
        if ident is None:
            return None
        if ident:
            return ident
        # 0 means "not found, no error"
        return self._add(ns, value)

    def nick_id(self, nick: str, seen: bool = True) -> int | None:
        return self.resolve(NICK, nick, seen)

    def channel_id(self, channel: str) -> int | None:
        return self.resolve(CHANNEL, channel)

    def prefix_id(self, prefix: str) -> int | None:
        return self.resolve(PREFIX, prefix)

    # ── Storage internals ─────────────────────────────────────

    def _get(self, ns: Namespace, value: str, seen: bool) -> int | None:
        """Look `value` up. Returns its id, 0 if absent, or None on error."""
        collate = f" COLLATE {CASEFOLD}" if ns.nocase else ""
        try:
            row = self.db.conn.execute(
                f"SELECT id FROM {ns.table} WHERE {ns.column} = ?{collate}",
                (value,),
            ).fetchone()
        except sqlite3.Error as e:
            return self.self_error(f"Unable to perform {ns.name} lookup: {e}")

        if row is None:
            return 0
        ident = row["id"]

        if ns.tracks_seen and seen:
            try:
                cur = self.db.conn.execute(
                    f"UPDATE {ns.table} SET last_seen = MAX(last_seen, ?) WHERE id = ?",
                    (_now(), ident),
                )
            except sqlite3.Error as e:
                return self.self_error(f"Unable to set last seen for {ns.name} '{value}': {e}")
            if cur.rowcount == 0:
                return self.self_error(f"{ns.name.capitalize()} last seen update failed, no rows changed")

        return ident

    def _add(self, ns: Namespace, value: str) -> int | None:
        """Insert a new row for `value` and return its id, or None on error."""
        if ns.tracks_seen:
            sql = f"INSERT INTO {ns.table} ({ns.column}, last_seen) VALUES (?, ?)"
            params = (value, _now())
        else:
            sql = f"INSERT INTO {ns.table} ({ns.column}) VALUES (?)"
            params = (value,)

        try:
            cur = self.db.conn.execute(sql, params)
        except sqlite3.Error as e:
            return self.self_error(f"Unable to add {ns.name} '{value}': {e}")
        if cur.rowcount == 0:
            return self.self_error(f"{ns.name.capitalize()} addition failed, no rows inserted")

        ident = cur.lastrowid
        if not ident:
            return self.self_error(f"Unable to get ID of inserted {ns.name}.")
        return ident
