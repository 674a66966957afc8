"""Session state shared by every event handler.

One `LogBotContext` is built at startup and passed to each handler, in place
of module-level configuration and database globals.
"""

from dataclasses import dataclass, field

from logbot.config import Settings
from logbot.database import Database
from logbot.eventlog import EventLogger
from logbot.resolver import IdentifierResolver
from logbot.roster import ChannelRoster


@dataclass
class LogBotContext:
    settings: Settings
    database: Database
    resolver: IdentifierResolver
    logger: EventLogger
    roster: ChannelRoster = field(default_factory=ChannelRoster)

    @classmethod
    def create(cls, settings: Settings) -> "LogBotContext":
        database = Database()
        resolver = IdentifierResolver(database)
        return cls(
            settings=settings,
            database=database,
            resolver=resolver,
            logger=EventLogger(resolver),
        )

    def __enter__(self) -> "LogBotContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def network(self) -> str:
        return self.settings.server.name

    def connect(self) -> bool:
        """Open the configured store. False on failure, see `database.errstr`."""
        db = self.settings.database
        return self.database.connect(db.source, db.username, db.password, db.settings)

    def close(self) -> None:
        self.database.close()
