"""Log event kinds and the structure accepted by the event logger."""

from dataclasses import dataclass
from enum import Enum


class EventType(str, Enum):
    """Event kinds. Values are the strings stored in the `log.type` column."""

    MESSAGE = "msg"
    ACTION = "action"
    JOIN = "join"
    PART = "part"
    QUIT = "quit"
    KICK = "kick"
    NICK = "nick"
    TOPIC = "topic"


@dataclass
class LogEvent:
    """One event to append to the log.

    Identifier fields that are None or empty are stored as NULL without
    being resolved. `timestamp` defaults to the time of logging and should
    normally be left alone.
    """

    type: EventType
    channel: str | None = None
    nick: str | None = None
    prefix: str | None = None
    secondary: str | None = None
    secondary_prefix: str | None = None
    message: str | None = None
    timestamp: int | None = None
