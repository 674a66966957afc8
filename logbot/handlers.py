"""Event handlers: turn IRC events into log entries.

Each handler takes the session context, the tag of the network the event
came from, and the event's details. Events from networks other than the
configured one are ignored. A failed write is reported and the handler
returns, so one bad event never stops logging of the next.
"""

from logbot import NAME
from logbot.context import LogBotContext
from logbot.events import EventType, LogEvent
from logbot.formatting import convert_formatting


def _log(ctx: LogBotContext, event: LogEvent) -> bool:
    if ctx.logger.log(event):
        return True
    print(f"{NAME} ERROR: {ctx.logger.errstr}")
    return False


def _ours(ctx: LogBotContext, network: str) -> bool:
    return network == ctx.network


def on_message(ctx: LogBotContext, network: str, channel: str, nick: str, msg: str) -> bool | None:
    if not _ours(ctx, network):
        return None
    return _log(ctx, LogEvent(
        type=EventType.MESSAGE,
        channel=channel,
        nick=nick,
        prefix=ctx.roster.prefix(channel, nick),
        message=convert_formatting(msg),
    ))


def on_action(ctx: LogBotContext, network: str, channel: str, nick: str, msg: str) -> bool | None:
    if not _ours(ctx, network):
        return None
    return _log(ctx, LogEvent(
        type=EventType.ACTION,
        channel=channel,
        nick=nick,
        prefix=ctx.roster.prefix(channel, nick),
        message=convert_formatting(msg),
    ))


def on_join(ctx: LogBotContext, network: str, channel: str, nick: str) -> bool | None:
    if not _ours(ctx, network):
        return None
    return _log(ctx, LogEvent(
        type=EventType.JOIN,
        channel=channel,
        nick=nick,
        prefix=ctx.roster.prefix(channel, nick),
    ))


def on_part(ctx: LogBotContext, network: str, channel: str, nick: str, msg: str | None) -> bool | None:
    if not _ours(ctx, network):
        return None
    return _log(ctx, LogEvent(
        type=EventType.PART,
        channel=channel,
        nick=nick,
        prefix=ctx.roster.prefix(channel, nick),
        message=convert_formatting(msg),
    ))


def on_quit(ctx: LogBotContext, network: str, nick: str, msg: str | None) -> bool | None:
    if not _ours(ctx, network):
        return None
    return _log(ctx, LogEvent(
        type=EventType.QUIT,
        nick=nick,
        message=convert_formatting(msg),
    ))


def on_kick(
    ctx: LogBotContext,
    network: str,
    channel: str,
    nick: str,
    kicker: str,
    msg: str | None,
) -> bool | None:
    """Log `kicker` removing `nick` from `channel`."""
    if not _ours(ctx, network):
        return None
    return _log(ctx, LogEvent(
        type=EventType.KICK,
        channel=channel,
        nick=nick,
        prefix=ctx.roster.prefix(channel, nick),
        secondary=kicker,
        secondary_prefix=ctx.roster.prefix(channel, kicker),
        message=convert_formatting(msg),
    ))


def on_nick(ctx: LogBotContext, network: str, new_nick: str, old_nick: str) -> bool | None:
    if not _ours(ctx, network):
        return None
    return _log(ctx, LogEvent(type=EventType.NICK, nick=new_nick, secondary=old_nick))


def on_topic(ctx: LogBotContext, network: str, channel: str, nick: str, topic: str | None) -> bool | None:
    if not _ours(ctx, network):
        return None
    return _log(ctx, LogEvent(
        type=EventType.TOPIC,
        channel=channel,
        nick=nick,
        prefix=ctx.roster.prefix(channel, nick),
        message=convert_formatting(topic),
    ))
