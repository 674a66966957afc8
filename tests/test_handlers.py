"""Tests for logbot.handlers: IRC events to log rows."""

from logbot import handlers


def _rows(ctx):
    return ctx.database.conn.execute(
        """
        SELECT l.type, c.name AS channel, n.nick AS nick, p.prefix AS prefix,
               s.nick AS secondary, sp.prefix AS secondary_prefix, l.message
        FROM log l
        LEFT JOIN channels c ON c.id = l.channel_id
        LEFT JOIN nicks n ON n.id = l.nick_id
        LEFT JOIN prefixes p ON p.id = l.nick_prefix_id
        LEFT JOIN nicks s ON s.id = l.secondary_nick_id
        LEFT JOIN prefixes sp ON sp.id = l.secondary_prefix_id
        ORDER BY l.id
        """
    ).fetchall()


def test_message_with_prefix_and_formatting(ctx):
    ctx.roster.names("#test", ["@alice"])
    assert handlers.on_message(ctx, "testnet", "#test", "alice", "\x02hi\x02 <all>")
    row = _rows(ctx)[0]
    assert row["type"] == "msg"
    assert row["channel"] == "#test"
    assert row["nick"] == "alice"
    assert row["prefix"] == "@"
    assert row["message"] == "<b>hi</b> &lt;all&gt;"


def test_other_networks_are_ignored(ctx):
    assert handlers.on_message(ctx, "othernet", "#test", "alice", "hi") is None
    assert handlers.on_quit(ctx, "othernet", "alice", "bye") is None
    assert _rows(ctx) == []


def test_join_and_part(ctx):
    assert handlers.on_join(ctx, "testnet", "#test", "bob")
    assert handlers.on_part(ctx, "testnet", "#test", "bob", "later")
    rows = _rows(ctx)
    assert rows[0]["type"] == "join"
    assert rows[0]["message"] is None
    assert rows[1]["type"] == "part"
    assert rows[1]["message"] == "later"


def test_quit_has_no_channel(ctx):
    assert handlers.on_quit(ctx, "testnet", "bob", "bye")
    row = _rows(ctx)[0]
    assert row["type"] == "quit"
    assert row["channel"] is None
    assert row["prefix"] is None
    assert row["nick"] == "bob"


def test_kick_logs_kicker_as_secondary(ctx):
    ctx.roster.names("#test", ["@op", "+victim"])
    assert handlers.on_kick(ctx, "testnet", "#test", "victim", "op", "spam")
    row = _rows(ctx)[0]
    assert row["type"] == "kick"
    assert (row["nick"], row["prefix"]) == ("victim", "+")
    assert (row["secondary"], row["secondary_prefix"]) == ("op", "@")
    assert row["message"] == "spam"


def test_nick_change_logs_old_nick_as_secondary(ctx):
    assert handlers.on_nick(ctx, "testnet", "alicia", "alice")
    row = _rows(ctx)[0]
    assert (row["type"], row["nick"], row["secondary"]) == ("nick", "alicia", "alice")
    assert row["channel"] is None


def test_topic(ctx):
    assert handlers.on_topic(ctx, "testnet", "#test", "alice", "New \x1dtopic")
    row = _rows(ctx)[0]
    assert row["type"] == "topic"
    assert row["message"] == "New <i>topic</i>"


def test_failure_is_reported_and_logging_continues(ctx, capsys):
    ctx.database.conn.execute("ALTER TABLE channels RENAME TO channels_old")
    assert handlers.on_message(ctx, "testnet", "#test", "alice", "lost") is False
    out = capsys.readouterr().out
    assert out.startswith("LogBot3 ERROR: Unable to perform channel lookup")

    assert handlers.on_quit(ctx, "testnet", "alice", "still logging")
    assert ctx.database.conn.execute("SELECT COUNT(*) FROM log").fetchone()[0] == 1
