"""Tests for logbot.roster: channel status prefix tracking."""

from logbot.roster import ChannelRoster


def test_names_reply_sets_prefixes():
    roster = ChannelRoster()
    roster.names("#test", ["@alice", "+bob", "carol", "@+dave"])
    assert roster.prefix("#test", "alice") == "@"
    assert roster.prefix("#test", "bob") == "+"
    assert roster.prefix("#test", "carol") is None
    assert roster.prefix("#test", "dave") == "@+"


def test_lookup_ignores_case():
    roster = ChannelRoster()
    roster.names("#Test", ["@Alice"])
    assert roster.prefix("#test", "ALICE") == "@"


def test_unknown_nick_or_channel_has_no_prefix():
    roster = ChannelRoster()
    assert roster.prefix("#nowhere", "alice") is None


def test_mode_changes():
    roster = ChannelRoster()
    roster.names("#test", ["alice", "bob"])
    roster.mode("#test", "+ov", ["alice", "bob"])
    assert roster.prefix("#test", "alice") == "@"
    assert roster.prefix("#test", "bob") == "+"
    roster.mode("#test", "-o+v", ["alice", "alice"])
    assert roster.prefix("#test", "alice") == "+"


def test_mode_skips_arguments_of_other_modes():
    roster = ChannelRoster()
    roster.names("#test", ["alice"])
    roster.mode("#test", "+bko", ["*!*@spam", "sekrit", "alice"])
    assert roster.prefix("#test", "alice") == "@"


def test_prefixes_ordered_by_rank():
    roster = ChannelRoster()
    roster.join("#test", "alice")
    roster.mode("#test", "+vo", ["alice", "alice"])
    assert roster.prefix("#test", "alice") == "@+"


def test_custom_prefix_spec():
    roster = ChannelRoster()
    roster.set_prefix_spec("(yov)!@+")
    roster.names("#test", ["!alice"])
    assert roster.prefix("#test", "alice") == "!"
    roster.mode("#test", "+y", ["bob"])
    assert roster.prefix("#test", "bob") == "!"


def test_join_part_kick():
    roster = ChannelRoster()
    roster.names("#test", ["@alice"])
    roster.part("#test", "alice")
    assert roster.prefix("#test", "alice") is None
    roster.join("#test", "bob")
    roster.mode("#test", "+v", ["bob"])
    assert roster.prefix("#test", "bob") == "+"
    roster.kick("#test", "bob")
    assert roster.prefix("#test", "bob") is None


def test_quit_removes_from_every_channel():
    roster = ChannelRoster()
    roster.names("#a", ["@alice"])
    roster.names("#b", ["alice"])
    roster.mode("#b", "+v", ["alice"])
    roster.quit("alice")
    assert roster.prefix("#a", "alice") is None
    assert roster.prefix("#b", "alice") is None


def test_rename_keeps_prefix():
    roster = ChannelRoster()
    roster.names("#test", ["@alice"])
    roster.rename("alice", "alicia")
    assert roster.prefix("#test", "alicia") == "@"
    assert roster.prefix("#test", "alice") is None


def test_forget_channel():
    roster = ChannelRoster()
    roster.names("#test", ["@alice"])
    roster.forget("#test")
    assert roster.prefix("#test", "alice") is None
