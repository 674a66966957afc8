"""Tests for the logbot CLI."""

import sys

import pytest

from logbot import main as cli


@pytest.fixture
def config_file(tmp_path):
    def _write(source):
        path = tmp_path / "logbot.yaml"
        path.write_text(
            f"server:\n  name: testnet\n  channels: ['#test']\ndatabase:\n  source: '{source}'\n",
            encoding="utf-8",
        )
        return path
    return _write


def _run(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["logbot", *argv])
    cli.main()


def test_init_db_then_check(tmp_path, config_file, monkeypatch, capsys):
    config = config_file(tmp_path / "data" / "logbot.db")
    _run(monkeypatch, "--config", str(config), "init-db")
    _run(monkeypatch, "--config", str(config), "check")
    out = capsys.readouterr().out
    assert "Schema installed" in out
    assert "Database ready." in out


def test_check_reports_missing_database(tmp_path, config_file, monkeypatch, capsys):
    config = config_file(tmp_path / "absent.db")
    with pytest.raises(SystemExit) as exc:
        _run(monkeypatch, "--config", str(config), "check")
    assert exc.value.code == 1
    assert "Database not ready: Unable to connect to database" in capsys.readouterr().out


def test_run_is_inert_when_store_not_ready(tmp_path, config_file, monkeypatch, capsys):
    config = config_file(tmp_path / "absent.db")

    def no_irc(*args, **kwargs):
        raise AssertionError("IRC client must not start")

    monkeypatch.setattr("logbot.irc_client.IRCClient.run", no_irc)
    with pytest.raises(SystemExit) as exc:
        _run(monkeypatch, "--config", str(config), "run")
    assert exc.value.code == 1
    assert capsys.readouterr().out.startswith("LogBot3 3.0 load failed: Unable to connect to database")


def test_run_starts_client_when_ready(tmp_path, config_file, monkeypatch, capsys):
    config = config_file(tmp_path / "logbot.db")
    _run(monkeypatch, "--config", str(config), "init-db")

    started = []
    monkeypatch.setattr("logbot.irc_client.IRCClient.run", lambda self: started.append(self.ctx.database.ready))
    _run(monkeypatch, "--config", str(config), "run")
    assert started == [True]
    assert "LogBot3 3.0 loaded." in capsys.readouterr().out


def test_missing_config(tmp_path, monkeypatch, capsys):
    with pytest.raises(SystemExit):
        _run(monkeypatch, "--config", str(tmp_path / "nope.yaml"), "run")
    assert "load failed" in capsys.readouterr().out
