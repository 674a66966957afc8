"""LogBot IRC channel logger CLI."""

import argparse
import sys

from dotenv import load_dotenv

from logbot import NAME, VERSION

load_dotenv()


def _settings(args: argparse.Namespace):
    from logbot.config import load_settings
    from logbot.errors import ConfigError

    try:
        return load_settings(args.config)
    except (FileNotFoundError, ConfigError) as e:
        print(f"{NAME} {VERSION} load failed: {e}")
        sys.exit(1)


# ── Commands ─────────────────────────────────────────────────────────────


def cmd_run(args: argparse.Namespace) -> None:
    from logbot.context import LogBotContext
    from logbot.irc_client import IRCClient

    settings = _settings(args)
    with LogBotContext.create(settings) as ctx:
        # Without a store there is nothing to log to, so don't connect to IRC.
        if not ctx.connect():
            print(f"{NAME} {VERSION} load failed: {ctx.database.errstr}")
            sys.exit(1)

        print(f"{NAME} {VERSION} loaded.")
        client = IRCClient(ctx)
        try:
            client.run()
        except KeyboardInterrupt:
            client.stop()
            print("[LogBot] Stopped.")


def cmd_check(args: argparse.Namespace) -> None:
    from logbot.database import Database

    db_settings = _settings(args).database
    with Database() as db:
        if not db.connect(db_settings.source, db_settings.username, db_settings.password, db_settings.settings):
            print(f"[LogBot] Database not ready: {db.errstr}")
            sys.exit(1)
    print("[LogBot] Database ready.")


def cmd_init_db(args: argparse.Namespace) -> None:
    import sqlite3

    from logbot.database import open_connection
    from logbot.schema import install_schema

    db_settings = _settings(args).database
    try:
        conn = open_connection(db_settings.source, db_settings.settings, create=True)
    except (ValueError, sqlite3.Error) as e:
        print(f"[LogBot] Unable to open database: {e}")
        sys.exit(1)
    try:
        install_schema(conn)
    finally:
        conn.close()
    print(f"[LogBot] Schema installed in {db_settings.source}")


# ── CLI ──────────────────────────────────────────────────────────────────


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="logbot",
        description=f"{NAME} {VERSION} IRC channel logger",
    )
    parser.add_argument("--config", help="Path to logbot.yaml (default: $LOGBOT_CONFIG or ~/.logbot/logbot.yaml)")
    sub = parser.add_subparsers(dest="command", required=True)

    # run
    p_run = sub.add_parser("run", help="Connect to IRC and log channel events")
    p_run.set_defaults(func=cmd_run)

    # check
    p_check = sub.add_parser("check", help="Check the database connection and schema")
    p_check.set_defaults(func=cmd_check)

    # init-db
    p_init = sub.add_parser("init-db", help="Create the LogBot tables in the configured database")
    p_init.set_defaults(func=cmd_init_db)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
