"""LogBot configuration, loaded from a YAML file.

The file has a ``server`` section naming the network to log (and how to
reach it) and a ``database`` section with the storage connection details:

    server:
      name: libera
      host: irc.libera.chat
      port: 6667
      nick: logbot
      channels: ["#test"]
    database:
      source: sqlite:///logbot.db
      username: ""
      password: ""
      settings: {timeout: 5}

``LOGBOT_DB_PASSWORD`` in the environment (or a ``.env`` file) overrides the
database password so it need not live in the YAML.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from logbot.errors import ConfigError

CONFIG_PATH = "~/.logbot/logbot.yaml"
CONFIG_ENV = "LOGBOT_CONFIG"
PASSWORD_ENV = "LOGBOT_DB_PASSWORD"


@dataclass
class ServerSettings:
    name: str
    host: str = "127.0.0.1"
    port: int = 6667
    nick: str = "logbot"
    channels: list[str] = field(default_factory=list)


@dataclass
class DatabaseSettings:
    source: str
    username: str = ""
    password: str = ""
    settings: dict[str, Any] | None = None


@dataclass
class Settings:
    server: ServerSettings
    database: DatabaseSettings


def default_config_path() -> Path:
    return Path(os.getenv(CONFIG_ENV) or CONFIG_PATH).expanduser()


def load_yaml(path: str | Path) -> Any:
    """Load the data from a YAML file, expanding ``~`` in the path."""
    path = Path(path).expanduser()
    if not path.is_file():
        raise FileNotFoundError(f"Unable to load data from {path}: file not found")

    with open(path, "r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh)
        except yaml.YAMLError as e:
            raise ConfigError(f"Error loading data from {path}: {e}") from e


def load_settings(path: str | Path | None = None) -> Settings:
    """Read and validate the configuration file."""
    path = Path(path).expanduser() if path else default_config_path()
    raw = load_yaml(path) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Error loading data from {path}: expected a mapping at top level")

    server = raw.get("server") or {}
    database = raw.get("database") or {}
    if not isinstance(server, dict) or not isinstance(database, dict):
        raise ConfigError(f"Error loading data from {path}: 'server' and 'database' must be mappings")

    if not server.get("name"):
        raise ConfigError(f"No server name set in {path}")
    if not database.get("source"):
        raise ConfigError(f"No database source set in {path}")

    channels = server.get("channels") or []
    if isinstance(channels, str):
        channels = [channels]

    db_settings = database.get("settings")
    if db_settings is not None and not isinstance(db_settings, dict):
        raise ConfigError(f"Error loading data from {path}: 'database.settings' must be a mapping")

    try:
        port = int(server.get("port") or 6667)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid server port in {path}: {server.get('port')!r}") from e

    return Settings(
        server=ServerSettings(
            name=str(server["name"]),
            host=str(server.get("host") or "127.0.0.1"),
            port=port,
            nick=str(server.get("nick") or "logbot"),
            channels=[str(c) for c in channels],
        ),
        database=DatabaseSettings(
            source=str(database["source"]),
            username=str(database.get("username") or ""),
            password=os.getenv(PASSWORD_ENV) or str(database.get("password") or ""),
            settings=db_settings,
        ),
    )
