from __future__ import annotations

import os
import tomllib

import pendulum

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from hamster_sync.exceptions import ConfigError

DEFAULT_CONFIG_PATH = Path("~/.config/hamster-sync/config.toml")
DEFAULT_DATABASE_PATH = Path("~/.local/share/hamster/hamster.db")

CONFIG_TEMPLATE = """\
# hamster-sync configuration
# timezone = "Europe/London"
# database = "~/.local/share/hamster/hamster.db"
# category = "Work"

[remote]
plugin = "everhour"
task_prefix = "as:"

[remote.config]
# api_token = "..."  # or set EVERHOUR_API_TOKEN
# base_url = "https://api.everhour.com"
# timeout = 30
"""


@dataclass
class RemoteConfig:
    plugin: str = "everhour"
    task_prefix: str = "as:"
    config: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> RemoteConfig:
        config = data.get("config", {})
        if not isinstance(config, dict):
            raise ConfigError("[remote.config] must be a table.")
        return cls(
            plugin=data.get("plugin", "everhour"),
            task_prefix=data.get("task_prefix", "as:"),
            config=dict(config),
        )


@dataclass
class Config:
    """Configuration for hamster-sync. This object includes the default values for the CLI."""
    timezone: pendulum.Timezone = field(default_factory=lambda: pendulum.now().timezone)
    database: Path = field(default_factory=DEFAULT_DATABASE_PATH.expanduser)
    category: Optional[str] = None
    remote: RemoteConfig = field(default_factory=RemoteConfig)

    @classmethod
    def from_dict(cls, data: dict) -> Config:
        if "timezone" in data:
            try:
                timezone = pendulum.timezone(data.get("timezone"))
            except Exception as e:
                raise ConfigError(f"Unknown timezone {data.get('timezone')!r}.") from e
        else:
            timezone = pendulum.now().timezone
        database = Path(data.get("database", DEFAULT_DATABASE_PATH)).expanduser()
        category = data.get("category")
        remote = RemoteConfig.from_dict(data.get("remote", {}))
        return cls(timezone, database, category, remote)

    @classmethod
    def path(cls) -> Path:
        """The config file location, honouring $HAMSTER_SYNC_CONFIG."""
        return Path(os.getenv("HAMSTER_SYNC_CONFIG", str(DEFAULT_CONFIG_PATH))).expanduser()

    @classmethod
    def load(cls, path: Optional[Path] = None) -> Config:
        """
        Read the config file. A missing file gives the defaults.
        """
        path = path or cls.path()
        if not path.exists():
            return cls()
        try:
            return cls.from_dict(tomllib.loads(path.read_text()))
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Couldn't read {path}: {e}") from e
