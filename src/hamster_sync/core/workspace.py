import importlib

import pendulum

from pathlib import Path
from typing import Any, Dict, Optional, Type

from hamster_sync.core.config import Config
from hamster_sync.core.plugin import RemotePlugin
from hamster_sync.core.store import HamsterStore
from hamster_sync.exceptions import ConfigError


class Workspace:

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or Config.path()
        self.config = Config.load(self.config_path)

    def now(self) -> pendulum.DateTime:
        """
        Get the current time in the configured timezone
        """
        return pendulum.now(self.config.timezone)

    def today(self) -> pendulum.Date:
        """
        Get today's date.
        """
        return self.now().date()

    def open_store(self, database: Optional[Path] = None) -> HamsterStore:
        """
        Opens the Hamster database, by default the configured one.
        """
        return HamsterStore.open(database or self.config.database, self.config.timezone)

    def _load_plugin(self, plugin_name: str) -> Type[RemotePlugin]:
        module_name = f"hamster_sync.plugins.{plugin_name}"
        try:
            module = importlib.import_module(module_name)
        except ModuleNotFoundError as e:
            if e.name != module_name:
                raise
            raise ConfigError(f"Plugin {plugin_name} not found.") from e

        for attr_name in dir(module):
            attr = getattr(module, attr_name)
            if isinstance(attr, type) and issubclass(attr, RemotePlugin) and attr is not RemotePlugin:
                return attr

        raise ConfigError(f"Plugin {plugin_name} is not a remote plugin.")

    def remote(self, overrides: Optional[Dict[str, Any]] = None) -> RemotePlugin:
        """
        Returns the configured remote, with `overrides` taking precedence over its config.
        """
        remote_config = self.config.remote
        Plugin = self._load_plugin(remote_config.plugin)

        config = dict(remote_config.config)
        config.update({k: v for k, v in (overrides or {}).items() if v is not None})

        return Plugin(plugin=remote_config.plugin, name=remote_config.plugin, config=config)
