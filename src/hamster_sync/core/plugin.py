from __future__ import annotations

import datetime

from typing import Any, Dict, List

from abc import ABC, abstractmethod

from hamster_sync.models import RemoteRecord, RemoteUser, TimeRecord


class Plugin(ABC):
    def __init__(self, plugin: str, name: str, config: Dict[str, Any]):
        """
        Initialize the plugin with configuration.

        Args:
            plugin (str): The plugin module name, e.g. "everhour".
            name (str): The name this instance is configured under.
            config (Dict[str, Any]): Configuration specific to the remote.
        """
        self.plugin = plugin
        self.name = name
        self.config = config


class RemotePlugin(Plugin):
    """A remote time tracking service we push per-task daily totals to."""

    @abstractmethod
    def current_user(self) -> RemoteUser:
        """
        Returns the user the configured credentials belong to.
        """
        pass

    @abstractmethod
    def list_user_records(self, user_id: int, from_date: datetime.date,
                          to_date: datetime.date) -> List[RemoteRecord]:
        """
        Returns the user's time records between the two dates, both inclusive.
        """
        pass

    @abstractmethod
    def create_record(self, task_ref: str, record: TimeRecord) -> None:
        """
        Adds a time record against the task.

        Args:
            task_ref (str): The remote task reference, e.g. "as:1234".
            record (TimeRecord): The date, user and duration to record.
        """
        pass

    @abstractmethod
    def update_record(self, task_ref: str, record: TimeRecord) -> None:
        """
        Replaces the time recorded against the task for the record's user and date.
        """
        pass
