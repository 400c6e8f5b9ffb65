"""Errors raised by hamster-sync."""

from __future__ import annotations

import datetime
from typing import Optional


class HamsterSyncError(Exception):
    """Base class for all errors the CLI reports and exits on."""


class ConfigError(HamsterSyncError):
    """The configuration is invalid or incomplete."""


class StoreError(HamsterSyncError):
    """The Hamster database could not be opened or read."""


class DescriptionParseError(HamsterSyncError):
    """A fact description could not be parsed as markdown."""

    def __init__(self, message: str, record_id: Optional[int] = None):
        self.record_id = record_id
        if record_id is not None:
            message = f"fact {record_id}: {message}"
        super().__init__(message)


class MissingTaskReferenceError(HamsterSyncError):
    """Activities without a task reached the sync step outside of a dry run."""

    def __init__(self, day: datetime.date, comments: list[str]):
        self.day = day
        self.comments = comments
        super().__init__(
            f"{day.isoformat()}: activities without a task id can't be synced "
            f"({'; '.join(comments)}). Link them to a task or use --dry-run.")


class RemoteServiceError(HamsterSyncError):
    """A call to the remote time tracking service failed."""
