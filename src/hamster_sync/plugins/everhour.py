import datetime

import pendulum
import requests

from typing import Any, Dict, List, Optional

from hamster_sync.core.plugin import RemotePlugin
from hamster_sync.exceptions import ConfigError, RemoteServiceError
from hamster_sync.models import RemoteRecord, RemoteUser, TimeRecord


class EverhourPlugin(RemotePlugin):

    DEFAULT_BASE_URL = "https://api.everhour.com"
    DEFAULT_TIMEOUT = 30

    def __init__(self, plugin: str, name: str, config: Dict[str, Any]):
        super().__init__(plugin, name, config)
        if not self.config.get("api_token"):
            raise ConfigError(
                "No Everhour API token configured. Pass --api-token or set EVERHOUR_API_TOKEN.")
        self.base_url = self.config.get("base_url", self.DEFAULT_BASE_URL).rstrip("/")
        self.timeout = self.config.get("timeout", self.DEFAULT_TIMEOUT)

    def _request(self, method: str, path: str, params: Optional[Dict[str, Any]] = None,
                 json: Optional[Dict[str, Any]] = None) -> Any:
        headers = {
            "X-Api-Key": self.config.get("api_token"),
            "Content-Type": "application/json",
        }
        try:
            response = requests.request(method, f"{self.base_url}{path}", params=params,
                                        json=json, headers=headers, timeout=self.timeout)
            response.raise_for_status()  # Raise an error for HTTP issues
            return response.json() if response.content else None
        except requests.RequestException as e:
            raise RemoteServiceError(f"Everhour {method} {path} failed: {e}") from e

    def current_user(self) -> RemoteUser:
        data = self._request("GET", "/users/me")
        return RemoteUser(id=data["id"], name=data.get("name", ""), email=data.get("email"))

    def list_user_records(self, user_id: int, from_date: datetime.date,
                          to_date: datetime.date) -> List[RemoteRecord]:
        data = self._request("GET", f"/users/{user_id}/time",
                             params={"from": from_date.isoformat(), "to": to_date.isoformat()})

        records = []
        for entry in data or []:
            # Time logged against a project rather than a task has nothing to reconcile with
            task = entry.get("task")
            if not task:
                continue
            records.append(RemoteRecord(
                date=pendulum.parse(entry["date"]).date(),
                task_id=task["id"],
                record_id=str(entry["id"]),
                duration=entry.get("time", 0),
            ))
        return records

    def _body(self, record: TimeRecord) -> Dict[str, Any]:
        return {
            "time": record.duration_seconds,
            "date": record.date.isoformat(),
            "user": record.user_id,
        }

    def create_record(self, task_ref: str, record: TimeRecord) -> None:
        self._request("POST", f"/tasks/{task_ref}/time", json=self._body(record))

    def update_record(self, task_ref: str, record: TimeRecord) -> None:
        self._request("PUT", f"/tasks/{task_ref}/time", json=self._body(record))
