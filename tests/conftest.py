"""
Shared pytest fixtures for hamster-sync tests.
"""
import sqlite3

import pendulum
import pytest

from hamster_sync.core.plugin import RemotePlugin
from hamster_sync.models import ActivityRecord, RemoteUser


SCHEMA = """
CREATE TABLE categories (id INTEGER PRIMARY KEY, name TEXT);
CREATE TABLE activities (id INTEGER PRIMARY KEY, name TEXT, category_id INTEGER);
CREATE TABLE facts (
    id INTEGER PRIMARY KEY,
    activity_id INTEGER,
    start_time TIMESTAMP,
    end_time TIMESTAMP,
    description TEXT
);
"""


class HamsterDb:
    """Builds a Hamster-shaped SQLite database for tests."""

    def __init__(self, path):
        self.path = path
        self.connection = sqlite3.connect(path)
        self.connection.executescript(SCHEMA)
        self.activities = {}
        self.categories = {}

    def _category_id(self, name):
        if name not in self.categories:
            cursor = self.connection.execute("INSERT INTO categories (name) VALUES (?)", (name,))
            self.categories[name] = cursor.lastrowid
        return self.categories[name]

    def _activity_id(self, name, category):
        key = (name, category)
        if key not in self.activities:
            cursor = self.connection.execute(
                "INSERT INTO activities (name, category_id) VALUES (?, ?)",
                (name, self._category_id(category)))
            self.activities[key] = cursor.lastrowid
        return self.activities[key]

    def add_fact(self, start, end=None, description="", activity="coding", category="Work"):
        cursor = self.connection.execute(
            "INSERT INTO facts (activity_id, start_time, end_time, description) VALUES (?, ?, ?, ?)",
            (self._activity_id(activity, category), start, end, description))
        self.connection.commit()
        return cursor.lastrowid


@pytest.fixture
def hamster_db(tmp_path):
    """
    An empty Hamster database in a temp directory.
    """
    db = HamsterDb(tmp_path / "hamster.db")
    yield db
    db.connection.close()


@pytest.fixture
def config_file(tmp_path, hamster_db):
    """
    A config file pointing at the temp Hamster database, in UTC.
    """
    path = tmp_path / "config.toml"
    path.write_text(f"""
timezone = "UTC"
database = "{hamster_db.path}"

[remote]
plugin = "everhour"
task_prefix = "as:"

[remote.config]
base_url = "https://everhour.test"
""")
    return path


@pytest.fixture
def utc():
    return pendulum.timezone("UTC")


@pytest.fixture
def fixed_now():
    """
    A fixed "now" for running facts.
    """
    return pendulum.datetime(2024, 3, 6, 12, 0, 0, tz="UTC")


def make_record(id=1, start="2024-03-04 09:00:00", end="2024-03-04 09:30:00",
                description="", activity="coding", category="Work"):
    return ActivityRecord(
        id=id,
        start_time=pendulum.parse(start, tz="UTC"),
        end_time=pendulum.parse(end, tz="UTC") if end else None,
        description=description,
        activity_name=activity,
        category=category,
    )


@pytest.fixture
def record():
    return make_record


class FakeRemote(RemotePlugin):
    """Keeps track of every call instead of talking to a real service."""

    def __init__(self, records=None, user=None):
        super().__init__("fake", "fake", {})
        self.records = records or []
        self.user = user or RemoteUser(id=7, name="Test User", email="test@example.com")
        self.calls = []

    def current_user(self):
        self.calls.append(("current_user",))
        return self.user

    def list_user_records(self, user_id, from_date, to_date):
        self.calls.append(("list_user_records", user_id, from_date, to_date))
        return list(self.records)

    def create_record(self, task_ref, record):
        self.calls.append(("create_record", task_ref, record))

    def update_record(self, task_ref, record):
        self.calls.append(("update_record", task_ref, record))

    def mutations(self):
        return [call for call in self.calls if call[0] in ("create_record", "update_record")]


@pytest.fixture
def fake_remote():
    return FakeRemote
