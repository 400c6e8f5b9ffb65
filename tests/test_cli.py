"""
CLI tests for the hamster-sync commands.
"""
import pytest
from typer.testing import CliRunner

from hamster_sync.core import Workspace
from hamster_sync_cli.main import cli


runner = CliRunner()


@pytest.fixture
def env(config_file):
    return {"HAMSTER_SYNC_CONFIG": str(config_file), "EVERHOUR_API_TOKEN": ""}


@pytest.fixture
def week_of_facts(hamster_db):
    hamster_db.add_fact("2024-03-04 09:00:00", "2024-03-04 09:30:00",
                        "[Login page](https://app.asana.com/0/1/111/f)\n+ layout\n+ styles")
    hamster_db.add_fact("2024-03-04 10:00:00", "2024-03-04 10:45:00",
                        "[Login page](https://app.asana.com/0/1/111/f)\n+ styles\n+ review")
    hamster_db.add_fact("2024-03-05 12:00:00", "2024-03-05 13:00:00",
                        "+ lunch", activity="break", category="Private")
    return hamster_db


class TestInfoCommand:

    def test_shows_configuration(self, env, hamster_db):
        result = runner.invoke(cli, ["info"], env=env)

        assert result.exit_code == 0
        assert "hamster-sync version:" in result.stdout
        assert str(hamster_db.path) in result.stdout
        assert "Timezone: UTC" in result.stdout
        assert "Remote: everhour" in result.stdout

    def test_missing_database_is_flagged(self, env, tmp_path):
        result = runner.invoke(cli, ["--db", str(tmp_path / "nope.db"), "info"], env=env)

        assert result.exit_code == 0
        assert "(not found)" in result.stdout


class TestFactsCommand:

    def test_lists_facts(self, env, week_of_facts):
        result = runner.invoke(cli, ["facts", "--from", "2024-03-04", "--to", "2024-03-05"], env=env)

        assert result.exit_code == 0
        assert "coding" in result.stdout
        assert "break" in result.stdout

    def test_category_filter(self, env, week_of_facts):
        result = runner.invoke(cli, ["facts", "--from", "2024-03-04", "--to", "2024-03-05",
                                     "--category", "Private"], env=env)

        assert result.exit_code == 0
        assert "break" in result.stdout
        assert "coding" not in result.stdout

    def test_missing_database(self, env, tmp_path):
        result = runner.invoke(cli, ["--db", str(tmp_path / "nope.db"), "facts"], env=env)

        assert result.exit_code == 1
        assert "not found" in result.output


class TestTasksCommand:

    def test_aggregates_per_task(self, env, week_of_facts):
        result = runner.invoke(cli, ["tasks", "--from", "2024-03-04", "--to", "2024-03-05"], env=env)

        assert result.exit_code == 0
        assert "111" in result.stdout
        assert "1h 15m" in result.stdout
        assert "TOTAL" in result.stdout
        assert "2h 15m" in result.stdout
        assert "Fact 3 has no task" in result.output

    def test_invalid_date(self, env, week_of_facts):
        result = runner.invoke(cli, ["tasks", "--from", "not-a-date-xyz123"], env=env)

        assert result.exit_code == 1
        assert "Invalid date string" in result.output


class TestSyncCommand:

    def test_requires_api_token(self, env, week_of_facts):
        result = runner.invoke(cli, ["sync", "--from", "2024-03-04", "--to", "2024-03-05"], env=env)

        assert result.exit_code == 1
        assert "API token" in result.output

    def test_dry_run(self, env, week_of_facts, fake_remote, monkeypatch):
        remote = fake_remote()
        monkeypatch.setattr(Workspace, "remote", lambda self, overrides=None: remote)

        result = runner.invoke(cli, ["sync", "--from", "2024-03-04", "--to", "2024-03-05",
                                     "--dry-run"], env=env)

        assert result.exit_code == 0
        assert "Syncing as Test User" in result.stdout
        assert "as:111" in result.stdout
        assert "would add" in result.stdout
        assert "would skip - missing task id" in result.stdout
        assert "Dry run, nothing was changed." in result.stdout
        assert remote.mutations() == []

    def test_apply_aborts_on_unlinked_time(self, env, week_of_facts, fake_remote, monkeypatch):
        remote = fake_remote()
        monkeypatch.setattr(Workspace, "remote", lambda self, overrides=None: remote)

        result = runner.invoke(cli, ["sync", "--from", "2024-03-04", "--to", "2024-03-05"], env=env)

        assert result.exit_code == 1
        assert "2024-03-05" in result.output
        assert "without a task id" in result.output
        assert [call[1] for call in remote.mutations()] == ["as:111"]

    def test_apply_with_category(self, env, week_of_facts, fake_remote, monkeypatch):
        remote = fake_remote()
        monkeypatch.setattr(Workspace, "remote", lambda self, overrides=None: remote)

        result = runner.invoke(cli, ["sync", "--from", "2024-03-04", "--to", "2024-03-05",
                                     "--category", "Work"], env=env)

        assert result.exit_code == 0
        assert "added" in result.stdout
        assert len(remote.mutations()) == 1
        assert remote.mutations()[0][2].duration_seconds == 75 * 60


class TestConfigCommand:

    def test_creates_config_from_template(self, tmp_path, monkeypatch):
        path = tmp_path / "new" / "config.toml"

        def mock_run(*args, **kwargs):
            return type('obj', (object,), {'returncode': 0})

        monkeypatch.setattr("subprocess.run", mock_run)

        result = runner.invoke(cli, ["config"], env={"HAMSTER_SYNC_CONFIG": str(path)})

        assert result.exit_code == 0
        assert path.exists()
        assert "[remote]" in path.read_text()
        assert "No changes detected." in result.stdout
