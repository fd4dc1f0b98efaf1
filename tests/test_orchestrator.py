"""
Tests for configuration and the component factory.
"""

import pytest

from conftest import InMemoryRemoteProvider, make_draft, make_expense, run
from expense_tracker.config import (
    AppSettings,
    LocalStorageSettings,
    get_settings,
    is_remote_configured,
    validate_all_settings,
)
from expense_tracker.models import ActivityEventType, StorageMode
from expense_tracker.orchestrator import create_app_components


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    for name in (
        "GOOGLE_SHEETS_CREDENTIALS_PATH",
        "GOOGLE_SHEETS_SPREADSHEET_ID",
        "LOCAL_STORAGE_DATA_DIR",
        "USER_ID",
        "DEBUG_MODE",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    """Tests for pydantic-settings configuration."""

    def test_local_defaults(self):
        settings = LocalStorageSettings()
        assert settings.expenses_key == "expense-tracker-data"
        assert settings.categories_key == "expense-tracker-categories"
        assert settings.mode_key == "expense-tracker-storage-mode"

    def test_local_env_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LOCAL_STORAGE_DATA_DIR", str(tmp_path))
        assert LocalStorageSettings().data_dir == tmp_path

    def test_debug_mode_forces_debug_logging(self, monkeypatch):
        """Test that debug_mode overrides the configured log level."""
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        assert AppSettings().effective_log_level == "WARNING"

        monkeypatch.setenv("DEBUG_MODE", "true")
        assert AppSettings().effective_log_level == "DEBUG"

    def test_remote_not_configured(self):
        assert not is_remote_configured()
        assert validate_all_settings()["google_sheets"] is False

    def test_remote_missing_credentials_file(self, monkeypatch, tmp_path):
        monkeypatch.setenv("GOOGLE_SHEETS_CREDENTIALS_PATH", str(tmp_path / "missing.json"))
        monkeypatch.setenv("GOOGLE_SHEETS_SPREADSHEET_ID", "abc123")
        with pytest.warns(UserWarning):
            assert not is_remote_configured()

    def test_remote_placeholder_id(self, monkeypatch, tmp_path):
        credentials = tmp_path / "credentials.json"
        credentials.write_text("{}", encoding="utf-8")
        monkeypatch.setenv("GOOGLE_SHEETS_CREDENTIALS_PATH", str(credentials))
        monkeypatch.setenv("GOOGLE_SHEETS_SPREADSHEET_ID", "your-placeholder-id")
        assert not is_remote_configured()

    def test_remote_configured(self, monkeypatch, tmp_path):
        credentials = tmp_path / "credentials.json"
        credentials.write_text("{}", encoding="utf-8")
        monkeypatch.setenv("GOOGLE_SHEETS_CREDENTIALS_PATH", str(credentials))
        monkeypatch.setenv("GOOGLE_SHEETS_SPREADSHEET_ID", "abc123")
        assert is_remote_configured()


class TestCreateAppComponents:
    """Tests for the composition root."""

    def test_local_only(self, tmp_path):
        components = create_app_components(data_dir=tmp_path, use_remote=False)
        assert components.mode_selector.mode == StorageMode.LOCAL
        assert not components.context.remote_available

        run(components.load())
        assert components.expenses.expenses == []
        assert len(components.categories.categories) == 8

    def test_unconfigured_remote_falls_back_to_local(self, tmp_path):
        components = create_app_components(data_dir=tmp_path)
        assert components.mode_selector.mode == StorageMode.LOCAL
        assert not components.mode_selector.set_mode(StorageMode.REMOTE)

    def test_remote_is_default_when_available(self, tmp_path):
        components = create_app_components(data_dir=tmp_path, remote=InMemoryRemoteProvider())
        assert components.mode_selector.mode == StorageMode.REMOTE
        assert not components.context.uses_remote

    def test_sign_in_switches_scope(self, tmp_path):
        """Test that signing in reloads from the user's remote tables."""
        remote = InMemoryRemoteProvider()
        remote.expenses["user-1"] = [make_expense(expense_id="cloud")]
        components = create_app_components(data_dir=tmp_path, remote=remote)
        run(components.load())
        assert components.expenses.expenses == []

        run(components.sign_in("user-1"))
        assert [e.id for e in components.expenses.expenses] == ["cloud"]

        run(components.sign_out())
        assert components.expenses.expenses == []

    def test_switch_mode_reloads(self, tmp_path):
        remote = InMemoryRemoteProvider()
        remote.expenses["user-1"] = [make_expense(expense_id="cloud")]
        components = create_app_components(user_id="user-1", data_dir=tmp_path, remote=remote)
        run(components.load())

        assert run(components.switch_mode(StorageMode.LOCAL))
        assert components.expenses.expenses == []
        event = components.activity_logger.last_event
        assert event.event_type == ActivityEventType.STORAGE_MODE_CHANGED

        run(components.expenses.add(make_draft()))
        assert run(components.switch_mode(StorageMode.REMOTE))
        assert [e.id for e in components.expenses.expenses] == ["cloud"]

    def test_mode_preference_survives_restart(self, tmp_path):
        remote = InMemoryRemoteProvider()
        first = create_app_components(data_dir=tmp_path, remote=remote)
        run(first.switch_mode(StorageMode.LOCAL))

        second = create_app_components(data_dir=tmp_path, remote=remote)
        assert second.mode_selector.mode == StorageMode.LOCAL


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
