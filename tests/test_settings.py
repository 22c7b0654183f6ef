"""
==============================================================================
Settings Tests
==============================================================================

Tests for configuration loading and validation.

==============================================================================
"""

import pytest
from pydantic import ValidationError

from imei_scanner.config.settings import DuplicateHandling, Settings


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestDefaults:
    """Tests for default values."""

    def test_defaults(self):
        """Test scanning and sync defaults."""
        settings = make_settings(google_sheets_url="")
        assert settings.duplicate_handling is DuplicateHandling.BLOCK
        assert settings.scan_speed_ms == 100
        assert settings.sheet_name == "scanning manu"
        assert settings.recent_limit == 25
        assert settings.sync_enabled is False


class TestValidation:
    """Tests for field validation."""

    @pytest.mark.parametrize("value", ["allow", "ALLOW", " Allow "])
    def test_duplicate_handling_normalized(self, value: str):
        """Test the policy accepts any casing."""
        assert make_settings(duplicate_handling=value).duplicate_handling is DuplicateHandling.ALLOW

    def test_duplicate_handling_invalid(self):
        """Test an unknown policy is rejected."""
        with pytest.raises(ValidationError):
            make_settings(duplicate_handling="sometimes")

    def test_duplicate_handling_from_env(self, monkeypatch):
        """Test the policy is read from the environment."""
        monkeypatch.setenv("DUPLICATE_HANDLING", "allow")
        assert make_settings().duplicate_handling is DuplicateHandling.ALLOW

    def test_sheets_url_must_be_http(self):
        """Test a non-http sync URL is rejected."""
        with pytest.raises(ValidationError):
            make_settings(google_sheets_url="ftp://example.com")

    def test_sheets_url_enables_sync(self):
        """Test configuring the URL enables sync."""
        settings = make_settings(google_sheets_url=" https://script.google.com/macros/s/x/exec ")
        assert settings.google_sheets_url == "https://script.google.com/macros/s/x/exec"
        assert settings.sync_enabled is True

    def test_scan_speed_bounds(self):
        """Test the frame interval must be in range."""
        with pytest.raises(ValidationError):
            make_settings(scan_speed_ms=5)

    def test_unknown_env_defaults_to_development(self):
        """Test an unknown environment falls back to development."""
        assert make_settings(app_env="qa").app_env == "development"


class TestHelpers:
    """Tests for derived values."""

    def test_cors_origins_list(self):
        """Test CORS origins parse from JSON."""
        assert make_settings(cors_origins='["http://a", "http://b"]').cors_origins_list == ["http://a", "http://b"]
        assert make_settings(cors_origins="not json").cors_origins_list == ["*"]

    def test_database_path(self):
        """Test the SQLite file path is extracted."""
        assert str(make_settings(database_url="sqlite:///./storage/db/scans.db").get_database_path()) == "storage/db/scans.db"
        assert make_settings(database_url="sqlite://").get_database_path() is None

    def test_export_path_created(self, tmp_path):
        """Test the export directory is created on access."""
        target = tmp_path / "out"
        path = make_settings(export_directory=str(target)).export_path
        assert path.is_dir()

    def test_public_view(self):
        """Test the client view carries no server internals."""
        view = make_settings(google_sheets_url="").public_view()
        assert view["duplicate_handling"] == "block"
        assert "database_url" not in view
