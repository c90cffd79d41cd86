# Tests for path and environment configuration
import logging
from pathlib import Path

from ccswitch.config import (
    DATA_FILE_NAME,
    configure_logging,
    get_claude_settings_path,
    get_codex_auth_path,
    get_codex_config_path,
    get_data_dir,
    get_data_file,
    get_gemini_env_path,
    get_host,
    get_port,
)


def test_data_dir_from_env(monkeypatch, tmp_path):
    """Test $DATA_DIR overrides the default location."""
    monkeypatch.setenv("DATA_DIR", str(tmp_path))
    assert get_data_dir() == tmp_path
    assert get_data_file() == tmp_path / DATA_FILE_NAME


def test_data_dir_default(monkeypatch, tmp_path):
    """Test the default data dir is ~/.cc-switch."""
    monkeypatch.delenv("DATA_DIR", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    assert get_data_dir() == tmp_path / ".cc-switch"


def test_data_file_explicit_dir(tmp_path):
    """Test an explicit directory wins."""
    assert get_data_file(tmp_path) == tmp_path / "ccswitch-data.json"


def test_tool_paths():
    """Test the external config file locations."""
    home = Path("/home/user")
    assert get_claude_settings_path(home) == home / ".claude" / "settings.json"
    assert get_codex_auth_path(home) == home / ".codex" / "auth.json"
    assert get_codex_config_path(home) == home / ".codex" / "config.toml"
    assert get_gemini_env_path(home) == home / ".gemini" / ".env"


def test_host_and_port_defaults(monkeypatch):
    """Test defaults when HOST and PORT are unset."""
    monkeypatch.delenv("HOST", raising=False)
    monkeypatch.delenv("PORT", raising=False)
    assert get_host() == "127.0.0.1"
    assert get_port() == 3001


def test_host_and_port_from_env(monkeypatch):
    """Test HOST and PORT environment overrides."""
    monkeypatch.setenv("HOST", "0.0.0.0")
    monkeypatch.setenv("PORT", "8080")
    assert get_host() == "0.0.0.0"
    assert get_port() == 8080


def test_configure_logging_verbose(monkeypatch):
    """Test verbose logging selects DEBUG."""
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setattr(root, "level", logging.WARNING)

    configure_logging(verbose=True)

    assert root.level == logging.DEBUG
