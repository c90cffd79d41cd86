# Paths, environment and logging configuration for ccswitch
import logging
import os
import sys
from pathlib import Path

# ABOUTME: Data directory override, same variable name the web UI container uses
DATA_DIR_ENV = "DATA_DIR"

# ABOUTME: Aggregate store file name inside the data directory
DATA_FILE_NAME = "ccswitch-data.json"

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3001

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_data_dir() -> Path:
    """Return the directory holding the ccswitch data file.

    ABOUTME: $DATA_DIR if set, otherwise ~/.cc-switch
    ABOUTME: Directory may not exist yet, the store creates it on first write
    """
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".cc-switch"


def get_data_file(data_dir: Path | None = None) -> Path:
    return (data_dir or get_data_dir()) / DATA_FILE_NAME


def get_claude_settings_path(home: Path | None = None) -> Path:
    return (home or Path.home()) / ".claude" / "settings.json"


def get_codex_auth_path(home: Path | None = None) -> Path:
    return (home or Path.home()) / ".codex" / "auth.json"


def get_codex_config_path(home: Path | None = None) -> Path:
    return (home or Path.home()) / ".codex" / "config.toml"


def get_gemini_env_path(home: Path | None = None) -> Path:
    return (home or Path.home()) / ".gemini" / ".env"


def get_host() -> str:
    return os.environ.get("HOST") or DEFAULT_HOST


def get_port() -> int:
    """Resolve server port: $PORT > 3001."""
    port = os.environ.get("PORT")
    if port:
        return int(port)
    return DEFAULT_PORT


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging for CLI and server runs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )
