# Codex CLI auth/config writer
import json
import logging
from pathlib import Path
from typing import Any

from ccswitch.config import get_codex_auth_path, get_codex_config_path
from ccswitch.models import CodexProviderConfig, ConfigWriter, ProviderConfig
from ccswitch.platforms.base import (
    parse_toml_text,
    read_json_file,
    read_toml_file,
    write_json_file,
    write_toml_file,
)

logger = logging.getLogger(__name__)


def parse_auth(auth: dict[str, Any] | str | None) -> dict[str, Any]:
    """Normalize a provider's auth field to a dict.

    ABOUTME: Accepts a mapping or JSON object text (as typed into the UI)
    ABOUTME: This is the only place codex auth JSON is validated

    Raises:
        ValueError: If auth is text that is not a JSON object
    """
    if auth is None or auth == "":
        return {}
    if isinstance(auth, dict):
        return auth

    try:
        parsed = json.loads(auth)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in codex auth: {e}") from e
    if not isinstance(parsed, dict):
        raise ValueError("Codex auth must be a JSON object")
    return parsed


class CodexWriter(ConfigWriter):
    """Writer for Codex CLI (~/.codex/auth.json + ~/.codex/config.toml).

    ABOUTME: Shallow-merges provider auth into auth.json
    ABOUTME: Shallow-merges provider TOML text into config.toml (top-level keys replaced)
    """

    def __init__(self, auth_path: Path | None = None, config_path: Path | None = None) -> None:
        self._auth_path = auth_path if auth_path else get_codex_auth_path()
        self._config_path = config_path if config_path else get_codex_config_path()

    @property
    def name(self) -> str:
        """Human-readable tool name."""
        return "Codex CLI"

    @property
    def paths(self) -> list[Path]:
        return [self._auth_path, self._config_path]

    def read_auth(self) -> dict[str, Any]:
        return read_json_file(self._auth_path)

    def read_config(self) -> dict[str, Any]:
        return read_toml_file(self._config_path)

    def apply(self, config: ProviderConfig) -> None:
        """Merge provider auth and config into the Codex files.

        ABOUTME: Both inputs are parsed before anything is written
        ABOUTME: Keys set to null in auth are skipped, not cleared

        Raises:
            ValueError: If auth JSON or config TOML is invalid
        """
        if not isinstance(config, CodexProviderConfig):
            raise TypeError(f"{self.name} cannot apply {type(config).__name__}")

        new_auth = {k: v for k, v in parse_auth(config.auth).items() if v is not None}
        new_config = parse_toml_text(config.config, "codex config") if config.config else {}

        current_config = self.read_config()
        current_config.update(new_config)
        write_toml_file(self._config_path, current_config)

        current_auth = self.read_auth()
        current_auth.update(new_auth)
        write_json_file(self._auth_path, current_auth)

        logger.info(
            "Updated %s (%d keys) and %s (%d keys)",
            self._auth_path, len(new_auth), self._config_path, len(new_config),
        )
