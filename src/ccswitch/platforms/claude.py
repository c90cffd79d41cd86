# Claude Code settings writer
import logging
from pathlib import Path
from typing import Any

from ccswitch.config import get_claude_settings_path
from ccswitch.models import ClaudeProviderConfig, ConfigWriter, ProviderConfig
from ccswitch.platforms.base import copy_present, read_json_file, write_json_file

logger = logging.getLogger(__name__)

# ABOUTME: The only env keys a provider switch may touch
CLAUDE_ENV_KEYS = (
    "ANTHROPIC_AUTH_TOKEN",
    "ANTHROPIC_BASE_URL",
    "ANTHROPIC_MODEL",
    "ANTHROPIC_DEFAULT_HAIKU_MODEL",
    "ANTHROPIC_DEFAULT_OPUS_MODEL",
    "ANTHROPIC_DEFAULT_SONNET_MODEL",
)


class ClaudeWriter(ConfigWriter):
    """Writer for Claude Code (~/.claude/settings.json).

    ABOUTME: Merges provider env into the settings 'env' object
    ABOUTME: Preserves every other setting (permissions, hooks, other env keys)
    """

    def __init__(self, settings_path: Path | None = None) -> None:
        """Initialize writer with optional custom settings path.

        ABOUTME: Defaults to ~/.claude/settings.json if not provided
        """
        self._settings_path = settings_path if settings_path else get_claude_settings_path()

    @property
    def name(self) -> str:
        """Human-readable tool name."""
        return "Claude Code"

    @property
    def paths(self) -> list[Path]:
        return [self._settings_path]

    def read_settings(self) -> dict[str, Any]:
        """Current Claude settings, {} if the file is missing or unreadable."""
        return read_json_file(self._settings_path)

    def apply(self, config: ProviderConfig) -> None:
        """Copy allow-listed ANTHROPIC_* values into settings.env.

        ABOUTME: Additive merge, a key missing from the provider keeps its current value
        """
        if not isinstance(config, ClaudeProviderConfig):
            raise TypeError(f"{self.name} cannot apply {type(config).__name__}")

        settings = self.read_settings()
        env = settings.get("env")
        if not isinstance(env, dict):
            env = {}
        settings["env"] = env

        copied = copy_present(config.env or {}, env, CLAUDE_ENV_KEYS)

        write_json_file(self._settings_path, settings)
        logger.info("Updated %s (%s)", self._settings_path, ", ".join(copied) or "no keys")
