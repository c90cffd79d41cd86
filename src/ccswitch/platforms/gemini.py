# Gemini CLI env writer
import logging
from pathlib import Path
from typing import Any

from ccswitch.config import get_gemini_env_path
from ccswitch.models import ConfigWriter, GeminiProviderConfig, ProviderConfig
from ccswitch.platforms.base import copy_present, read_env_file, update_env_file
from ccswitch.utils.env import parse_env_text

logger = logging.getLogger(__name__)

GEMINI_ENV_KEYS = (
    "GEMINI_API_KEY",
    "GOOGLE_GEMINI_BASE_URL",
    "GEMINI_MODEL",
)


class GeminiWriter(ConfigWriter):
    """Writer for Gemini CLI (~/.gemini/.env).

    ABOUTME: Provider values come from rawEnv text, overridden by the env mapping
    ABOUTME: Only the Gemini keys are rewritten, every other line in the file is kept
    """

    def __init__(self, env_path: Path | None = None) -> None:
        self._env_path = env_path if env_path else get_gemini_env_path()

    @property
    def name(self) -> str:
        """Human-readable tool name."""
        return "Gemini CLI"

    @property
    def paths(self) -> list[Path]:
        return [self._env_path]

    def read_env(self) -> dict[str, str]:
        return read_env_file(self._env_path)

    def apply(self, config: ProviderConfig) -> None:
        if not isinstance(config, GeminiProviderConfig):
            raise TypeError(f"{self.name} cannot apply {type(config).__name__}")

        source = parse_env_text(config.raw_env or "")
        source.update(config.env or {})

        updates: dict[str, Any] = {}
        copied = copy_present(source, updates, GEMINI_ENV_KEYS)

        update_env_file(self._env_path, updates)
        logger.info("Updated %s (%s)", self._env_path, ", ".join(copied) or "no keys")
