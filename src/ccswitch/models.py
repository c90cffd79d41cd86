# Core data models for ccswitch
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Protocol, Union, get_args, runtime_checkable

# ABOUTME: The three CLI tools whose config files we rewrite
AppId = Literal["claude", "codex", "gemini"]
APP_IDS: tuple[str, ...] = get_args(AppId)

CATEGORIES = ("official", "third_party", "custom")


@dataclass
class ClaudeProviderConfig:
    """settingsConfig variant for Claude Code providers.

    ABOUTME: env holds ANTHROPIC_* variables copied into ~/.claude/settings.json
    ABOUTME: extra keeps UI-only keys (rawJson, baseUrl, model, ...) verbatim
    """
    env: dict[str, str] | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class CodexProviderConfig:
    """settingsConfig variant for Codex providers.

    ABOUTME: auth is a mapping or JSON text destined for ~/.codex/auth.json
    ABOUTME: config is raw TOML text merged into ~/.codex/config.toml
    """
    auth: dict[str, Any] | str | None = None
    config: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class GeminiProviderConfig:
    """settingsConfig variant for Gemini providers.

    ABOUTME: raw_env is .env text, env is an explicit mapping (wins on conflict)
    """
    env: dict[str, str] | None = None
    raw_env: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


ProviderConfig = Union[ClaudeProviderConfig, CodexProviderConfig, GeminiProviderConfig]


@dataclass
class Provider:
    """One credential/config profile for one app.

    ABOUTME: extra preserves top-level keys we do not model (icon, meta, ...)
    """
    id: str
    name: str
    settings_config: ProviderConfig
    website_url: str | None = None
    notes: str | None = None
    category: str = "custom"
    created_at: int | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class McpServerSpec:
    """How to reach an MCP server.

    ABOUTME: Uses frozen dataclass, type never changes after creation
    ABOUTME: stdio servers need command, http servers need url
    """
    type: Literal["stdio", "http"]
    command: str | None = None
    args: list[str] | None = None
    env: dict[str, str] | None = None
    url: str | None = None
    headers: dict[str, str] | None = None


@dataclass
class McpApps:
    """Per-app enablement of an MCP server."""
    claude: bool = False
    codex: bool = False
    gemini: bool = False


@dataclass
class McpServer:
    id: str
    name: str
    server: McpServerSpec
    enabled: bool = True
    apps: McpApps = field(default_factory=McpApps)
    description: str | None = None
    homepage: str | None = None
    docs: str | None = None
    tags: list[str] | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class Prompt:
    id: str
    name: str
    content: str
    enabled: bool = False
    description: str | None = None
    created_at: int | None = None
    updated_at: int | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class Settings:
    language: str = "zh"
    theme: str = "system"
    auto_sync: bool = False


@runtime_checkable
class ConfigWriter(Protocol):
    """Protocol for per-app external config writers.

    ABOUTME: Each writer owns one tool's on-disk files
    ABOUTME: apply() performs an additive merge, never clears fields
    """

    @property
    def name(self) -> str:
        """Human-readable tool name."""
        ...

    @property
    def paths(self) -> list[Path]:
        """Files this writer reads and rewrites."""
        ...

    def apply(self, config: ProviderConfig) -> None:
        """Merge a provider's settings into the tool's files."""
        ...
