# Conversion between ccswitch models and their JSON dict form
from typing import Any

from ccswitch.models import (
    APP_IDS,
    ClaudeProviderConfig,
    CodexProviderConfig,
    GeminiProviderConfig,
    McpApps,
    McpServer,
    McpServerSpec,
    Prompt,
    Provider,
    ProviderConfig,
    Settings,
)

# ABOUTME: JSON keys owned by the dataclass fields, everything else lands in extra
_PROVIDER_KEYS = {"id", "name", "settingsConfig", "websiteUrl", "notes", "category", "createdAt"}
_MCP_KEYS = {"id", "name", "server", "enabled", "apps", "description", "homepage", "docs", "tags"}
_PROMPT_KEYS = {"id", "name", "content", "enabled", "description", "createdAt", "updatedAt"}


def _put(result: dict[str, Any], key: str, value: Any) -> None:
    if value is not None:
        result[key] = value


def provider_config_from_dict(app: str, data: dict[str, Any] | None) -> ProviderConfig:
    """Build the app-specific settingsConfig variant.

    ABOUTME: Never validates contents, codex auth/config are checked at write time
    ABOUTME: Unknown keys are kept in extra so nothing is lost on round-trip
    """
    data = dict(data or {})

    if app == "claude":
        env = data.pop("env", None)
        return ClaudeProviderConfig(env=env, extra=data)
    elif app == "codex":
        auth = data.pop("auth", None)
        config = data.pop("config", None)
        return CodexProviderConfig(auth=auth, config=config, extra=data)
    elif app == "gemini":
        env = data.pop("env", None)
        raw_env = data.pop("rawEnv", None)
        return GeminiProviderConfig(env=env, raw_env=raw_env, extra=data)
    else:
        raise ValueError(f"Unknown app '{app}'. Must be one of: {', '.join(APP_IDS)}.")


def provider_config_to_dict(config: ProviderConfig) -> dict[str, Any]:
    result: dict[str, Any] = dict(config.extra)

    if isinstance(config, ClaudeProviderConfig):
        _put(result, "env", config.env)
    elif isinstance(config, CodexProviderConfig):
        _put(result, "auth", config.auth)
        _put(result, "config", config.config)
    elif isinstance(config, GeminiProviderConfig):
        _put(result, "env", config.env)
        _put(result, "rawEnv", config.raw_env)

    return result


def provider_from_dict(app: str, data: dict[str, Any]) -> Provider:
    """Convert a provider JSON object to a Provider.

    ABOUTME: Requires 'name', id defaults to "" for not-yet-stored providers
    """
    if "name" not in data:
        raise ValueError("Provider missing required 'name' field")

    settings_config = data.get("settingsConfig") or {}
    if not isinstance(settings_config, dict):
        raise ValueError("Provider 'settingsConfig' must be an object")

    return Provider(
        id=data.get("id", ""),
        name=data["name"],
        settings_config=provider_config_from_dict(app, settings_config),
        website_url=data.get("websiteUrl"),
        notes=data.get("notes"),
        category=data.get("category") or "custom",
        created_at=data.get("createdAt"),
        extra={k: v for k, v in data.items() if k not in _PROVIDER_KEYS},
    )


def provider_to_dict(provider: Provider) -> dict[str, Any]:
    result: dict[str, Any] = {
        "id": provider.id,
        "name": provider.name,
        "settingsConfig": provider_config_to_dict(provider.settings_config),
        "category": provider.category,
    }
    _put(result, "websiteUrl", provider.website_url)
    _put(result, "notes", provider.notes)
    _put(result, "createdAt", provider.created_at)
    result.update(provider.extra)
    return result


def server_spec_from_dict(name: str, data: dict[str, Any]) -> McpServerSpec:
    """Convert a server dict to McpServerSpec.

    ABOUTME: Validates required command field for stdio servers
    ABOUTME: Supports both stdio and HTTP server types, defaults to stdio
    """
    server_type = data.get("type", "stdio")

    if server_type == "stdio":
        if not data.get("command"):
            raise ValueError(f"Server '{name}' missing required 'command' field")

        return McpServerSpec(
            type="stdio",
            command=data["command"],
            args=data.get("args"),
            env=data.get("env"),
        )
    elif server_type == "http":
        if not data.get("url"):
            raise ValueError(f"Server '{name}' missing required 'url' field for http type")

        return McpServerSpec(
            type="http",
            url=data["url"],
            headers=data.get("headers"),
        )
    else:
        raise ValueError(
            f"Server '{name}' has invalid type '{server_type}'. Must be 'stdio' or 'http'."
        )


def server_spec_to_dict(spec: McpServerSpec) -> dict[str, Any]:
    result: dict[str, Any] = {"type": spec.type}

    if spec.type == "stdio":
        result["command"] = spec.command
        _put(result, "args", spec.args)
        _put(result, "env", spec.env)
    elif spec.type == "http":
        result["url"] = spec.url
        _put(result, "headers", spec.headers)

    return result


def mcp_server_from_dict(data: dict[str, Any]) -> McpServer:
    name = data.get("name") or data.get("id", "")
    apps = data.get("apps") or {}

    return McpServer(
        id=data.get("id", ""),
        name=name,
        server=server_spec_from_dict(name, data.get("server") or {}),
        enabled=bool(data.get("enabled", True)),
        apps=McpApps(
            claude=bool(apps.get("claude", False)),
            codex=bool(apps.get("codex", False)),
            gemini=bool(apps.get("gemini", False)),
        ),
        description=data.get("description"),
        homepage=data.get("homepage"),
        docs=data.get("docs"),
        tags=data.get("tags"),
        extra={k: v for k, v in data.items() if k not in _MCP_KEYS},
    )


def mcp_server_to_dict(server: McpServer) -> dict[str, Any]:
    result: dict[str, Any] = {
        "id": server.id,
        "name": server.name,
        "enabled": server.enabled,
        "apps": {
            "claude": server.apps.claude,
            "codex": server.apps.codex,
            "gemini": server.apps.gemini,
        },
        "server": server_spec_to_dict(server.server),
    }
    _put(result, "description", server.description)
    _put(result, "homepage", server.homepage)
    _put(result, "docs", server.docs)
    _put(result, "tags", server.tags)
    result.update(server.extra)
    return result


def prompt_from_dict(data: dict[str, Any]) -> Prompt:
    if "name" not in data:
        raise ValueError("Prompt missing required 'name' field")

    return Prompt(
        id=data.get("id", ""),
        name=data["name"],
        content=data.get("content") or "",
        enabled=bool(data.get("enabled", False)),
        description=data.get("description"),
        created_at=data.get("createdAt"),
        updated_at=data.get("updatedAt"),
        extra={k: v for k, v in data.items() if k not in _PROMPT_KEYS},
    )


def prompt_to_dict(prompt: Prompt) -> dict[str, Any]:
    result: dict[str, Any] = {
        "id": prompt.id,
        "name": prompt.name,
        "content": prompt.content,
        "enabled": prompt.enabled,
    }
    _put(result, "description", prompt.description)
    _put(result, "createdAt", prompt.created_at)
    _put(result, "updatedAt", prompt.updated_at)
    result.update(prompt.extra)
    return result


def settings_from_dict(data: dict[str, Any]) -> Settings:
    defaults = Settings()
    return Settings(
        language=data.get("language", defaults.language),
        theme=data.get("theme", defaults.theme),
        auto_sync=bool(data.get("autoSync", defaults.auto_sync)),
    )


def settings_to_dict(settings: Settings) -> dict[str, Any]:
    return {
        "language": settings.language,
        "theme": settings.theme,
        "autoSync": settings.auto_sync,
    }
