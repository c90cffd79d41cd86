# Aggregate store: providers, MCP servers, prompts and settings in one JSON file
import copy
import dataclasses
import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from ccswitch.convert import (
    mcp_server_from_dict,
    mcp_server_to_dict,
    prompt_from_dict,
    prompt_to_dict,
    provider_from_dict,
    provider_to_dict,
    settings_from_dict,
    settings_to_dict,
)
from ccswitch.models import APP_IDS, McpServer, Prompt, Provider, Settings
from ccswitch.platforms.base import read_json_file, write_json_file
from ccswitch.utils import create_backup, get_backup_dir, new_id, now_ms

logger = logging.getLogger(__name__)

# ABOUTME: Type alias for the raw aggregate as stored on disk
Aggregate = dict[str, Any]


def default_aggregate() -> Aggregate:
    """Empty-but-valid aggregate: every app present, empty collections, default settings."""
    return {
        **{app: {"providers": {}, "current": ""} for app in APP_IDS},
        "mcp": {"servers": {}},
        "prompts": {app: {} for app in APP_IDS},
        "settings": settings_to_dict(Settings()),
    }


def _section(parent: dict[str, Any], key: str) -> dict[str, Any]:
    """Return parent[key] as an object, replacing a missing or malformed value with {}."""
    value = parent.get(key)
    if not isinstance(value, dict):
        if value is not None:
            logger.warning(
                "Replacing malformed '%s' section (%s) with an empty one", key, type(value).__name__
            )
        value = {}
        parent[key] = value
    return value


def _normalize(data: Aggregate) -> Aggregate:
    """Fill in any section missing from a stored aggregate.

    ABOUTME: Valid values are never altered, only absent keys are added
    ABOUTME: A section that is not an object (e.g. null from a hand-edited import) reads as empty
    """
    for app in APP_IDS:
        app_config = _section(data, app)
        _section(app_config, "providers")
        if not isinstance(app_config.get("current"), str):
            app_config["current"] = ""
    _section(_section(data, "mcp"), "servers")
    prompts = _section(data, "prompts")
    for app in APP_IDS:
        _section(prompts, app)
    settings = _section(data, "settings")
    for key, value in settings_to_dict(Settings()).items():
        settings.setdefault(key, value)
    return data


def _check_app(app: str) -> None:
    if app not in APP_IDS:
        raise ValueError(f"Unknown app '{app}'. Must be one of: {', '.join(APP_IDS)}.")


class ConfigStore:
    """Owner of the ccswitch aggregate.

    ABOUTME: Every read loads the file, every mutation is load -> change -> write
    ABOUTME: A lock serializes read-modify-write so concurrent requests can't lose updates
    ABOUTME: Missing or unreadable file reads as the default aggregate
    """

    def __init__(self, path: Path, backup_dir: Path | None = None) -> None:
        self._path = path
        self._backup_dir = backup_dir if backup_dir else get_backup_dir(path)
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Aggregate:
        if not self._path.exists():
            return default_aggregate()
        data = read_json_file(self._path)
        if not data:
            return default_aggregate()
        return _normalize(data)

    def save(self, data: Aggregate) -> None:
        write_json_file(self._path, data)

    @contextmanager
    def _transaction(self) -> Iterator[Aggregate]:
        """Yield the aggregate for mutation and write it back on success."""
        with self._lock:
            data = self.load()
            yield data
            self.save(data)

    def _backup(self) -> None:
        if self._path.exists():
            create_backup(self._path, self._backup_dir)

    # -- providers ---------------------------------------------------------

    def list_providers(self, app: str) -> dict[str, Provider]:
        """All providers of an app, keyed by id.

        ABOUTME: Records that fail conversion are logged and left out
        """
        _check_app(app)
        result: dict[str, Provider] = {}
        for provider_id, raw in self.load()[app]["providers"].items():
            try:
                result[provider_id] = provider_from_dict(app, raw)
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning("Skipping invalid %s provider %s: %s", app, provider_id, e)
        return result

    def get_provider(self, app: str, provider_id: str) -> Provider | None:
        _check_app(app)
        raw = self.load()[app]["providers"].get(provider_id)
        return provider_from_dict(app, raw) if raw is not None else None

    def get_current(self, app: str) -> str:
        _check_app(app)
        return self.load()[app]["current"] or ""

    def add_provider(self, app: str, provider: Provider) -> Provider:
        """Store a new provider under a freshly generated id.

        ABOUTME: id and createdAt are always assigned here, caller values are ignored
        """
        _check_app(app)
        stored = dataclasses.replace(provider, id=new_id(app), created_at=now_ms())
        with self._transaction() as data:
            data[app]["providers"][stored.id] = provider_to_dict(stored)
        logger.info("Added %s provider %s (%s)", app, stored.id, stored.name)
        return stored

    def update_provider(self, app: str, provider_id: str, changes: dict[str, Any]) -> Provider | None:
        """Shallow-merge changes into a provider.

        Returns:
            Updated Provider, or None if provider_id doesn't exist

        Raises:
            ValueError: If the merged record is not a valid provider
        """
        _check_app(app)
        with self._lock:
            if provider_id not in self.load()[app]["providers"]:
                return None
            with self._transaction() as data:
                providers = data[app]["providers"]
                merged = {**providers[provider_id], **changes, "id": provider_id}
                updated = provider_from_dict(app, merged)
                providers[provider_id] = provider_to_dict(updated)
        return updated

    def delete_provider(self, app: str, provider_id: str) -> bool:
        """Delete a provider, clearing the app's current pointer if it pointed here.

        Returns:
            True if the provider existed
        """
        _check_app(app)
        with self._transaction() as data:
            existed = data[app]["providers"].pop(provider_id, None) is not None
            if data[app]["current"] == provider_id:
                data[app]["current"] = ""
        return existed

    def switch_provider(self, app: str, provider_id: str) -> Provider | None:
        """Mark provider_id as the app's current provider.

        ABOUTME: No existence check, current is set even for an unknown id
        ABOUTME: Returns the provider if it exists so the caller can project it
        """
        _check_app(app)
        with self._transaction() as data:
            data[app]["current"] = provider_id
            raw = data[app]["providers"].get(provider_id)
        return provider_from_dict(app, raw) if raw is not None else None

    # -- MCP servers -------------------------------------------------------

    def list_mcp_servers(self) -> dict[str, McpServer]:
        result: dict[str, McpServer] = {}
        for server_id, raw in self.load()["mcp"]["servers"].items():
            try:
                result[server_id] = mcp_server_from_dict(raw)
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning("Skipping invalid MCP server %s: %s", server_id, e)
        return result

    def get_mcp_server(self, server_id: str) -> McpServer | None:
        raw = self.load()["mcp"]["servers"].get(server_id)
        return mcp_server_from_dict(raw) if raw is not None else None

    def add_mcp_server(self, server: McpServer) -> McpServer:
        stored = dataclasses.replace(server, id=new_id("mcp"))
        with self._transaction() as data:
            data["mcp"]["servers"][stored.id] = mcp_server_to_dict(stored)
        logger.info("Added MCP server %s (%s)", stored.id, stored.name)
        return stored

    def update_mcp_server(
        self,
        server_id: str,
        changes: dict[str, Any],
        check: Callable[[McpServer], None] | None = None,
    ) -> McpServer | None:
        """Shallow-merge changes into an MCP server.

        ABOUTME: A replacement 'server' without 'type' inherits the current type
        ABOUTME: check runs on the merged server before anything is written

        Raises:
            ValueError: If the change would alter server.type or the result is invalid
        """
        with self._lock:
            if server_id not in self.load()["mcp"]["servers"]:
                return None
            with self._transaction() as data:
                servers = data["mcp"]["servers"]
                existing = servers[server_id]
                current_type = (existing.get("server") or {}).get("type", "stdio")

                changes = dict(changes)
                if "server" in changes:
                    new_spec = dict(changes["server"] or {})
                    new_spec.setdefault("type", current_type)
                    if new_spec["type"] != current_type:
                        raise ValueError(
                            f"Server type cannot be changed from '{current_type}' to '{new_spec['type']}'"
                        )
                    changes["server"] = new_spec

                updated = mcp_server_from_dict({**existing, **changes, "id": server_id})
                if check is not None:
                    check(updated)
                servers[server_id] = mcp_server_to_dict(updated)
        return updated

    def set_mcp_app(self, server_id: str, app: str, enabled: bool) -> McpServer | None:
        """Toggle one app's enablement for an MCP server."""
        _check_app(app)
        with self._lock:
            if server_id not in self.load()["mcp"]["servers"]:
                return None
            with self._transaction() as data:
                server = mcp_server_from_dict(data["mcp"]["servers"][server_id])
                server.apps = dataclasses.replace(server.apps, **{app: enabled})
                data["mcp"]["servers"][server_id] = mcp_server_to_dict(server)
        return server

    def delete_mcp_server(self, server_id: str) -> bool:
        with self._transaction() as data:
            return data["mcp"]["servers"].pop(server_id, None) is not None

    # -- prompts -----------------------------------------------------------

    def list_prompts(self, app: str) -> dict[str, Prompt]:
        _check_app(app)
        result: dict[str, Prompt] = {}
        for prompt_id, raw in self.load()["prompts"][app].items():
            try:
                result[prompt_id] = prompt_from_dict(raw)
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning("Skipping invalid %s prompt %s: %s", app, prompt_id, e)
        return result

    def add_prompt(self, app: str, prompt: Prompt) -> Prompt:
        _check_app(app)
        timestamp = now_ms()
        stored = dataclasses.replace(
            prompt, id=new_id("prompt"), created_at=timestamp, updated_at=timestamp
        )
        with self._transaction() as data:
            data["prompts"][app][stored.id] = prompt_to_dict(stored)
        return stored

    def update_prompt(self, app: str, prompt_id: str, changes: dict[str, Any]) -> Prompt | None:
        _check_app(app)
        with self._lock:
            if prompt_id not in self.load()["prompts"][app]:
                return None
            with self._transaction() as data:
                prompts = data["prompts"][app]
                updated = prompt_from_dict({**prompts[prompt_id], **changes, "id": prompt_id})
                updated.updated_at = now_ms()
                prompts[prompt_id] = prompt_to_dict(updated)
        return updated

    def delete_prompt(self, app: str, prompt_id: str) -> bool:
        _check_app(app)
        with self._transaction() as data:
            return data["prompts"][app].pop(prompt_id, None) is not None

    def enable_prompt(self, app: str, prompt_id: str, enabled: bool = True) -> Prompt | None:
        """Set one prompt's enabled flag and disable all its siblings.

        ABOUTME: Keeps at most one enabled prompt per app
        """
        _check_app(app)
        with self._lock:
            if prompt_id not in self.load()["prompts"][app]:
                return None
            with self._transaction() as data:
                prompts = data["prompts"][app]
                for other_id, raw in prompts.items():
                    raw["enabled"] = enabled if other_id == prompt_id else False
                target = prompt_from_dict(prompts[prompt_id])
        return target

    # -- settings ----------------------------------------------------------

    def get_settings(self) -> Settings:
        return settings_from_dict(self.load()["settings"])

    def update_settings(self, changes: dict[str, Any]) -> Settings:
        with self._transaction() as data:
            data["settings"] = {**data["settings"], **changes}
            settings = settings_from_dict(data["settings"])
        return settings

    # -- whole aggregate ---------------------------------------------------

    def export(self) -> Aggregate:
        return self.load()

    def import_config(self, config: Aggregate) -> None:
        """Replace the entire aggregate with config, no merge.

        ABOUTME: The previous data file is backed up first

        Raises:
            ValueError: If config is not a JSON object
        """
        if not isinstance(config, dict):
            raise ValueError("Imported config must be a JSON object")
        with self._lock:
            self._backup()
            self.save(copy.deepcopy(config))
        logger.info("Imported full config into %s", self._path)

    def replace_all(
        self,
        providers: dict[str, dict[str, Provider]],
        current: dict[str, str],
        mcp_servers: dict[str, McpServer],
        prompts: dict[str, dict[str, Prompt]],
    ) -> None:
        """Full replace of providers, current pointers, MCP servers and prompts.

        ABOUTME: Settings are kept, everything else is discarded
        ABOUTME: One backup, one write
        """
        with self._lock:
            self._backup()
            with self._transaction() as data:
                for app in APP_IDS:
                    data[app] = {
                        "providers": {
                            pid: provider_to_dict(p) for pid, p in providers.get(app, {}).items()
                        },
                        "current": current.get(app, ""),
                    }
                    data["prompts"][app] = {
                        pid: prompt_to_dict(p) for pid, p in prompts.get(app, {}).items()
                    }
                data["mcp"] = {
                    "servers": {sid: mcp_server_to_dict(s) for sid, s in mcp_servers.items()}
                }


