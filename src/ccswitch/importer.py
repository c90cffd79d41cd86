# ABOUTME: Import of providers, MCP servers and prompts from a legacy SQL dump
# ABOUTME: Destructive full replace, bad rows are skipped and logged, one write at the end
import json
import logging
from dataclasses import dataclass, field
from typing import Any

from ccswitch.convert import provider_config_from_dict, server_spec_from_dict
from ccswitch.models import APP_IDS, McpApps, McpServer, Prompt, Provider
from ccswitch.sqldump import count_inserts, extract_rows
from ccswitch.store import ConfigStore
from ccswitch.utils import new_id

logger = logging.getLogger(__name__)

# ABOUTME: Columns that must appear in at least one matched row of each table
REQUIRED_COLUMNS = {
    "providers": ("id", "app_type", "settings_config"),
    "mcp_servers": ("id", "server_config"),
    "prompts": ("id", "app_type"),
}


class SqlImportError(Exception):
    """Raised when a dump can't be imported at all.

    ABOUTME: Wraps the first unrecoverable error, single bad rows never raise this
    """


@dataclass
class ImportCounts:
    """Rows matched per table.

    ABOUTME: Counts rows found by the extractor, including rows later skipped
    ABOUTME: skipped records how many of those rows did not make it into the store
    """
    providers: int = 0
    mcp_servers: int = 0
    prompts: int = 0
    skipped: dict[str, int] = field(default_factory=dict)

    def add_skip(self, table: str) -> None:
        self.skipped[table] = self.skipped.get(table, 0) + 1

    def as_dict(self) -> dict[str, int]:
        """Counts in the shape the web UI expects."""
        return {
            "providers": self.providers,
            "mcpServers": self.mcp_servers,
            "prompts": self.prompts,
        }


@dataclass
class _ImportedState:
    providers: dict[str, dict[str, Provider]] = field(
        default_factory=lambda: {app: {} for app in APP_IDS}
    )
    current: dict[str, str] = field(default_factory=dict)
    mcp_servers: dict[str, McpServer] = field(default_factory=dict)
    prompts: dict[str, dict[str, Prompt]] = field(
        default_factory=lambda: {app: {} for app in APP_IDS}
    )


def _flag(value: Any) -> bool:
    return value is True or value == "1" or value == 1


def _text(value: Any) -> str | None:
    """Row value as optional text, NULL and "" both become None."""
    if value is None or value == "":
        return None
    return str(value)


def _timestamp(value: Any) -> int | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _json_value(value: Any, default: Any) -> Any:
    if not isinstance(value, str) or not value.strip():
        return default
    return json.loads(value)


def _require_columns(table: str, rows: list[dict[str, Any]]) -> None:
    if not rows:
        return
    for column in REQUIRED_COLUMNS[table]:
        if not any(column in row for row in rows):
            raise SqlImportError(f"Column '{column}' missing from every '{table}' row")


def _row_app(row: dict[str, Any]) -> str:
    app = row.get("app_type")
    if not app or not row.get("id"):
        raise ValueError("row missing 'app_type' or 'id'")
    if app not in APP_IDS:
        raise ValueError(f"unknown app_type '{app}'")
    return app


def _provider_from_row(row: dict[str, Any]) -> tuple[str, Provider]:
    app = _row_app(row)
    settings_config = json.loads(row.get("settings_config") or "")
    if not isinstance(settings_config, dict):
        raise ValueError("settings_config is not a JSON object")

    extra: dict[str, Any] = {}
    for column, key in (("icon", "icon"), ("icon_color", "iconColor")):
        if _text(row.get(column)):
            extra[key] = row[column]
    try:
        meta = _json_value(row.get("meta"), None)
    except json.JSONDecodeError:
        meta = None
    if meta:
        extra["meta"] = meta

    provider = Provider(
        id=new_id(app),
        name=str(row.get("name") or ""),
        settings_config=provider_config_from_dict(app, settings_config),
        website_url=_text(row.get("website_url")),
        notes=_text(row.get("notes")),
        category=_text(row.get("category")) or "custom",
        created_at=_timestamp(row.get("created_at")),
        extra=extra,
    )
    return app, provider


def _mcp_server_from_row(row: dict[str, Any]) -> McpServer:
    if not row.get("id"):
        raise ValueError("row missing 'id'")

    name = str(row.get("name") or row["id"])
    config = _json_value(row.get("server_config"), {})
    if not isinstance(config, dict):
        raise ValueError("server_config is not a JSON object")
    # Older rows wrap the server definition as {"server": {...}, ...}
    spec = config.get("server") if isinstance(config.get("server"), dict) else config

    try:
        tags = _json_value(row.get("tags"), [])
    except json.JSONDecodeError:
        tags = []
    if not isinstance(tags, list):
        tags = []

    apps = McpApps(
        claude=_flag(row.get("enabled_claude")),
        codex=_flag(row.get("enabled_codex")),
        gemini=_flag(row.get("enabled_gemini")),
    )
    return McpServer(
        id=new_id("mcp"),
        name=name,
        server=server_spec_from_dict(name, spec),
        enabled=apps.claude or apps.codex or apps.gemini,
        apps=apps,
        description=_text(row.get("description")),
        homepage=_text(row.get("homepage")),
        docs=_text(row.get("docs")),
        tags=tags,
    )


def _prompt_from_row(row: dict[str, Any]) -> tuple[str, Prompt]:
    app = _row_app(row)
    prompt = Prompt(
        id=new_id("prompt"),
        name=str(row.get("name") or ""),
        content=str(row.get("content") or ""),
        enabled=_flag(row.get("enabled")),
        description=_text(row.get("description")),
        created_at=_timestamp(row.get("created_at")),
        updated_at=_timestamp(row.get("updated_at")),
    )
    return app, prompt


def _import_providers(dump: str, state: _ImportedState, counts: ImportCounts) -> None:
    rows = list(extract_rows(dump, "providers"))
    _require_columns("providers", rows)
    counts.providers = len(rows)

    for row in rows:
        try:
            app, provider = _provider_from_row(row)
        except (ValueError, TypeError) as e:
            logger.warning("Skipping provider row %r: %s", row.get("id"), e)
            counts.add_skip("providers")
            continue
        state.providers[app][provider.id] = provider
        if _flag(row.get("is_current")):
            state.current[app] = provider.id


def _import_mcp_servers(dump: str, state: _ImportedState, counts: ImportCounts) -> None:
    rows = list(extract_rows(dump, "mcp_servers"))
    _require_columns("mcp_servers", rows)
    counts.mcp_servers = len(rows)

    for row in rows:
        try:
            server = _mcp_server_from_row(row)
        except (ValueError, TypeError) as e:
            logger.warning("Skipping mcp_servers row %r: %s", row.get("id"), e)
            counts.add_skip("mcp_servers")
            continue
        state.mcp_servers[server.id] = server


def _import_prompts(dump: str, state: _ImportedState, counts: ImportCounts) -> None:
    rows = list(extract_rows(dump, "prompts"))
    _require_columns("prompts", rows)
    counts.prompts = len(rows)

    for row in rows:
        try:
            app, prompt = _prompt_from_row(row)
        except (ValueError, TypeError) as e:
            logger.warning("Skipping prompts row %r: %s", row.get("id"), e)
            counts.add_skip("prompts")
            continue
        state.prompts[app][prompt.id] = prompt


def _decode(dump: str | bytes) -> str:
    if isinstance(dump, bytes):
        try:
            return dump.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SqlImportError(f"SQL dump is not valid UTF-8: {e}") from e
    return dump


def import_from_sql(store: ConfigStore, dump: str | bytes) -> ImportCounts:
    """Replace all providers, MCP servers and prompts with the dump's rows.

    ABOUTME: Clears every app's providers and current pointer, all MCP servers and prompts
    ABOUTME: Each imported record gets a fresh id, original row ids are not reused
    ABOUTME: Invalid rows are skipped, the store is written once after all tables

    Args:
        store: Store to replace into (settings are left alone)
        dump: SQL text (or UTF-8 bytes) with INSERT statements

    Returns:
        ImportCounts with the number of rows matched per table

    Raises:
        SqlImportError: If the dump can't be decoded or a required column is absent
    """
    text = _decode(dump)
    counts = ImportCounts()
    state = _ImportedState()

    _import_providers(text, state, counts)
    _import_mcp_servers(text, state, counts)
    _import_prompts(text, state, counts)

    try:
        store.replace_all(
            providers=state.providers,
            current=state.current,
            mcp_servers=state.mcp_servers,
            prompts=state.prompts,
        )
    except OSError as e:
        raise SqlImportError(f"Failed to write imported data: {e}") from e

    logger.info(
        "SQL import: %d providers, %d MCP servers, %d prompts matched (skipped: %s)",
        counts.providers, counts.mcp_servers, counts.prompts, counts.skipped or "none",
    )
    return counts


def preview_sql(dump: str | bytes) -> ImportCounts:
    """Count INSERT statements per table without touching any store."""
    text = _decode(dump)
    return ImportCounts(
        providers=count_inserts(text, "providers"),
        mcp_servers=count_inserts(text, "mcp_servers"),
        prompts=count_inserts(text, "prompts"),
    )
