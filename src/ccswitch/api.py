"""ccswitch HTTP API.

Routes mirror the endpoints the web UI calls. The store and the config writers
are injected through ``create_router`` so tests can point them at temp dirs.
"""

import logging
from collections.abc import Mapping
from typing import Any, cast

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from ccswitch import __version__
from ccswitch.config import get_data_file
from ccswitch.convert import (
    mcp_server_from_dict,
    mcp_server_to_dict,
    prompt_from_dict,
    prompt_to_dict,
    provider_from_dict,
    provider_to_dict,
    settings_to_dict,
)
from ccswitch.importer import SqlImportError, import_from_sql, preview_sql
from ccswitch.models import AppId, ConfigWriter, McpServer
from ccswitch.platforms import ClaudeWriter, CodexWriter, GeminiWriter, get_writers
from ccswitch.store import ConfigStore
from ccswitch.sync import apply_provider
from ccswitch.utils import validate_mcp_server

logger = logging.getLogger(__name__)


class ProviderRequest(BaseModel):
    provider: dict[str, Any]


class SwitchRequest(BaseModel):
    id: str


class McpServerRequest(BaseModel):
    server: dict[str, Any]


class EnabledRequest(BaseModel):
    enabled: bool = True


class PromptRequest(BaseModel):
    prompt: dict[str, Any]


class SettingsRequest(BaseModel):
    settings: dict[str, Any]


class ConfigImportRequest(BaseModel):
    config: dict[str, Any]


class SqlImportRequest(BaseModel):
    sql_content: str = Field(alias="sqlContent")


def _check_server(server: McpServer) -> None:
    """Raise ValueError on blocking validation errors, log warnings."""
    errors = []
    for issue in validate_mcp_server(server):
        if issue.severity == "error":
            errors.append(issue.message)
        else:
            logger.warning("MCP server '%s': %s", server.name, issue.message)
    if errors:
        raise ValueError("; ".join(errors))


def create_router(*, store: ConfigStore, writers: Mapping[str, ConfigWriter]) -> APIRouter:
    router = APIRouter()
    claude_writer = cast(ClaudeWriter, writers["claude"])
    codex_writer = cast(CodexWriter, writers["codex"])
    gemini_writer = cast(GeminiWriter, writers["gemini"])

    # -- direct projection -------------------------------------------------

    @router.post("/api/claude/switch-provider")
    def claude_switch_provider(body: ProviderRequest) -> dict[str, Any]:
        apply_provider("claude", provider_from_dict("claude", body.provider), writers)
        return {"success": True}

    @router.get("/api/claude/settings")
    def claude_settings() -> dict[str, Any]:
        return claude_writer.read_settings()

    @router.post("/api/codex/switch-provider")
    def codex_switch_provider(body: ProviderRequest) -> dict[str, Any]:
        apply_provider("codex", provider_from_dict("codex", body.provider), writers)
        return {"success": True}

    @router.get("/api/codex/auth")
    def codex_auth() -> dict[str, Any]:
        return codex_writer.read_auth()

    @router.get("/api/codex/config")
    def codex_config() -> dict[str, Any]:
        return codex_writer.read_config()

    @router.post("/api/gemini/switch-provider")
    def gemini_switch_provider(body: ProviderRequest) -> dict[str, Any]:
        apply_provider("gemini", provider_from_dict("gemini", body.provider), writers)
        return {"success": True}

    @router.get("/api/gemini/env")
    def gemini_env() -> dict[str, str]:
        return gemini_writer.read_env()

    # -- providers ---------------------------------------------------------

    @router.get("/api/providers/{app}")
    def list_providers(app: AppId) -> dict[str, Any]:
        return {pid: provider_to_dict(p) for pid, p in store.list_providers(app).items()}

    @router.get("/api/providers/{app}/current")
    def current_provider(app: AppId) -> dict[str, str]:
        return {"current": store.get_current(app)}

    @router.post("/api/providers/{app}")
    def add_provider(app: AppId, body: ProviderRequest) -> dict[str, Any]:
        stored = store.add_provider(app, provider_from_dict(app, body.provider))
        return {"success": True, "id": stored.id}

    @router.put("/api/providers/{app}/{provider_id}")
    def update_provider(app: AppId, provider_id: str, body: ProviderRequest) -> dict[str, Any]:
        if store.update_provider(app, provider_id, body.provider) is None:
            raise HTTPException(404, "Provider not found")
        return {"success": True}

    @router.delete("/api/providers/{app}/{provider_id}")
    def delete_provider(app: AppId, provider_id: str) -> dict[str, Any]:
        store.delete_provider(app, provider_id)
        return {"success": True}

    @router.post("/api/providers/{app}/switch")
    def switch_provider(app: AppId, body: SwitchRequest) -> dict[str, Any]:
        provider = store.switch_provider(app, body.id)
        if provider is None:
            logger.warning("Switched %s to unknown provider %s, config files left as is", app, body.id)
        else:
            apply_provider(app, provider, writers)
        return {"success": True}

    # -- MCP servers -------------------------------------------------------

    @router.get("/api/mcp/servers")
    def list_mcp_servers() -> dict[str, Any]:
        return {sid: mcp_server_to_dict(s) for sid, s in store.list_mcp_servers().items()}

    @router.post("/api/mcp/servers")
    def add_mcp_server(body: McpServerRequest) -> dict[str, Any]:
        server = mcp_server_from_dict(body.server)
        _check_server(server)
        stored = store.add_mcp_server(server)
        return {"success": True, "id": stored.id}

    @router.put("/api/mcp/servers/{server_id}")
    def update_mcp_server(server_id: str, body: McpServerRequest) -> dict[str, Any]:
        if store.update_mcp_server(server_id, body.server, check=_check_server) is None:
            raise HTTPException(404, "Server not found")
        return {"success": True}

    @router.post("/api/mcp/servers/{server_id}/apps/{app}")
    def set_mcp_app(server_id: str, app: AppId, body: EnabledRequest) -> dict[str, Any]:
        if store.set_mcp_app(server_id, app, body.enabled) is None:
            raise HTTPException(404, "Server not found")
        return {"success": True}

    @router.delete("/api/mcp/servers/{server_id}")
    def delete_mcp_server(server_id: str) -> dict[str, Any]:
        store.delete_mcp_server(server_id)
        return {"success": True}

    # -- prompts -----------------------------------------------------------

    @router.get("/api/prompts/{app}")
    def list_prompts(app: AppId) -> dict[str, Any]:
        return {pid: prompt_to_dict(p) for pid, p in store.list_prompts(app).items()}

    @router.post("/api/prompts/{app}")
    def add_prompt(app: AppId, body: PromptRequest) -> dict[str, Any]:
        stored = store.add_prompt(app, prompt_from_dict(body.prompt))
        return {"success": True, "id": stored.id}

    @router.put("/api/prompts/{app}/{prompt_id}")
    def update_prompt(app: AppId, prompt_id: str, body: PromptRequest) -> dict[str, Any]:
        if store.update_prompt(app, prompt_id, body.prompt) is None:
            raise HTTPException(404, "Prompt not found")
        return {"success": True}

    @router.post("/api/prompts/{app}/{prompt_id}/enable")
    def enable_prompt(app: AppId, prompt_id: str, body: EnabledRequest) -> dict[str, Any]:
        if store.enable_prompt(app, prompt_id, body.enabled) is None:
            raise HTTPException(404, "Prompt not found")
        return {"success": True}

    @router.delete("/api/prompts/{app}/{prompt_id}")
    def delete_prompt(app: AppId, prompt_id: str) -> dict[str, Any]:
        store.delete_prompt(app, prompt_id)
        return {"success": True}

    # -- settings and bulk config ------------------------------------------

    @router.get("/api/settings")
    def get_settings() -> dict[str, Any]:
        return settings_to_dict(store.get_settings())

    @router.put("/api/settings")
    def update_settings(body: SettingsRequest) -> dict[str, Any]:
        store.update_settings(body.settings)
        return {"success": True}

    @router.get("/api/config/export")
    def export_config() -> dict[str, Any]:
        return store.export()

    @router.post("/api/config/import")
    def import_config(body: ConfigImportRequest) -> dict[str, Any]:
        store.import_config(body.config)
        return {"success": True}

    @router.post("/api/config/import-sql")
    def import_sql(body: SqlImportRequest) -> dict[str, Any]:
        counts = import_from_sql(store, body.sql_content)
        return {"success": True, "counts": counts.as_dict()}

    @router.post("/api/config/import-sql/preview")
    def preview_sql_import(body: SqlImportRequest) -> dict[str, Any]:
        return {"counts": preview_sql(body.sql_content).as_dict()}

    return router


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code)


async def _invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]
    return JSONResponse({"error": "; ".join(messages)}, status_code=400)


async def _bad_request(request: Request, exc: ValueError) -> JSONResponse:
    logger.warning("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse({"error": str(exc)}, status_code=400)


async def _server_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("%s %s failed", request.method, request.url.path)
    return JSONResponse({"error": str(exc)}, status_code=500)


def create_app(
    store: ConfigStore | None = None,
    writers: Mapping[str, ConfigWriter] | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Defaults to the data file under $DATA_DIR and the writers for the
    current user's home directory.
    """
    app = FastAPI(title="ccswitch", version=__version__)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(create_router(
        store=store if store else ConfigStore(get_data_file()),
        writers=writers if writers else get_writers(),
    ))

    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _invalid_request)
    app.add_exception_handler(ValueError, _bad_request)
    app.add_exception_handler(SqlImportError, _server_error)
    app.add_exception_handler(OSError, _server_error)
    app.add_exception_handler(Exception, _server_error)

    return app
