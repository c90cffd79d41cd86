# ccswitch - provider switcher for Claude Code, Codex and Gemini CLI
# ABOUTME: Version information
__version__ = "0.1.0"

# ABOUTME: Export core data models
from ccswitch.models import (
    APP_IDS,
    ConfigWriter,
    McpApps,
    McpServer,
    McpServerSpec,
    Prompt,
    Provider,
    Settings,
)

# ABOUTME: Export the store and the SQL importer
from ccswitch.importer import ImportCounts, SqlImportError, import_from_sql, preview_sql
from ccswitch.store import ConfigStore

__all__ = [
    "__version__",
    "APP_IDS",
    "ConfigWriter",
    "McpApps",
    "McpServer",
    "McpServerSpec",
    "Prompt",
    "Provider",
    "Settings",
    "ConfigStore",
    "ImportCounts",
    "SqlImportError",
    "import_from_sql",
    "preview_sql",
]
