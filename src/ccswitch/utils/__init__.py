# ABOUTME: Utility modules for ccswitch
# ABOUTME: Exports id generation, .env handling, backup, and validation functions

from ccswitch.utils.backup import cleanup_old_backups, create_backup, get_backup_dir
from ccswitch.utils.env import merge_env_text, parse_env_text
from ccswitch.utils.ids import new_id, now_ms
from ccswitch.utils.validation import (
    ValidationError,
    validate_command_exists,
    validate_mcp_server,
    validate_url,
)

__all__ = [
    "new_id",
    "now_ms",
    "parse_env_text",
    "merge_env_text",
    "ValidationError",
    "validate_command_exists",
    "validate_mcp_server",
    "validate_url",
    "create_backup",
    "cleanup_old_backups",
    "get_backup_dir",
]
