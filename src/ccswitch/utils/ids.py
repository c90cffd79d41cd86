# Identifier generation for stored records
import secrets
import time


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def new_id(prefix: str) -> str:
    """Generate a record id of the form {prefix}-{epoch_ms}-{suffix}.

    ABOUTME: Random suffix keeps ids unique when two adds land in the same millisecond
    ABOUTME: Used for providers (prefix = app), MCP servers ("mcp") and prompts ("prompt")

    Examples:
        >>> new_id("claude")
        'claude-1760870400000-3f9a1c2b'
    """
    return f"{prefix}-{now_ms()}-{secrets.token_hex(4)}"
