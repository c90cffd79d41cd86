# Config writer registry
from ccswitch.models import ConfigWriter
from ccswitch.platforms.claude import ClaudeWriter
from ccswitch.platforms.codex import CodexWriter
from ccswitch.platforms.gemini import GeminiWriter

# Registry of writers keyed by app id
ALL_WRITERS: dict[str, type[ConfigWriter]] = {
    "claude": ClaudeWriter,
    "codex": CodexWriter,
    "gemini": GeminiWriter,
}

__all__ = [
    "ConfigWriter",
    "ClaudeWriter",
    "CodexWriter",
    "GeminiWriter",
    "ALL_WRITERS",
    "get_writers",
]


def get_writers() -> dict[str, ConfigWriter]:
    """Instantiate all writers with their default paths.

    ABOUTME: Paths are resolved from Path.home() at call time
    """
    return {app: writer_cls() for app, writer_cls in ALL_WRITERS.items()}
