# Tests for Claude Code settings writer
import json
from pathlib import Path

import pytest

from ccswitch.models import ClaudeProviderConfig, CodexProviderConfig
from ccswitch.platforms.claude import ClaudeWriter


def test_claude_writer_properties(tmp_path: Path) -> None:
    """Test writer name and paths property."""
    settings_file = tmp_path / "settings.json"
    writer = ClaudeWriter(settings_path=settings_file)

    assert writer.name == "Claude Code"
    assert writer.paths == [settings_file]


def test_claude_read_missing(tmp_path: Path) -> None:
    """Test reading when settings don't exist."""
    writer = ClaudeWriter(settings_path=tmp_path / "settings.json")
    assert writer.read_settings() == {}


def test_claude_apply_creates_file(tmp_path: Path) -> None:
    """Test apply creates settings.json and its directory if missing."""
    settings_file = tmp_path / ".claude" / "settings.json"
    writer = ClaudeWriter(settings_path=settings_file)

    writer.apply(ClaudeProviderConfig(env={
        "ANTHROPIC_AUTH_TOKEN": "sk-new",
        "ANTHROPIC_BASE_URL": "https://api.new.example",
    }))

    data = json.loads(settings_file.read_text())
    assert data == {"env": {
        "ANTHROPIC_AUTH_TOKEN": "sk-new",
        "ANTHROPIC_BASE_URL": "https://api.new.example",
    }}


def test_claude_apply_is_additive(tmp_path: Path) -> None:
    """Test keys absent from the provider keep their current values."""
    settings_file = tmp_path / "settings.json"
    settings_file.write_text(json.dumps({
        "env": {"ANTHROPIC_AUTH_TOKEN": "sk-keep", "ANTHROPIC_MODEL": "old"},
    }))
    writer = ClaudeWriter(settings_path=settings_file)

    writer.apply(ClaudeProviderConfig(env={"ANTHROPIC_BASE_URL": "https://x.example"}))

    env = json.loads(settings_file.read_text())["env"]
    assert env == {
        "ANTHROPIC_AUTH_TOKEN": "sk-keep",
        "ANTHROPIC_MODEL": "old",
        "ANTHROPIC_BASE_URL": "https://x.example",
    }


def test_claude_apply_preserves_other_settings(tmp_path: Path) -> None:
    """Test non-env settings and unrelated env keys are untouched."""
    settings_file = tmp_path / "settings.json"
    settings_file.write_text(json.dumps({
        "permissions": {"allow": ["Bash(ls)"]},
        "env": {"HTTP_PROXY": "http://proxy:8080"},
    }))
    writer = ClaudeWriter(settings_path=settings_file)

    writer.apply(ClaudeProviderConfig(env={"ANTHROPIC_MODEL": "sonnet"}))

    data = json.loads(settings_file.read_text())
    assert data["permissions"] == {"allow": ["Bash(ls)"]}
    assert data["env"]["HTTP_PROXY"] == "http://proxy:8080"
    assert data["env"]["ANTHROPIC_MODEL"] == "sonnet"


def test_claude_apply_ignores_unlisted_and_empty_keys(tmp_path: Path) -> None:
    """Test only allow-listed, non-empty keys are copied."""
    settings_file = tmp_path / "settings.json"
    settings_file.write_text(json.dumps({"env": {"ANTHROPIC_MODEL": "keep"}}))
    writer = ClaudeWriter(settings_path=settings_file)

    writer.apply(ClaudeProviderConfig(env={
        "ANTHROPIC_MODEL": "",
        "SOMETHING_ELSE": "x",
        "ANTHROPIC_DEFAULT_OPUS_MODEL": "opus",
    }))

    env = json.loads(settings_file.read_text())["env"]
    assert env == {"ANTHROPIC_MODEL": "keep", "ANTHROPIC_DEFAULT_OPUS_MODEL": "opus"}


def test_claude_apply_non_object_env(tmp_path: Path) -> None:
    """Test a non-object env in settings is replaced."""
    settings_file = tmp_path / "settings.json"
    settings_file.write_text(json.dumps({"env": "broken"}))
    writer = ClaudeWriter(settings_path=settings_file)

    writer.apply(ClaudeProviderConfig(env={"ANTHROPIC_AUTH_TOKEN": "t"}))

    assert json.loads(settings_file.read_text())["env"] == {"ANTHROPIC_AUTH_TOKEN": "t"}


def test_claude_apply_unreadable_file(tmp_path: Path) -> None:
    """Test corrupt settings are treated as empty."""
    settings_file = tmp_path / "settings.json"
    settings_file.write_text("{oops")
    writer = ClaudeWriter(settings_path=settings_file)

    writer.apply(ClaudeProviderConfig(env={"ANTHROPIC_AUTH_TOKEN": "t"}))

    assert json.loads(settings_file.read_text()) == {"env": {"ANTHROPIC_AUTH_TOKEN": "t"}}


def test_claude_apply_wrong_variant(tmp_path: Path) -> None:
    """Test a codex config is refused."""
    writer = ClaudeWriter(settings_path=tmp_path / "settings.json")
    with pytest.raises(TypeError):
        writer.apply(CodexProviderConfig())
