# ABOUTME: Tests for the aggregate JSON store
# ABOUTME: Covers provider CRUD, switching, MCP servers, prompts, settings and bulk import
import json
import threading
from pathlib import Path

import pytest

from ccswitch.models import (
    ClaudeProviderConfig,
    CodexProviderConfig,
    McpServer,
    McpServerSpec,
    Prompt,
    Provider,
)
from ccswitch.store import ConfigStore, default_aggregate


@pytest.fixture
def store(tmp_path: Path) -> ConfigStore:
    return ConfigStore(tmp_path / "data" / "ccswitch-data.json")


def make_provider(name: str = "Demo", token: str = "sk-demo") -> Provider:
    return Provider(
        id="",
        name=name,
        settings_config=ClaudeProviderConfig(env={"ANTHROPIC_AUTH_TOKEN": token}),
        website_url="https://demo.example",
    )


def make_server(name: str = "filesystem") -> McpServer:
    return McpServer(
        id="",
        name=name,
        server=McpServerSpec(type="stdio", command="npx", args=["-y", "server-fs"]),
    )


class TestLoad:
    """Tests for loading the aggregate."""

    def test_missing_file_is_default(self, store):
        """Test a missing data file reads as the default aggregate."""
        assert store.load() == default_aggregate()
        assert not store.path.exists()

    def test_default_settings(self, store):
        """Test default settings values."""
        assert store.load()["settings"] == {"language": "zh", "theme": "system", "autoSync": False}

    def test_corrupt_file_is_default(self, store):
        """Test an unparseable data file reads as the default aggregate."""
        store.path.parent.mkdir(parents=True)
        store.path.write_text("{not json")
        assert store.load() == default_aggregate()

    def test_partial_file_is_normalized(self, store):
        """Test missing sections are filled in, existing values kept."""
        store.path.parent.mkdir(parents=True)
        store.path.write_text(json.dumps({"claude": {"providers": {}, "current": "x"}}))

        data = store.load()
        assert data["claude"]["current"] == "x"
        assert data["codex"] == {"providers": {}, "current": ""}
        assert data["mcp"] == {"servers": {}}
        assert data["prompts"]["gemini"] == {}

    def test_non_object_sections_read_as_empty(self, store):
        """Test null or scalar sections are replaced by empty ones, not crashed on."""
        store.path.parent.mkdir(parents=True)
        store.path.write_text(json.dumps({
            "claude": None,
            "codex": {"providers": [], "current": 3},
            "mcp": {"servers": "oops"},
            "prompts": {"gemini": None},
            "settings": None,
        }))

        assert store.load() == default_aggregate()
        assert store.list_providers("claude") == {}
        assert store.get_current("codex") == ""
        assert store.list_mcp_servers() == {}

    def test_imported_null_section_still_usable(self, store):
        """Test an import with a null app section leaves the store readable and writable."""
        store.import_config({"claude": None})

        assert store.list_providers("codex") == {}
        assert store.export() == default_aggregate()
        stored = store.add_provider("claude", make_provider())
        assert list(store.list_providers("claude")) == [stored.id]


class TestProviders:
    """Tests for provider operations."""

    def test_add_then_get(self, store):
        """Test an added provider reads back equal, with id and createdAt set."""
        stored = store.add_provider("claude", make_provider())

        assert stored.id.startswith("claude-")
        assert stored.created_at is not None
        assert store.get_provider("claude", stored.id) == stored
        assert store.list_providers("claude") == {stored.id: stored}

    def test_add_ignores_caller_id(self, store):
        """Test the caller's id is replaced by a generated one."""
        provider = make_provider()
        provider.id = "chosen"
        stored = store.add_provider("claude", provider)
        assert stored.id != "chosen"

    def test_ids_unique_for_rapid_adds(self, store):
        """Test back-to-back adds never collide."""
        ids = {store.add_provider("claude", make_provider(f"p{i}")).id for i in range(20)}
        assert len(ids) == 20

    def test_add_does_not_touch_other_apps(self, store):
        """Test apps keep separate provider collections."""
        store.add_provider("claude", make_provider())
        assert store.list_providers("codex") == {}

    def test_unknown_app_raises(self, store):
        """Test an unknown app id is rejected."""
        with pytest.raises(ValueError, match="Unknown app"):
            store.list_providers("cursor")

    def test_update_merges_fields(self, store):
        """Test update keeps fields not in the change set and never changes id."""
        stored = store.add_provider("claude", make_provider())

        updated = store.update_provider("claude", stored.id, {"name": "Renamed", "id": "other"})

        assert updated.id == stored.id
        assert updated.name == "Renamed"
        assert updated.website_url == "https://demo.example"
        assert store.get_provider("claude", stored.id).name == "Renamed"

    def test_update_missing_returns_none(self, store):
        """Test updating an unknown id returns None and writes nothing."""
        assert store.update_provider("claude", "nope", {"name": "x"}) is None
        assert not store.path.exists()

    def test_delete_current_clears_pointer(self, store):
        """Test deleting the current provider resets current to ""."""
        stored = store.add_provider("claude", make_provider())
        store.switch_provider("claude", stored.id)

        assert store.delete_provider("claude", stored.id) is True
        assert store.get_current("claude") == ""
        assert store.get_provider("claude", stored.id) is None

    def test_delete_other_keeps_pointer(self, store):
        """Test deleting a non-current provider leaves current alone."""
        first = store.add_provider("claude", make_provider("first"))
        second = store.add_provider("claude", make_provider("second"))
        store.switch_provider("claude", first.id)

        store.delete_provider("claude", second.id)
        assert store.get_current("claude") == first.id

    def test_delete_missing_returns_false(self, store):
        """Test deleting an unknown id reports False."""
        assert store.delete_provider("claude", "nope") is False

    def test_switch_returns_provider(self, store):
        """Test switch sets current and returns the provider."""
        stored = store.add_provider("claude", make_provider())

        assert store.switch_provider("claude", stored.id) == stored
        assert store.get_current("claude") == stored.id

    def test_switch_unknown_id_still_sets_current(self, store, tmp_path):
        """Test switching to an unknown id stores the id and returns None."""
        assert store.switch_provider("codex", "ghost") is None
        assert store.get_current("codex") == "ghost"

        other = ConfigStore(tmp_path / "other.json")
        other.import_config(store.export())
        assert other.get_current("codex") == "ghost"

    def test_invalid_record_skipped_in_list(self, store):
        """Test a hand-edited bad record doesn't break listing."""
        stored = store.add_provider("codex", Provider(
            id="", name="ok", settings_config=CodexProviderConfig(config="model = 'x'")
        ))
        data = store.load()
        data["codex"]["providers"]["bad"] = {"settingsConfig": {}}
        store.save(data)

        assert list(store.list_providers("codex")) == [stored.id]


class TestMcpServers:
    """Tests for MCP server operations."""

    def test_add_and_list(self, store):
        """Test an added server is listed under a generated id."""
        stored = store.add_mcp_server(make_server())

        assert stored.id.startswith("mcp-")
        assert store.list_mcp_servers() == {stored.id: stored}

    def test_update_inherits_type(self, store):
        """Test a replacement server without type keeps the current type."""
        stored = store.add_mcp_server(make_server())

        updated = store.update_mcp_server(stored.id, {"server": {"command": "uvx"}})

        assert updated.server.type == "stdio"
        assert updated.server.command == "uvx"

    def test_update_cannot_change_type(self, store):
        """Test switching stdio to http is rejected and nothing is written."""
        stored = store.add_mcp_server(make_server())

        with pytest.raises(ValueError, match="cannot be changed"):
            store.update_mcp_server(stored.id, {"server": {"type": "http", "url": "https://x.example"}})

        assert store.get_mcp_server(stored.id).server.type == "stdio"

    def test_update_check_can_reject(self, store):
        """Test a failing check leaves the stored server unchanged."""
        stored = store.add_mcp_server(make_server())

        def reject(server):
            raise ValueError("nope")

        with pytest.raises(ValueError, match="nope"):
            store.update_mcp_server(stored.id, {"name": "renamed"}, check=reject)

        assert store.get_mcp_server(stored.id).name == "filesystem"

    def test_update_missing_returns_none(self, store):
        """Test updating an unknown server returns None."""
        assert store.update_mcp_server("nope", {"name": "x"}) is None

    def test_set_app_toggle(self, store):
        """Test per-app enablement toggles independently."""
        stored = store.add_mcp_server(make_server())

        store.set_mcp_app(stored.id, "codex", True)
        server = store.get_mcp_server(stored.id)
        assert server.apps.codex is True
        assert server.apps.claude is False

        store.set_mcp_app(stored.id, "codex", False)
        assert store.get_mcp_server(stored.id).apps.codex is False

    def test_delete(self, store):
        """Test delete removes the server."""
        stored = store.add_mcp_server(make_server())
        assert store.delete_mcp_server(stored.id) is True
        assert store.list_mcp_servers() == {}
        assert store.delete_mcp_server(stored.id) is False


class TestPrompts:
    """Tests for prompt operations."""

    def test_add_sets_timestamps(self, store):
        """Test add assigns id and timestamps."""
        stored = store.add_prompt("claude", Prompt(id="", name="Review", content="Be strict"))

        assert stored.id.startswith("prompt-")
        assert stored.created_at == stored.updated_at
        assert store.list_prompts("claude") == {stored.id: stored}

    def test_update_bumps_updated_at(self, store):
        """Test update changes content and refreshes updatedAt."""
        stored = store.add_prompt("claude", Prompt(id="", name="Review", content="v1"))

        updated = store.update_prompt("claude", stored.id, {"content": "v2"})

        assert updated.content == "v2"
        assert updated.updated_at >= stored.updated_at
        assert updated.created_at == stored.created_at

    def test_enable_is_exclusive(self, store):
        """Test enabling one prompt disables the app's others."""
        first = store.add_prompt("claude", Prompt(id="", name="a", content="", enabled=True))
        second = store.add_prompt("claude", Prompt(id="", name="b", content=""))
        other_app = store.add_prompt("codex", Prompt(id="", name="c", content="", enabled=True))

        store.enable_prompt("claude", second.id)

        prompts = store.list_prompts("claude")
        assert prompts[second.id].enabled is True
        assert prompts[first.id].enabled is False
        assert store.list_prompts("codex")[other_app.id].enabled is True

    def test_disable(self, store):
        """Test enable_prompt with enabled=False leaves none enabled."""
        stored = store.add_prompt("gemini", Prompt(id="", name="a", content="", enabled=True))
        store.enable_prompt("gemini", stored.id, enabled=False)
        assert store.list_prompts("gemini")[stored.id].enabled is False

    def test_missing_prompt(self, store):
        """Test unknown prompt ids return None/False."""
        assert store.enable_prompt("claude", "nope") is None
        assert store.update_prompt("claude", "nope", {"content": ""}) is None
        assert store.delete_prompt("claude", "nope") is False


class TestSettingsAndBulk:
    """Tests for settings, export and import."""

    def test_update_settings_shallow_merge(self, store):
        """Test settings changes merge over the existing values."""
        settings = store.update_settings({"theme": "dark"})

        assert settings.theme == "dark"
        assert settings.language == "zh"
        assert store.load()["settings"]["autoSync"] is False

    def test_export_import_round_trip(self, store, tmp_path):
        """Test an exported aggregate imports back identically."""
        store.add_provider("claude", make_provider())
        store.add_mcp_server(make_server())
        exported = store.export()

        other = ConfigStore(tmp_path / "other.json")
        other.import_config(exported)

        assert other.export() == exported

    def test_import_replaces_without_merge(self, store):
        """Test import discards the previous aggregate and backs it up."""
        store.add_provider("claude", make_provider())

        store.import_config(default_aggregate())

        assert store.list_providers("claude") == {}
        assert len(list((store.path.parent / "backups").iterdir())) == 1

    def test_import_rejects_non_object(self, store):
        """Test importing a non-object raises ValueError."""
        with pytest.raises(ValueError):
            store.import_config(["not", "a", "dict"])

    def test_concurrent_adds_do_not_lose_updates(self, store):
        """Test parallel adds all land in the file."""
        threads = [
            threading.Thread(target=store.add_provider, args=("claude", make_provider(f"p{i}")))
            for i in range(10)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(store.list_providers("claude")) == 10
