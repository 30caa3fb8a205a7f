"""Unit tests for cli.config module (StateManager)."""

import pytest
import yaml

from src.cli.config import StateManager
from src.cli.errors import StateError, StateFilesystemError
from src.cli.models import DocumentRecord, SyncState


class TestStateManagerLoad:
    """Test cases for StateManager.load() method."""

    def test_missing_file_is_fresh_state(self, tmp_path):
        state = StateManager.load(str(tmp_path / "state.yaml"))

        assert state == SyncState()

    def test_empty_file_is_fresh_state(self, tmp_path):
        state_file = tmp_path / "state.yaml"
        state_file.write_text("   \n")

        assert StateManager.load(str(state_file)) == SyncState()

    def test_load_full_state(self, tmp_path):
        state_file = tmp_path / "state.yaml"
        state_file.write_text("""
root_document_id: 1AbC
root_document_url: https://docs.google.com/document/d/1AbC/edit
last_synced: "2024-01-15T10:30:00Z"
documents:
  intro.md:
    hash: abc123
    document_id: 1AbC
    title: Introduction
    last_synced: "2024-01-15T10:30:00Z"
""")

        state = StateManager.load(str(state_file))

        assert state.root_document_id == "1AbC"
        assert state.last_synced == "2024-01-15T10:30:00Z"
        assert state.documents["intro.md"] == DocumentRecord(
            hash="abc123", document_id="1AbC",
            last_synced="2024-01-15T10:30:00Z", title="Introduction",
        )
        assert state.get_synced_hash("intro.md") == "abc123"

    def test_blank_strings_become_none(self, tmp_path):
        state_file = tmp_path / "state.yaml"
        state_file.write_text("root_document_id: '  '\n")

        assert StateManager.load(str(state_file)).root_document_id is None

    @pytest.mark.parametrize("content,field", [
        ("root_document_id: 123\n", "root_document_id"),
        ("documents: [a, b]\n", "documents"),
        ("documents:\n  a.md: nope\n", "documents"),
        ("documents:\n  a.md:\n    hash: x\n", "documents"),
    ])
    def test_invalid_state(self, tmp_path, content, field):
        state_file = tmp_path / "state.yaml"
        state_file.write_text(content)

        with pytest.raises(StateError) as exc_info:
            StateManager.load(str(state_file))

        assert exc_info.value.state_field == field

    def test_invalid_yaml(self, tmp_path):
        state_file = tmp_path / "state.yaml"
        state_file.write_text("documents: {unclosed\n")

        with pytest.raises(StateError, match="Invalid YAML syntax"):
            StateManager.load(str(state_file))

    def test_unreadable_file(self, tmp_path, mocker):
        mocker.patch("builtins.open", side_effect=PermissionError())

        with pytest.raises(StateFilesystemError, match="Permission denied"):
            StateManager.load(str(tmp_path / "state.yaml"))


class TestStateManagerSave:
    """Test cases for StateManager.save() method."""

    def test_save_creates_directory_and_round_trips(self, tmp_path):
        state_path = tmp_path / ".gdocs-sync" / "state.yaml"
        state = SyncState(root_document_id="1AbC", root_document_url="https://x")
        state.record_synced("intro.md", "abc123", "1AbC")
        state.documents["intro.md"].title = "Introduction"
        state.mark_run_completed()

        StateManager.save(str(state_path), state)

        assert StateManager.load(str(state_path)) == state

    def test_saved_layout(self, tmp_path):
        state_path = tmp_path / "state.yaml"
        state = SyncState()
        state.record_synced("a.md", "h1", "doc1")

        StateManager.save(str(state_path), state)

        saved = yaml.safe_load(state_path.read_text())
        assert list(saved) == ["root_document_id", "root_document_url", "last_synced", "documents"]
        assert saved["documents"]["a.md"]["hash"] == "h1"


class TestSyncStateStore:
    """SyncState as the engine's state store."""

    def test_unknown_path_has_no_hash(self):
        assert SyncState().get_synced_hash("new.md") is None

    def test_record_synced_overwrites(self):
        state = SyncState()
        state.record_synced("a.md", "h1", "doc1")
        state.record_synced("a.md", "h2", "doc1")

        assert state.get_synced_hash("a.md") == "h2"
        assert state.documents["a.md"].last_synced.endswith("Z")

    def test_retain_documents_drops_the_rest(self):
        state = SyncState()
        for path in ("a.md", "b.md", "c.md"):
            state.record_synced(path, "h", "doc1")

        dropped = state.retain_documents(["b.md"])

        assert dropped == ["a.md", "c.md"]
        assert set(state.documents) == {"b.md"}
