"""Unit tests for cli.init_command module."""

import os

import pytest

from src.cli.errors import InitError
from src.cli.init_command import InitCommand
from src.file_mapper.config_loader import ConfigLoader
from src.file_mapper.errors import FilesystemError


@pytest.fixture
def config_path(tmp_path):
    return str(tmp_path / ".gdocs-sync" / "config.yaml")


class TestInitCommand:
    def test_default_config_path(self):
        assert InitCommand().config_path == ".gdocs-sync/config.yaml"

    def test_writes_config_and_creates_docs_dir(self, tmp_path, config_path):
        docs_dir = str(tmp_path / "docs")

        config = InitCommand(config_path).run(docs_dir, "Team Handbook")

        assert os.path.isdir(docs_dir)
        assert config.document_title == "Team Handbook"
        assert ConfigLoader.load(config_path) == config

    def test_default_title(self, tmp_path, config_path):
        config = InitCommand(config_path).run(str(tmp_path / "docs"))

        assert config.document_title == "Documentation"

    def test_docs_dir_is_normalized(self, tmp_path, config_path):
        config = InitCommand(config_path).run(str(tmp_path / "docs" / "." / "sub" / ".."))

        assert config.docs_dir == str(tmp_path / "docs")

    def test_existing_config_is_refused(self, tmp_path, config_path):
        InitCommand(config_path).run(str(tmp_path / "docs"))

        with pytest.raises(InitError, match="already exists"):
            InitCommand(config_path).run(str(tmp_path / "docs"))

    def test_blank_title_is_refused(self, tmp_path, config_path):
        with pytest.raises(InitError, match="cannot be empty"):
            InitCommand(config_path).run(str(tmp_path / "docs"), "   ")

    def test_save_failure_is_init_error(self, tmp_path, config_path, mocker):
        mocker.patch.object(
            ConfigLoader, "save", side_effect=FilesystemError(config_path, "write", "disk full")
        )

        with pytest.raises(InitError, match="Failed to save configuration"):
            InitCommand(config_path).run(str(tmp_path / "docs"))

    def test_docs_dir_creation_failure(self, tmp_path, config_path, mocker):
        mocker.patch("src.cli.init_command.os.makedirs", side_effect=OSError("read-only"))

        with pytest.raises(InitError, match="Failed to create docs directory"):
            InitCommand(config_path).run(str(tmp_path / "docs"))
