"""Unit tests for file_mapper orchestration module."""

import os
from pathlib import Path

import pytest

from src.file_mapper.errors import FilesystemError
from src.file_mapper.file_mapper import FileMapper
from src.file_mapper.models import MarkdownFile, SyncConfig
from src.sync_engine.models import content_hash


@pytest.fixture
def docs_dir(tmp_path):
    """A small docs tree with front matter ordering."""
    root = tmp_path / "docs"
    (root / "guides").mkdir(parents=True)
    (root / "drafts").mkdir()
    (root / "intro.md").write_text("---\nsidebar_position: 1\n---\n# Introduction\n\nHello.\n")
    (root / "changelog.md").write_text("# Changelog\n")
    (root / "guides" / "b.md").write_text("---\ntitle: Second Guide\nsidebar_position: 2\n---\nBody\n")
    (root / "guides" / "a.md").write_text("---\nsidebar_position: 1\n---\n# First Guide\n")
    (root / "drafts" / "wip.md").write_text("# WIP\n")
    (root / "notes.txt").write_text("not markdown")
    return root


class TestScan:
    """Directory scanning and ordering."""

    def test_sidebar_order(self, docs_dir):
        mapper = FileMapper(SyncConfig(docs_dir=str(docs_dir)))

        files = mapper.scan()

        assert [f.relative_path for f in files] == [
            "intro.md", "changelog.md", "drafts/wip.md", "guides/a.md", "guides/b.md"
        ]

    def test_exclude_patterns(self, docs_dir):
        mapper = FileMapper(SyncConfig(docs_dir=str(docs_dir), exclude_patterns=["drafts/*"]))

        paths = [f.relative_path for f in mapper.scan()]

        assert "drafts/wip.md" not in paths
        assert len(paths) == 4

    def test_scan_other_directory(self, docs_dir):
        mapper = FileMapper(SyncConfig(docs_dir="unused"))

        files = mapper.scan(str(docs_dir / "guides"))

        assert [f.relative_path for f in files] == ["a.md", "b.md"]

    def test_missing_directory(self, tmp_path):
        mapper = FileMapper(SyncConfig(docs_dir=str(tmp_path / "nope")))

        with pytest.raises(FilesystemError, match="Directory does not exist"):
            mapper.scan()

    def test_unparseable_file_is_skipped(self, docs_dir, caplog):
        (docs_dir / "broken.md").write_text("---\ntitle: [oops\n---\nBody")
        mapper = FileMapper(SyncConfig(docs_dir=str(docs_dir)))

        paths = [f.relative_path for f in mapper.scan()]

        assert "broken.md" not in paths
        assert "skipping" in caplog.text


class TestReadFile:
    """Single file reads and safety checks."""

    def test_read_file_splits_frontmatter(self, docs_dir):
        mapper = FileMapper()

        markdown_file = mapper.read_file(str(docs_dir / "intro.md"), str(docs_dir))

        assert markdown_file.frontmatter == {"sidebar_position": 1}
        assert markdown_file.content == "# Introduction\n\nHello.\n"
        assert markdown_file.raw_content.startswith("---")
        assert markdown_file.relative_path == "intro.md"

    def test_path_traversal_rejected(self, docs_dir, tmp_path):
        outside = tmp_path / "secret.md"
        outside.write_text("# Secret")

        with pytest.raises(FilesystemError, match="Path traversal detected"):
            FileMapper().read_file(str(docs_dir / ".." / "secret.md"), str(docs_dir))

    def test_oversized_file_rejected(self, docs_dir, mocker):
        mocker.patch("src.file_mapper.file_mapper.os.path.getsize", return_value=11 * 1024 * 1024)

        with pytest.raises(FilesystemError, match="exceeds maximum allowed size"):
            FileMapper().read_file(str(docs_dir / "intro.md"), str(docs_dir))

    def test_missing_file(self, docs_dir):
        with pytest.raises(FilesystemError):
            FileMapper().read_file(str(docs_dir / "missing.md"), str(docs_dir))

    def test_base_defaults_to_file_directory(self, docs_dir):
        markdown_file = FileMapper().read_file(str(docs_dir / "guides" / "a.md"))

        assert markdown_file.relative_path == "a.md"


class TestSourceDocuments:
    """Mapping files to SourceDocuments."""

    def test_scan_documents(self, docs_dir):
        mapper = FileMapper(SyncConfig(docs_dir=str(docs_dir)))

        documents = mapper.scan_documents()
        intro = documents[0]

        assert intro.path == "intro.md"
        assert intro.title == "Introduction"
        assert intro.markdown == "# Introduction\n\nHello.\n"
        assert intro.content_hash == content_hash((docs_dir / "intro.md").read_text())
        assert intro.base_dir == Path(os.path.realpath(docs_dir))

    def test_frontmatter_change_changes_hash(self, docs_dir):
        mapper = FileMapper(SyncConfig(docs_dir=str(docs_dir)))
        before = mapper.scan_documents()[0].content_hash

        (docs_dir / "intro.md").write_text("---\nsidebar_position: 0\n---\n# Introduction\n\nHello.\n")

        assert mapper.scan_documents()[0].content_hash != before


class TestDeriveTitle:
    @pytest.mark.parametrize("frontmatter,content,expected", [
        ({"title": "From Frontmatter"}, "# Heading", "From Frontmatter"),
        ({}, "Intro\n\n#   Spaced Heading  \n", "Spaced Heading"),
        ({}, "## Only H2", "setup"),
    ])
    def test_title_sources(self, frontmatter, content, expected):
        markdown_file = MarkdownFile(
            file_path="/docs/setup.md", relative_path="setup.md",
            frontmatter=frontmatter, content=content,
        )

        assert FileMapper().derive_title(markdown_file) == expected
