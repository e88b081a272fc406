#!/usr/bin/env python3
"""Tests for vault enumeration and change detection."""

import os
import tempfile
import shutil
from pathlib import Path
import pytest
import pytest_asyncio

# Add parent directory to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from markdown_db.errors import FileReadError
from markdown_db.models import Document
from markdown_db.utils.filesystem import diff, read_document, scan_vault
from markdown_db.utils.store import DocumentStore


def write_note(root: Path, path: str, content: str, mtime: float = None) -> Path:
    full_path = root / path
    full_path.parent.mkdir(parents=True, exist_ok=True)
    full_path.write_text(content, encoding="utf-8")
    if mtime is not None:
        os.utime(full_path, (mtime, mtime))
    return full_path


class TestScanVault:
    """Test suite for vault enumeration."""

    @pytest.fixture
    def vault_dir(self):
        temp_dir = tempfile.mkdtemp(prefix="markdown_db_test_scan_")
        yield Path(temp_dir)
        shutil.rmtree(temp_dir)

    def test_finds_markdown_recursively(self, vault_dir):
        write_note(vault_dir, "root.md", "Root", 1000.0)
        write_note(vault_dir, "folder/child.md", "Child", 2000.0)
        write_note(vault_dir, "folder/deeper/long.markdown", "Long", 3000.0)

        assert scan_vault(vault_dir) == {
            "root.md": 1000.0,
            "folder/child.md": 2000.0,
            "folder/deeper/long.markdown": 3000.0,
        }

    def test_skips_other_files_and_hidden_folders(self, vault_dir):
        write_note(vault_dir, "note.md", "Note")
        write_note(vault_dir, "image.png", "not markdown")
        write_note(vault_dir, "notes.txt", "not markdown")
        write_note(vault_dir, ".obsidian/workspace.md", "config")
        write_note(vault_dir, ".trash/old.md", "trash")
        write_note(vault_dir, "folder/.hidden.md", "hidden")

        assert list(scan_vault(vault_dir)) == ["note.md"]

    def test_directory_named_like_markdown_is_skipped(self, vault_dir):
        (vault_dir / "folder.md").mkdir()
        write_note(vault_dir, "folder.md/inside.md", "Inside")

        assert list(scan_vault(vault_dir)) == ["folder.md/inside.md"]

    def test_empty_vault(self, vault_dir):
        assert scan_vault(vault_dir) == {}

    def test_missing_vault_is_an_error(self, vault_dir):
        with pytest.raises(ValueError, match="does not exist"):
            scan_vault(vault_dir / "missing")

    def test_file_as_vault_is_an_error(self, vault_dir):
        note = write_note(vault_dir, "note.md", "Note")
        with pytest.raises(ValueError, match="not a directory"):
            scan_vault(note)


class TestDiff:
    """Test suite for classifying files against the store."""

    @pytest_asyncio.fixture
    async def vault_dir(self):
        temp_dir = tempfile.mkdtemp(prefix="markdown_db_test_diff_")
        yield Path(temp_dir)
        shutil.rmtree(temp_dir)

    @pytest_asyncio.fixture
    async def store(self):
        async with DocumentStore(in_memory=True) as store:
            yield store

    @pytest.mark.asyncio
    async def test_everything_new_on_empty_store(self, vault_dir, store):
        write_note(vault_dir, "a.md", "A", 1000.0)
        write_note(vault_dir, "b.md", "B", 1000.0)

        changes = await diff(vault_dir, store)
        assert changes.new == ["a.md", "b.md"]
        assert changes.modified == []
        assert changes.deleted == []
        assert changes.unchanged == []
        assert changes.mtimes == {"a.md": 1000.0, "b.md": 1000.0}

    @pytest.mark.asyncio
    async def test_classification(self, vault_dir, store):
        write_note(vault_dir, "same.md", "Same", 1000.0)
        write_note(vault_dir, "newer.md", "Newer", 2000.0)
        write_note(vault_dir, "older.md", "Older", 500.0)
        write_note(vault_dir, "fresh.md", "Fresh", 1000.0)

        for path in ("same.md", "newer.md", "older.md", "gone.md"):
            await store.put_document(Document(path=path, modified_at=1000.0))

        changes = await diff(vault_dir, store)
        assert changes.new == ["fresh.md"]
        assert changes.modified == ["newer.md"]
        # Equal or older timestamps are not treated as changes
        assert changes.unchanged == ["older.md", "same.md"]
        assert changes.deleted == ["gone.md"]
        assert changes.to_index == ["fresh.md", "newer.md"]
        assert changes.has_changes

    @pytest.mark.asyncio
    async def test_no_changes(self, vault_dir, store):
        write_note(vault_dir, "a.md", "A", 1000.0)
        await store.put_document(Document(path="a.md", modified_at=1000.0))

        changes = await diff(vault_dir, store)
        assert changes.unchanged == ["a.md"]
        assert not changes.has_changes


class TestReadDocument:
    """Test suite for reading vault files."""

    @pytest.fixture
    def vault_dir(self):
        temp_dir = tempfile.mkdtemp(prefix="markdown_db_test_read_")
        yield Path(temp_dir)
        shutil.rmtree(temp_dir)

    @pytest.mark.asyncio
    async def test_reads_content_verbatim(self, vault_dir):
        (vault_dir / "note.md").write_bytes(b"line one\r\nline two\n")
        assert await read_document(vault_dir, "note.md") == "line one\r\nline two\n"

    @pytest.mark.asyncio
    async def test_missing_file(self, vault_dir):
        with pytest.raises(FileNotFoundError):
            await read_document(vault_dir, "missing.md")

    @pytest.mark.asyncio
    async def test_undecodable_file(self, vault_dir):
        (vault_dir / "binary.md").write_bytes(b"\xff\xfe\x00broken utf-8 \xc3\x28")
        with pytest.raises(FileReadError) as exc_info:
            await read_document(vault_dir, "binary.md")
        assert exc_info.value.path == "binary.md"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
