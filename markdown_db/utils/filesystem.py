"""Filesystem access for vault indexing: enumeration, change detection, reads."""

import stat
import logging
from pathlib import Path
from typing import Dict, Union

import aiofiles

from ..constants import MARKDOWN_EXTENSIONS, ERROR_MESSAGES
from ..errors import FileReadError
from ..models import ChangeSet
from .store import DocumentStore

logger = logging.getLogger(__name__)


def _is_hidden(relative_path: Path) -> bool:
    # .obsidian, .trash, .git and friends never hold notes
    return any(part.startswith(".") for part in relative_path.parts)


def scan_vault(vault_root: Union[str, Path]) -> Dict[str, float]:
    """
    Enumerate markdown files in a vault.

    Args:
        vault_root: Vault directory

    Returns:
        Mapping of vault-relative POSIX path to modification time
    """
    vault_root = Path(vault_root)
    if not vault_root.exists():
        raise ValueError(ERROR_MESSAGES["vault_not_found"].format(path=vault_root))
    if not vault_root.is_dir():
        raise ValueError(ERROR_MESSAGES["vault_not_directory"].format(path=vault_root))

    mtimes: Dict[str, float] = {}

    for extension in sorted(MARKDOWN_EXTENSIONS):
        for md_file in vault_root.rglob(f"*{extension}"):
            rel_path = md_file.relative_to(vault_root)
            if _is_hidden(rel_path):
                continue

            try:
                file_stat = md_file.stat()
            except FileNotFoundError:
                # Deleted while we were walking
                continue
            except OSError as e:
                logger.warning(f"Failed to stat {md_file}: {e}")
                continue

            if not stat.S_ISREG(file_stat.st_mode):
                continue

            mtimes[rel_path.as_posix()] = file_stat.st_mtime

    return mtimes


async def diff(vault_root: Union[str, Path], store: DocumentStore) -> ChangeSet:
    """
    Classify vault files against what the store last recorded.

    A file is modified only if its mtime is strictly newer than the stored
    one; equal timestamps count as unchanged. Content is never compared.

    Args:
        vault_root: Vault directory
        store: Opened document store

    Returns:
        ChangeSet with new, modified, deleted and unchanged paths
    """
    logger.info(f"Scanning vault {vault_root} for markdown files...")
    on_disk = scan_vault(vault_root)
    logger.info(f"Found {len(on_disk)} markdown files in vault")

    stored = await store.list_modified_times()

    changes = ChangeSet(mtimes=on_disk)
    for path in sorted(on_disk):
        stored_mtime = stored.get(path)
        if stored_mtime is None:
            changes.new.append(path)
        elif on_disk[path] > stored_mtime:
            changes.modified.append(path)
        else:
            changes.unchanged.append(path)

    changes.deleted = sorted(set(stored) - set(on_disk))

    logger.info(
        f"Changes: {len(changes.new)} new, {len(changes.modified)} modified, "
        f"{len(changes.deleted)} deleted, {len(changes.unchanged)} unchanged"
    )
    return changes


async def read_document(vault_root: Union[str, Path], path: str) -> str:
    """
    Read a vault file as UTF-8 text.

    Raises:
        FileNotFoundError: the file no longer exists
        FileReadError: any other I/O or decoding failure
    """
    full_path = Path(vault_root) / path

    try:
        # newline="" keeps the content exactly as stored on disk
        async with aiofiles.open(full_path, 'r', encoding='utf-8', newline='') as f:
            return await f.read()
    except FileNotFoundError:
        raise
    except (OSError, UnicodeDecodeError) as e:
        raise FileReadError(path, str(e)) from e
