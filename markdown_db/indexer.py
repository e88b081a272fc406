"""Incremental indexing: bring the document store in line with the vault."""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, List, Union

from .constants import SCHEMA_VERSION, DEFAULT_MAX_PARALLEL_READS
from .errors import FileReadError, StoreCorrupt
from .models import Document, ReindexReport
from .utils import filesystem
from .utils.schema import ensure_current_schema, reset_store
from .utils.store import DocumentStore
from .utils.tags import extract_doc_type, extract_tags, extract_title, split_front_matter

logger = logging.getLogger(__name__)


def build_document(path: str, content: str, modified_at: float, indexed_at: float) -> Document:
    """Build the index record for one file's content."""
    front_matter, body = split_front_matter(content)
    return Document(
        path=path,
        modified_at=modified_at,
        content=content,
        tags=extract_tags(content),
        title=extract_title(front_matter, path),
        doc_type=extract_doc_type(front_matter, body),
        size=len(content.encode("utf-8")),
        indexed_at=indexed_at,
    )


async def reindex(
    vault_root: Union[str, Path],
    store: DocumentStore,
    expected_schema_version: Any = SCHEMA_VERSION,
    max_parallel: int = DEFAULT_MAX_PARALLEL_READS,
) -> ReindexReport:
    """
    Run one indexing pass over a vault.

    Steps: schema check, diff against the store, read and extract every new
    or modified file, write the results and drop deleted paths. Unchanged
    files are neither read nor written, so a second pass over an untouched
    vault does no work.

    Unreadable files are reported in ``ReindexReport.skipped`` and retried on
    the next pass. If the store turns out to hold unreadable records, it is
    reset and the pass runs once more from scratch.

    Args:
        vault_root: Vault directory
        store: Opened document store
        expected_schema_version: Schema version this code writes
        max_parallel: Maximum number of files read concurrently

    Returns:
        ReindexReport describing what the pass did
    """
    try:
        return await _run_pass(vault_root, store, expected_schema_version, max_parallel)
    except StoreCorrupt as e:
        logger.warning(f"Index data unreadable during pass, rebuilding from vault: {e}")
        await reset_store(store, expected_schema_version)
        report = await _run_pass(vault_root, store, expected_schema_version, max_parallel)
        report.schema_reset = True
        return report


async def _run_pass(
    vault_root: Union[str, Path],
    store: DocumentStore,
    expected_schema_version: Any,
    max_parallel: int,
) -> ReindexReport:
    report = ReindexReport()
    report.schema_reset = await ensure_current_schema(store, expected_schema_version)

    changes = await filesystem.diff(vault_root, store)
    report.unchanged = len(changes.unchanged)

    # Deletions come from the diff-time snapshot, plus files that vanish below
    deleted: List[str] = list(changes.deleted)
    paths = changes.to_index
    semaphore = asyncio.Semaphore(max(1, max_parallel))

    async def load(path: str) -> str:
        async with semaphore:
            return await filesystem.read_document(vault_root, path)

    if paths:
        logger.info(f"{len(paths)} files need indexing")

    results = await asyncio.gather(*(load(path) for path in paths), return_exceptions=True)

    now = datetime.now().timestamp()
    documents: List[Document] = []

    for path, result in zip(paths, results):
        if isinstance(result, FileNotFoundError):
            logger.info(f"{path} disappeared before it could be read, treating as deleted")
            deleted.append(path)
        elif isinstance(result, FileReadError):
            logger.warning(f"Skipping {path}: {result.reason}")
            report.skipped[path] = result.reason
        elif isinstance(result, BaseException):
            raise result
        else:
            documents.append(build_document(path, result, changes.mtimes[path], now))

    if documents or deleted:
        async with store.transaction():
            for document in documents:
                await store.put_document(document)
                logger.debug(f"Indexed: {document.path}")

            for path in deleted:
                await store.delete_document(path)
                logger.debug(f"Removed from index: {path}")

    report.indexed = [document.path for document in documents]
    report.deleted = sorted(deleted)

    logger.info(
        f"Index update completed: {len(report.indexed)} indexed, {len(report.deleted)} removed, "
        f"{report.unchanged} unchanged, {len(report.skipped)} skipped"
    )
    return report
