"""Schema version gate for the document store."""

import logging
from typing import Any

from ..errors import StoreCorrupt
from .store import DocumentStore

logger = logging.getLogger(__name__)


async def reset_store(store: DocumentStore, expected_version: Any) -> None:
    """Wipe the store and stamp it with ``expected_version``."""
    await store.reset_all()
    await store.set_schema_version(expected_version)


async def ensure_current_schema(store: DocumentStore, expected_version: Any) -> bool:
    """
    Make sure the store holds records of the expected schema version.

    There is no per-version upgrade path: the index is derived from the vault,
    so any mismatch (or an unreadable store) discards every document and the
    next pass rebuilds it from disk.

    Args:
        store: Opened document store
        expected_version: Version the running code writes

    Returns:
        True if the store was reset
    """
    try:
        stored_version = await store.get_schema_version()
    except StoreCorrupt as e:
        logger.warning(f"Schema version unreadable, resetting index: {e}")
        await reset_store(store, expected_version)
        return True

    if stored_version == expected_version:
        return False

    if stored_version is None:
        logger.info(f"Initializing fresh index with schema version {expected_version}")
    else:
        logger.info(
            f"Schema version changed ({stored_version} -> {expected_version}), resetting index"
        )

    await reset_store(store, expected_version)
    return True
