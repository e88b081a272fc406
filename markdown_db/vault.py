"""Vault-level entry point tying configuration, store, indexer and search together."""

import asyncio
import logging
from typing import List, Optional, Tuple, Union

from .config import IndexConfig, configure_logging
from .errors import StoreCorrupt, StoreUnavailable
from .indexer import reindex
from .models import Document, ReindexReport, SearchQuery
from .search import QueryEngine
from .utils.store import DocumentStore

logger = logging.getLogger(__name__)


class MarkdownVault:
    """Searchable index of one markdown vault.

    Typical use::

        async with MarkdownVault(IndexConfig.from_env()) as vault:
            await vault.refresh()
            results = await vault.search("#project roadmap")
    """

    def __init__(self, config: IndexConfig):
        """
        Initialize vault access.

        Args:
            config: Index configuration

        Raises:
            ValueError: if the vault root is missing or not a directory
        """
        self.config = config
        configure_logging(config.log_level)
        self.vault_path = config.validate_vault()

        self.store = DocumentStore(
            data_directory=None if config.in_memory else config.data_directory,
            in_memory=config.in_memory,
        )
        self.query_engine = QueryEngine(self.store)

        # Only one pass may run at a time
        self._index_lock = asyncio.Lock()
        self._initialized = False
        self.last_report: Optional[ReindexReport] = None

    async def __aenter__(self) -> "MarkdownVault":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def open(self) -> None:
        """Open the document store.

        Raises:
            StoreUnavailable: if the index database cannot be opened
        """
        if not self._initialized:
            try:
                await self.store.initialize()
            except StoreUnavailable as e:
                logger.error(f"Index store unavailable: {e}")
                raise
            self._initialized = True
            mode = "in-memory" if self.config.in_memory else self.store.location
            logger.info(f"Index store opened ({mode})")

    async def close(self) -> None:
        if self._initialized:
            await self.store.close()
            self._initialized = False

    async def refresh(self) -> ReindexReport:
        """Run an incremental indexing pass over the vault."""
        await self.open()

        async with self._index_lock:
            report = await reindex(
                self.vault_path,
                self.store,
                self.config.expected_schema_version,
                max_parallel=self.config.max_parallel_reads,
            )

        if report.skipped:
            logger.warning(
                f"Index is usable but {len(report.skipped)} files could not be read: "
                f"{', '.join(sorted(report.skipped))}"
            )

        self.last_report = report
        return report

    async def search(self, query: Union[SearchQuery, str]) -> List[Document]:
        """Search the index as of the last completed pass.

        Unreadable index records trigger a rebuild from the vault before the
        search is answered.
        """
        await self.open()
        try:
            return await self.query_engine.search(query, reset_on_corrupt=False)
        except StoreCorrupt as e:
            logger.warning(f"Index data unreadable during search, rebuilding from vault: {e}")
            await self.refresh()
            return await self.query_engine.search(query)

    async def list_tags(self) -> List[Tuple[str, int]]:
        await self.open()
        return await self.query_engine.list_tags()

    async def size(self) -> int:
        """Number of documents in the index."""
        await self.open()
        return await self.store.count()
