"""markdown-db - Incremental search index for markdown vaults.

Keeps a local SQLite index of a directory of markdown notes (such as an
Obsidian vault) in sync with the filesystem, extracting tags from front
matter and inline #markers, and answers text and tag searches against it.
"""

from .config import IndexConfig, configure_logging
from .errors import FileReadError, MarkdownDBError, StoreCorrupt, StoreUnavailable
from .indexer import reindex
from .models import ChangeSet, Document, ReindexReport, SearchQuery
from .search import QueryEngine, parse_query, search
from .vault import MarkdownVault

__version__ = "0.3.0"

__all__ = [
    "__version__",
    "IndexConfig",
    "configure_logging",
    "MarkdownDBError",
    "StoreUnavailable",
    "StoreCorrupt",
    "FileReadError",
    "reindex",
    "ChangeSet",
    "Document",
    "ReindexReport",
    "SearchQuery",
    "QueryEngine",
    "parse_query",
    "search",
    "MarkdownVault",
]
