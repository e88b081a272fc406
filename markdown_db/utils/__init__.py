"""Utility modules for the markdown-db index."""

from .store import DocumentStore
from .schema import ensure_current_schema
from .tags import extract_tags, split_front_matter
from .filesystem import diff, read_document, scan_vault
from .validation import ValidationError, validate_query, validate_search_query, validate_tags

__all__ = [
    "DocumentStore",
    "ensure_current_schema",
    "extract_tags",
    "split_front_matter",
    "diff",
    "read_document",
    "scan_vault",
    "ValidationError",
    "validate_query",
    "validate_search_query",
    "validate_tags",
]
