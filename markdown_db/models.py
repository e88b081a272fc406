"""Data models for indexed documents, change sets and search requests."""

from typing import Dict, List, Literal, Optional, Set
from pydantic import BaseModel, Field


class Document(BaseModel):
    """One markdown file as recorded in the index."""

    path: str = Field(description="Vault-relative POSIX path, unique per document")
    modified_at: float = Field(description="Filesystem mtime when the file was read")
    content: str = ""
    tags: Set[str] = Field(default_factory=set)
    title: str = ""
    doc_type: Optional[str] = None
    size: int = 0
    indexed_at: float = 0.0


class ChangeSet(BaseModel):
    """Classification of vault files against the index."""

    new: List[str] = Field(default_factory=list)
    modified: List[str] = Field(default_factory=list)
    deleted: List[str] = Field(default_factory=list)
    unchanged: List[str] = Field(default_factory=list)
    # On-disk mtimes captured during enumeration
    mtimes: Dict[str, float] = Field(default_factory=dict)

    @property
    def to_index(self) -> List[str]:
        """Paths that must be read and written this pass."""
        return self.new + self.modified

    @property
    def has_changes(self) -> bool:
        return bool(self.new or self.modified or self.deleted)


class ReindexReport(BaseModel):
    """Outcome of one indexing pass."""

    indexed: List[str] = Field(default_factory=list)
    deleted: List[str] = Field(default_factory=list)
    unchanged: int = 0
    skipped: Dict[str, str] = Field(default_factory=dict)
    schema_reset: bool = False

    @property
    def reads(self) -> int:
        """Number of files the pass attempted to read."""
        return len(self.indexed) + len(self.skipped)

    @property
    def writes(self) -> int:
        """Number of documents written or removed."""
        return len(self.indexed) + len(self.deleted)

    @property
    def complete(self) -> bool:
        """True if no file had to be skipped."""
        return not self.skipped


class SearchQuery(BaseModel):
    """A search request: free text plus optional tag filters."""

    text: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    tag_mode: Literal["any", "all"] = "all"
    limit: Optional[int] = None
