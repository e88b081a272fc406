"""Exception types raised by the markdown-db index."""


class MarkdownDBError(Exception):
    """Base class for index errors."""


class StoreUnavailable(MarkdownDBError):
    """The index database could not be created or opened.

    This is fatal for the run: nothing can be indexed or searched.
    """


class StoreCorrupt(MarkdownDBError):
    """Persisted index data could not be read back.

    Distinct from an outdated schema version. Callers treat it the same way
    though: the index is a cache, so it gets wiped and rebuilt.
    """


class FileReadError(MarkdownDBError):
    """A single vault file could not be read during an indexing pass."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Failed to read {path}: {reason}")
        self.path = path
        self.reason = reason
