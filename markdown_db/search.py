"""Text and tag search over the document store."""

import logging
from typing import List, Tuple, Union

from .errors import StoreCorrupt
from .models import Document, SearchQuery
from .utils.store import DocumentStore
from .utils.validation import ValidationError, validate_query, validate_search_query

logger = logging.getLogger(__name__)


def parse_query(raw: str) -> SearchQuery:
    """
    Parse a search string into a structured query.

    Words starting with ``#`` become required tags; everything else is
    joined back together as the text to look for.

    Example:
        >>> parse_query("#urgent meeting notes")
        SearchQuery(text='meeting notes', tags=['urgent'], tag_mode='all', limit=None)
    """
    is_valid, error = validate_search_query(raw)
    if not is_valid:
        raise ValidationError(error)

    words = []
    tags = []
    for word in raw.split():
        if word.startswith("#") and len(word) > 1:
            tags.append(word[1:])
        else:
            words.append(word)

    return SearchQuery(text=" ".join(words) or None, tags=tags, tag_mode="all")


class QueryEngine:
    """Answers search requests against a document store.

    It never triggers indexing, so results reflect whatever the last
    completed pass wrote.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    async def search(
        self,
        query: Union[SearchQuery, str],
        reset_on_corrupt: bool = True,
    ) -> List[Document]:
        """
        Find documents matching a query.

        A document matches when its title or content contains the text
        (case-insensitive) and its tags satisfy the tag filter. Either part
        may be left out. Results are ordered by path.

        If the store holds records that cannot be decoded, the store is
        wiped (so the next indexing pass rebuilds it) and no results are
        returned.

        Args:
            query: Structured query, or a raw string for ``parse_query``
            reset_on_corrupt: Set to False to get ``StoreCorrupt`` raised
                instead, for callers that rebuild the index themselves

        Returns:
            Matching documents
        """
        if isinstance(query, str):
            query = parse_query(query)

        query = validate_query(query)
        logger.debug(f"Searching for text={query.text!r} tags={query.tags} mode={query.tag_mode}")

        try:
            return await self.store.query_documents(
                text=query.text or None,
                tags=query.tags,
                tag_mode=query.tag_mode,
                limit=query.limit,
            )
        except StoreCorrupt as e:
            if not reset_on_corrupt:
                raise
            logger.warning(f"Index data unreadable during search, resetting index: {e}")
            await self.store.reset_all()
            return []

    async def list_tags(self) -> List[Tuple[str, int]]:
        """Get all tags with usage counts, most used first."""
        return await self.store.list_tags()


async def search(store: DocumentStore, query: Union[SearchQuery, str]) -> List[Document]:
    """Shortcut for ``QueryEngine(store).search(query)``."""
    return await QueryEngine(store).search(query)
