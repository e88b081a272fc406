"""Validation helpers for search requests."""

from typing import List, Optional, Tuple
from ..constants import ERROR_MESSAGES, MAX_QUERY_LENGTH
from ..models import SearchQuery


class ValidationError(ValueError):
    """Custom validation error with detailed messages."""
    pass


def validate_search_query(query: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a raw search string.

    Args:
        query: Search query to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not query or not query.strip():
        return False, ERROR_MESSAGES["empty_search_query"]

    if len(query) > MAX_QUERY_LENGTH:
        return False, ERROR_MESSAGES["query_too_long"].format(
            length=len(query), max_length=MAX_QUERY_LENGTH
        )

    return True, None


def validate_tags(tags: List[str]) -> Tuple[bool, Optional[str]]:
    """
    Validate a list of tag filters.

    Args:
        tags: Tags to validate (a leading # is allowed)

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(tags, list):
        return False, ERROR_MESSAGES["invalid_tags"]

    for tag in tags:
        if not isinstance(tag, str):
            return False, ERROR_MESSAGES["invalid_tags"]
        cleaned = tag.strip().lstrip("#")
        if not cleaned or any(char.isspace() for char in cleaned):
            return False, ERROR_MESSAGES["invalid_tags"]

    return True, None


def validate_query(query: SearchQuery) -> SearchQuery:
    """
    Check a structured search request and normalize its tags.

    Returns:
        The query with tags stripped of whitespace and ``#`` markers

    Raises:
        ValidationError: if any field is invalid
    """
    if query.text is not None and len(query.text) > MAX_QUERY_LENGTH:
        raise ValidationError(ERROR_MESSAGES["query_too_long"].format(
            length=len(query.text), max_length=MAX_QUERY_LENGTH
        ))

    is_valid, error = validate_tags(query.tags)
    if not is_valid:
        raise ValidationError(error)

    if query.tag_mode not in ("any", "all"):
        raise ValidationError(ERROR_MESSAGES["invalid_tag_mode"].format(mode=query.tag_mode))

    if query.limit is not None and query.limit <= 0:
        raise ValidationError(ERROR_MESSAGES["invalid_limit"].format(limit=query.limit))

    tags = [tag.strip().lstrip("#") for tag in query.tags]
    return query.model_copy(update={"tags": tags})
