"""Front matter parsing and tag extraction for markdown documents.

Everything here is a pure function over a string, so results depend only
on the document content.
"""

import re
import logging
from pathlib import PurePosixPath
from typing import Any, Dict, Iterable, Optional, Set, Tuple

import yaml

logger = logging.getLogger(__name__)

# Opening "---" line, optional YAML body, closing "---" or "..." line
FRONT_MATTER_PATTERN = re.compile(
    r"\A---[ \t]*\r?\n(?:|(.*?)\r?\n)(?:---|\.\.\.)[ \t]*(?:\r?\n|\Z)",
    re.DOTALL,
)

FENCED_CODE_PATTERN = re.compile(r"(```|~~~)[\s\S]*?\1")
INLINE_CODE_PATTERN = re.compile(r"`[^`\n]+`")

# Only whitespace, brackets, emphasis markers and commas may precede a tag
# marker, so "page#anchor" and "&#123;" are not tags
INLINE_TAG_PATTERN = re.compile(r"(?<![^\s(\[{*_,])#(\w[\w/-]*)")

# [[type=person]] or [[type=person|alias]]
TYPE_LINK_PATTERN = re.compile(r"\[\[\s*type\s*=\s*([^\]|]+?)\s*(?:\|[^\]]*)?\]\]")

FRONT_MATTER_SEPARATORS = re.compile(r"[,\s]+")


def split_front_matter(content: str) -> Tuple[Dict[str, Any], str]:
    """
    Split YAML front matter from markdown content.

    Args:
        content: Full markdown content

    Returns:
        Tuple of (front matter dict, body). The dict is empty when the
        document has no front matter or it is not a valid YAML mapping.
    """
    match = FRONT_MATTER_PATTERN.match(content)
    if not match:
        return {}, content

    body = content[match.end():]
    fm_text = match.group(1) or ""

    try:
        front_matter = yaml.safe_load(fm_text)
    except yaml.YAMLError as e:
        logger.debug(f"Ignoring malformed front matter: {e}")
        return {}, body

    if not isinstance(front_matter, dict):
        return {}, body

    return front_matter, body


def _strip_code(body: str) -> str:
    body = FENCED_CODE_PATTERN.sub("", body)
    return INLINE_CODE_PATTERN.sub("", body)


def _clean_tag(value: Any) -> Optional[str]:
    if isinstance(value, bool) or value is None:
        return None
    if not isinstance(value, (str, int, float)):
        return None
    tag = str(value).strip().lstrip("#").strip()
    return tag or None


def front_matter_tags(front_matter: Dict[str, Any]) -> Set[str]:
    """
    Collect the tags declared in parsed front matter.

    Supports both ``tags`` and the legacy ``tag`` key. A list contributes each
    of its scalar items; a plain string is split on commas and whitespace.
    """
    raw = front_matter.get("tags", front_matter.get("tag"))

    if isinstance(raw, str):
        items: Iterable[Any] = FRONT_MATTER_SEPARATORS.split(raw)
    elif isinstance(raw, list):
        items = raw
    else:
        return set()

    tags = set()
    for item in items:
        tag = _clean_tag(item)
        if tag:
            tags.add(tag)
    return tags


def inline_tags(body: str) -> Set[str]:
    """
    Find ``#tag`` markers in markdown body text.

    Code blocks and inline code are ignored. Tags may contain letters,
    digits, underscores, hyphens and slashes (for nested tags such as
    ``#area/work``). Purely numeric markers like ``#123`` are not tags.

    A marker counts when it starts a word, including words wrapped in
    emphasis (``**#bold**``) or run together with commas (``#todo,#next``).
    One glued to other text, as in ``page#anchor``, does not.
    """
    tags = set()
    for match in INLINE_TAG_PATTERN.finditer(_strip_code(body)):
        tag = match.group(1).rstrip("-/_")
        if tag and not tag.isdigit():
            tags.add(tag)
    return tags


def extract_tags(content: str) -> Set[str]:
    """Return every tag a document declares, from front matter and body."""
    front_matter, body = split_front_matter(content)
    return front_matter_tags(front_matter) | inline_tags(body)


def extract_title(front_matter: Dict[str, Any], path: str) -> str:
    """Title from front matter, falling back to the file name."""
    title = front_matter.get("title")
    if isinstance(title, str) and title.strip():
        return title.strip()
    return PurePosixPath(path).stem


def extract_doc_type(front_matter: Dict[str, Any], body: str = "") -> Optional[str]:
    """
    Document type from the front matter ``type`` field.

    Documents without front matter can declare a type with a
    ``[[type=person]]`` link in the body instead.
    """
    if front_matter:
        doc_type = front_matter.get("type")
        if isinstance(doc_type, str) and doc_type.strip():
            return doc_type.strip()
        return None

    match = TYPE_LINK_PATTERN.search(_strip_code(body))
    if match:
        return match.group(1)
    return None
