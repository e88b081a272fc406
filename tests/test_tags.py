#!/usr/bin/env python3
"""Tests for front matter parsing and tag extraction."""

from pathlib import Path
import pytest

# Add parent directory to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from markdown_db.utils.tags import (
    extract_doc_type,
    extract_tags,
    extract_title,
    front_matter_tags,
    inline_tags,
    split_front_matter,
)


class TestFrontMatter:
    """Test suite for front matter splitting."""

    def test_parses_mapping(self):
        content = "---\ntitle: Test Note\ntags: [a, b]\n---\n# Body\n"
        front_matter, body = split_front_matter(content)
        assert front_matter == {"title": "Test Note", "tags": ["a", "b"]}
        assert body == "# Body\n"

    def test_no_front_matter(self):
        content = "# Just a heading\n\nText"
        front_matter, body = split_front_matter(content)
        assert front_matter == {}
        assert body == content

    def test_unterminated_block_is_body(self):
        content = "---\ntags: [a]\nno closing line"
        front_matter, body = split_front_matter(content)
        assert front_matter == {}
        assert body == content

    def test_malformed_yaml_is_ignored(self):
        content = "---\ntags: [unclosed\n  - : :\n---\nBody #inline\n"
        front_matter, body = split_front_matter(content)
        assert front_matter == {}
        assert body == "Body #inline\n"

    def test_non_mapping_is_ignored(self):
        front_matter, _ = split_front_matter("---\n- just\n- a list\n---\nBody")
        assert front_matter == {}

    def test_empty_block(self):
        front_matter, body = split_front_matter("---\n---\nBody")
        assert front_matter == {}
        assert body == "Body"

    def test_windows_line_endings(self):
        front_matter, body = split_front_matter("---\r\ntags: [x]\r\n---\r\nBody")
        assert front_matter == {"tags": ["x"]}
        assert body == "Body"

    def test_closing_line_at_end_of_file(self):
        front_matter, body = split_front_matter("---\ntype: meeting\n---")
        assert front_matter == {"type": "meeting"}
        assert body == ""


class TestFrontMatterTags:
    """Test suite for tags declared in front matter."""

    def test_inline_list(self):
        assert front_matter_tags({"tags": ["tag1", "tag2"]}) == {"tag1", "tag2"}

    def test_comma_separated_string(self):
        assert front_matter_tags({"tags": "first, second"}) == {"first", "second"}

    def test_space_separated_string(self):
        assert front_matter_tags({"tags": "first second"}) == {"first", "second"}

    def test_legacy_tag_key(self):
        assert front_matter_tags({"tag": "single"}) == {"single"}

    def test_hash_prefix_stripped(self):
        assert front_matter_tags({"tags": ["#project", "area/work"]}) == {"project", "area/work"}

    def test_empty_and_missing(self):
        assert front_matter_tags({"tags": None}) == set()
        assert front_matter_tags({"title": "No tags"}) == set()
        assert front_matter_tags({"tags": ""}) == set()

    def test_non_string_items(self):
        # YAML turns bare numbers into ints; nested structures are skipped
        assert front_matter_tags({"tags": [2024, "ok", {"a": 1}, None, True]}) == {"2024", "ok"}

    def test_unsupported_value(self):
        assert front_matter_tags({"tags": {"nested": "map"}}) == set()


class TestInlineTags:
    """Test suite for #tag markers in body text."""

    def test_simple_tags(self):
        assert inline_tags("Document with #inline tags #after") == {"inline", "after"}

    def test_nested_and_punctuated(self):
        body = "Filed under #area/work and #follow-up plus #snake_case."
        assert inline_tags(body) == {"area/work", "follow-up", "snake_case"}

    def test_tag_at_line_start(self):
        assert inline_tags("#first\ntext\n#second") == {"first", "second"}

    def test_headings_are_not_tags(self):
        assert inline_tags("# Heading\n## Sub heading\n") == set()

    def test_anchors_and_entities_are_not_tags(self):
        body = "See page#section and &#123; or http://example.com/#frag"
        assert inline_tags(body) == set()

    def test_numeric_markers_are_not_tags(self):
        assert inline_tags("Fixes issue #123") == set()
        assert inline_tags("Year #2024q1") == {"2024q1"}

    def test_code_is_ignored(self):
        body = "Real #tag\n```\n#not-a-tag\n```\nand `#inline-code` too"
        assert inline_tags(body) == {"tag"}

    def test_trailing_punctuation_is_not_part_of_tag(self):
        assert inline_tags("Ends with #tag- and #path/") == {"tag", "path"}

    def test_unicode_letters(self):
        assert inline_tags("Notiz #Überblick") == {"Überblick"}

    def test_tag_in_parentheses(self):
        assert inline_tags("(see #review)") == {"review"}

    def test_tags_wrapped_in_emphasis(self):
        assert inline_tags("**#bold** and _#italic_ and *#star*") == {"bold", "italic", "star"}

    def test_comma_separated_markers(self):
        assert inline_tags("- [ ] task #todo,#next") == {"todo", "next"}


class TestExtractTags:
    """Test suite for the combined extractor."""

    def test_front_matter_and_body_union(self):
        content = "---\ntags: [project, urgent]\n---\nRemember to #followup\n"
        assert extract_tags(content) == {"project", "urgent", "followup"}

    def test_duplicates_collapse(self):
        content = "---\ntags: [project]\n---\n#project again #project"
        assert extract_tags(content) == {"project"}

    def test_case_is_preserved(self):
        assert extract_tags("#Project and #project") == {"Project", "project"}

    def test_no_tags_is_empty_set(self):
        assert extract_tags("Plain text without markers") == set()
        assert extract_tags("") == set()

    def test_malformed_front_matter_still_yields_inline_tags(self):
        content = "---\ntags: [broken\n---\nBody #kept\n"
        assert extract_tags(content) == {"kept"}

    def test_front_matter_comments_are_not_tags(self):
        content = "---\n# a yaml comment\ntags: [real]\n---\nBody\n"
        assert extract_tags(content) == {"real"}


class TestTitleAndType:
    """Test suite for title and type extraction."""

    def test_title_from_front_matter(self):
        assert extract_title({"title": "Roadmap"}, "folder/note.md") == "Roadmap"

    def test_title_from_path(self):
        assert extract_title({}, "folder/second.md") == "second"
        assert extract_title({"title": "  "}, "first.md") == "first"

    def test_type(self):
        assert extract_doc_type({"type": "meeting"}) == "meeting"
        assert extract_doc_type({}) is None
        assert extract_doc_type({"type": 3}) is None

    def test_type_from_link(self):
        assert extract_doc_type({}, "[[type=person]]\n") == "person"
        assert extract_doc_type({}, "Intro\n[[type=person|alias]]\n") == "person"

    def test_front_matter_type_wins_over_link(self):
        assert extract_doc_type({"type": "meeting"}, "[[type=person]]") == "meeting"
        # With front matter present, only its field counts
        assert extract_doc_type({"title": "x"}, "[[type=person]]") is None

    def test_plain_links_and_code_give_no_type(self):
        assert extract_doc_type({}, "[[person]] and [[kind=person]]") is None
        assert extract_doc_type({}, "`[[type=person]]`") is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
