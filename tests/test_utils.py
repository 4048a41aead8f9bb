"""Tests for text helpers and entry conversion."""

from hn_tui.models import (
    CommentNode,
    Entry,
    entry_from_comment_hit,
    entry_from_search_hit,
    entry_from_story,
)
from hn_tui.utils import format_points, item_url, sanitize_comment, truncate, wrap_text


class TestSanitizeComment:

    def test_strips_tags_and_decodes_entities(self):
        assert sanitize_comment("<p>Hello &amp; <i>bye</i></p>") == "Hello & bye"

    def test_paragraphs_become_spaces(self):
        assert sanitize_comment("one<p>two") == "one two"

    def test_collapses_whitespace(self):
        assert sanitize_comment("  a \n\n b  ") == "a b"

    def test_empty(self):
        assert sanitize_comment("") == ""

    def test_quotes_and_links(self):
        text = 'It&#x27;s <a href="https://x.com">here</a>'
        assert sanitize_comment(text) == "It's here"


class TestTextHelpers:

    def test_truncate(self):
        assert truncate("short", 10) == "short"
        assert truncate("hello world", 5) == "hello..."
        assert truncate("hello world", 6) == "hello..."

    def test_format_points(self):
        assert format_points(1) == "1 point"
        assert format_points(0) == "0 points"
        assert format_points(42) == "42 points"

    def test_item_url(self):
        assert item_url(8863) == "https://news.ycombinator.com/item?id=8863"

    def test_wrap_text(self):
        assert wrap_text("aaa bbb ccc", 7) == ["aaa bbb", "ccc"]
        assert wrap_text("", 10) == []


class TestEntries:
    """Tests for building entries from API payloads."""

    def test_story(self):
        entry = entry_from_story({"id": 1, "title": "Hi", "score": 10, "by": "pg", "url": "https://a"})
        assert entry == Entry(id="1", title="Hi", detail="10 points by pg", url="https://a")

    def test_story_without_url_links_to_discussion(self):
        entry = entry_from_story({"id": 5, "title": "Ask HN", "score": 1, "by": "x"})
        assert entry.url is None
        assert entry.detail == "1 point by x"
        assert entry.resolved_url() == "https://news.ycombinator.com/item?id=5"

    def test_search_hit(self):
        entry = entry_from_search_hit({"objectID": "9", "title": "Rust", "points": 3, "author": "a"})
        assert entry.id == "9"
        assert entry.detail == "3 points by a"

    def test_comment_hit(self):
        entry = entry_from_comment_hit({
            "objectID": "9",
            "author": "carol",
            "comment_text": "<p>Nice</p>",
            "story_title": "Story",
            "story_id": 5,
        })
        assert entry.title == "Story"
        assert entry.detail == "carol: Nice"
        assert entry.url == "https://news.ycombinator.com/item?id=5"

    def test_comment_hit_without_story(self):
        entry = entry_from_comment_hit({"objectID": "9", "comment_text": ""})
        assert entry.title == "Comment thread"
        assert entry.detail is None
        assert entry.url is None

    def test_dict_round_trip(self):
        entry = Entry(id="3", title="T", detail=None, url="https://b")
        assert Entry.from_dict(entry.to_dict()) == entry

    def test_comment_node_bookmark_entry(self):
        node = CommentNode(id=12, body="x" * 200, depth=0, author="dan")
        entry = node.to_bookmark_entry()
        assert entry.id == "12"
        assert entry.title == "Comment by dan"
        assert entry.detail == "x" * 120 + "..."
        assert entry.url == "https://news.ycombinator.com/item?id=12"
