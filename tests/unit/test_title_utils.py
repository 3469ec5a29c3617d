"""
Unit tests for title cleanup.
"""

from ingestion.title_utils import MAX_TITLE_LENGTH, clean_title, sanitize_title, truncate_title


class TestTruncateTitle:
    """Tests for truncate_title()"""

    def test_short_title_unchanged(self):
        assert truncate_title("Hello World", 70) == ("Hello World", False)

    def test_cuts_at_word_boundary(self):
        assert truncate_title("This is a very long title that exceeds the limit", 20) == ("This is a very long", True)

    def test_single_long_word_gets_ellipsis(self):
        title, truncated = truncate_title("a" * 50, 20)
        assert title == "a" * 17 + "..."
        assert truncated is True

    def test_empty(self):
        assert truncate_title("") == ('', False)
        assert truncate_title(None) == ('', False)

    def test_default_limit(self):
        title, truncated = truncate_title("word " * 100)
        assert truncated is True
        assert len(title) <= MAX_TITLE_LENGTH


class TestSanitizeTitle:
    """Tests for sanitize_title()"""

    def test_decodes_entities(self):
        assert sanitize_title("Tom &amp; Jerry &#39;Classic&#39;") == "Tom & Jerry 'Classic'"

    def test_control_characters_removed(self):
        assert sanitize_title("Line one\x00\nLine\ttwo") == "Line one Line two"

    def test_whitespace_normalized(self):
        assert sanitize_title("   lots    of   space  ") == "lots of space"


class TestCleanTitle:
    """Tests for clean_title()"""

    def test_none_and_blank(self):
        assert clean_title(None) is None
        assert clean_title("") is None
        assert clean_title("  \n\t ") is None

    def test_caption_length_title_capped(self):
        caption = "Best pasta of my life " * 30
        cleaned = clean_title(caption)
        assert len(cleaned) <= MAX_TITLE_LENGTH
        assert cleaned.startswith("Best pasta of my life")
