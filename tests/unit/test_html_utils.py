"""
Unit tests for the HTML scraping helpers.
"""

import pytest

from ingestion.html_utils import (
    extract_og_tags,
    find_embedded_image,
    looks_like_image_url,
    parse_duration,
    unescape_embedded_url,
)


class TestExtractOgTags:
    """Tests for extract_og_tags()"""

    def test_basic_tags(self, youtube_watch_html):
        tags = extract_og_tags(youtube_watch_html)

        assert tags['title'] == "Rick Astley - Never Gonna Give You Up"
        assert tags['image'] == "https://i.ytimg.com/vi/dQw4w9WgXcQ/maxresdefault.jpg"
        assert tags['duration'] == "PT3M33S"
        assert tags['published'] == "2009-10-25"

    def test_secure_url_preferred(self):
        page = """
        <html><head>
            <meta property="og:image" content="http://cdn.example.com/a.jpg">
            <meta property="og:image:secure_url" content="https://cdn.example.com/a.jpg">
        </head></html>
        """
        assert extract_og_tags(page)['image'] == "https://cdn.example.com/a.jpg"

    def test_twitter_image_fallback(self):
        page = '<html><head><meta name="twitter:image" content="https://cdn.example.com/t.png"></head></html>'
        assert extract_og_tags(page)['image'] == "https://cdn.example.com/t.png"

    def test_author_and_description(self):
        page = """
        <html><head>
            <meta name="author" content="Jane Doe">
            <meta name="description" content="A walkthrough">
        </head></html>
        """
        tags = extract_og_tags(page)
        assert tags['author'] == "Jane Doe"
        assert tags['description'] == "A walkthrough"

    def test_entities_decoded_by_parser(self, instagram_reel_html):
        tags = extract_og_tags(instagram_reel_html)
        assert "&amp;" not in tags['image']
        assert "&_nc_ht=scontent" in tags['image']

    def test_empty_content_ignored(self):
        page = '<html><head><meta property="og:title" content="   "></head></html>'
        assert extract_og_tags(page)['title'] is None

    @pytest.mark.parametrize('page', [None, '', '<html></html>'])
    def test_no_tags(self, page):
        assert all(value is None for value in extract_og_tags(page).values())


class TestParseDuration:
    """Tests for parse_duration()"""

    @pytest.mark.parametrize('value,expected', [
        ("PT3M33S", 213),
        ("PT1H2M3S", 3723),
        ("PT45S", 45),
        ("P1DT1H", 90000),
        ("pt2m", 120),
        ("253", 253),
        ("253.6", 254),
        (253, 253),
        (12.4, 12),
    ])
    def test_valid(self, value, expected):
        assert parse_duration(value) == expected

    @pytest.mark.parametrize('value', [None, '', 'PT', 'three minutes', -5, True])
    def test_invalid(self, value):
        assert parse_duration(value) is None


class TestUnescapeEmbeddedUrl:
    """Tests for unescape_embedded_url()"""

    def test_unicode_escapes(self):
        raw = "https:\\u002F\\u002Fscontent.cdninstagram.com\\u002Fv\\u002Fa.jpg?x=1\\u0026y=2"
        assert unescape_embedded_url(raw) == "https://scontent.cdninstagram.com/v/a.jpg?x=1&y=2"

    def test_escaped_slashes(self):
        assert unescape_embedded_url("https:\\/\\/p16.tiktokcdn.com\\/cover.jpeg") == "https://p16.tiktokcdn.com/cover.jpeg"

    def test_html_entities(self):
        assert unescape_embedded_url("https://cdn.example.com/a.jpg?x=1&amp;y=2") == "https://cdn.example.com/a.jpg?x=1&y=2"

    def test_protocol_relative(self):
        assert unescape_embedded_url("//cdn.example.com/a.jpg") == "https://cdn.example.com/a.jpg"

    def test_http_upgraded(self):
        assert unescape_embedded_url("http://cdn.example.com/a.jpg") == "https://cdn.example.com/a.jpg"

    def test_missing_scheme(self):
        assert unescape_embedded_url("cdn.example.com/a.jpg") == "https://cdn.example.com/a.jpg"

    def test_empty(self):
        assert unescape_embedded_url('') is None
        assert unescape_embedded_url(None) is None


class TestFindEmbeddedImage:
    """Tests for find_embedded_image()"""

    def test_first_valid_pattern_wins(self):
        page = '{"thumb":"https://cdn.example.com/page.html","cover":"https:\\/\\/cdn.example.com\\/c.jpg"}'
        result = find_embedded_image(
            page,
            [r'"thumb":"([^"]+)"', r'"cover":"([^"]+)"'],
            is_valid=lambda url: looks_like_image_url(url),
        )
        assert result == "https://cdn.example.com/c.jpg"

    def test_no_validator_accepts_first_match(self):
        page = '{"cover":"https://p16.tiktokcdn.com/obj"}'
        assert find_embedded_image(page, [r'"cover":"([^"]+)"']) == "https://p16.tiktokcdn.com/obj"

    def test_no_match(self):
        assert find_embedded_image('<html></html>', [r'"cover":"([^"]+)"']) is None
        assert find_embedded_image(None, [r'"cover":"([^"]+)"']) is None


class TestLooksLikeImageUrl:
    """Tests for looks_like_image_url()"""

    def test_extension(self):
        assert looks_like_image_url("https://cdn.example.com/a.webp?x=1") is True

    def test_host_marker(self):
        assert looks_like_image_url("https://scontent.xx.fbcdn.net/v/obj", ('fbcdn',)) is True

    def test_neither(self):
        assert looks_like_image_url("https://example.com/page") is False
        assert looks_like_image_url(None) is False
