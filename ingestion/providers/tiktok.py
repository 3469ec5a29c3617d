"""TikTok: oEmbed, then Open Graph, then cover URLs from the embedded JSON."""

import re
from typing import Optional
from urllib.parse import urlparse

from ..allowlist import get_hostname, host_matches
from ..html_utils import extract_og_tags, fetch_oembed, fetch_page, find_embedded_image
from ..models import TIKTOK, canonical_result
from ..title_utils import clean_title
from .base import Provider, metadata_fetcher

OEMBED_ENDPOINT = 'https://www.tiktok.com/oembed'
SHORTLINK_HOSTS = ('vm.tiktok.com', 'vt.tiktok.com')

VIDEO_PATH_RE = re.compile(r'^(/(?:@[^/]+/)?video/(\d+))')

COVER_PATTERNS = [
    r'"cover":"([^"]+)"',
    r'"originCover":"([^"]+)"',
    r'"dynamicCover":"([^"]+)"',
]


def can_handle(url: str) -> bool:
    return host_matches(url, 'tiktok.com')


def is_shortlink(url: str) -> bool:
    if get_hostname(url) in SHORTLINK_HOSTS:
        return True
    return urlparse(url.strip()).path.startswith('/t/')


def canonicalize(url: str) -> Optional[dict]:
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return None

    # Shortlinks only resolve over the network; fetch_metadata follows the redirect
    if is_shortlink(url):
        print(f"TikTok shortlink detected, keeping as-is: {url}")
        return canonical_result(url.strip(), TIKTOK)

    match = VIDEO_PATH_RE.match(parsed.path)
    if not match:
        print(f"Could not extract TikTok video ID from: {url}")
        return None

    canonical = f"https://www.tiktok.com{match.group(1)}"
    print(f"TikTok canonical: {canonical}")
    return canonical_result(canonical, TIKTOK, match.group(2))


@metadata_fetcher(TIKTOK)
def fetch_metadata(canonical_url: str) -> dict:
    print(f"Fetching TikTok metadata for: {canonical_url}")

    data, error = fetch_oembed(OEMBED_ENDPOINT, canonical_url)
    if data:
        return {
            'title': clean_title(data.get('title')),
            'creator': data.get('author_name') or None,
            'thumb_remote_url': data.get('thumbnail_url') or None,
        }

    print(f"TikTok oEmbed failed ({error}), scraping page")

    page, error = fetch_page(canonical_url, headers={'referer': 'https://www.tiktok.com/'})
    if not page:
        print(f"TikTok page scrape failed: {error}")
        return {}

    tags = extract_og_tags(page)
    thumb_url = tags['image']
    if not thumb_url:
        thumb_url = find_embedded_image(page, COVER_PATTERNS)
        if thumb_url:
            print("Found TikTok cover in embedded JSON")

    return {
        'title': clean_title(tags['title']),
        'thumb_remote_url': thumb_url,
    }


PROVIDER = Provider(TIKTOK, can_handle, canonicalize, fetch_metadata)
