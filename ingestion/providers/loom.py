"""Loom: oEmbed (includes a description), then Open Graph."""

import re
from typing import Optional
from urllib.parse import urlparse

from ..allowlist import host_matches
from ..html_utils import extract_og_tags, fetch_oembed, fetch_page, parse_duration
from ..models import LOOM, canonical_result
from ..title_utils import clean_title
from .base import Provider, metadata_fetcher

OEMBED_ENDPOINT = 'https://www.loom.com/v1/oembed'

SHARE_PATH_RE = re.compile(r'^/(?:share|embed)/([A-Za-z0-9_-]+)')


def can_handle(url: str) -> bool:
    return host_matches(url, 'loom.com')


def canonicalize(url: str) -> Optional[dict]:
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return None

    match = SHARE_PATH_RE.match(parsed.path)
    if not match:
        print(f"Could not extract Loom video ID from: {url}")
        return None

    video_id = match.group(1)
    canonical = f"https://www.loom.com/share/{video_id}"
    print(f"Loom canonical: {canonical}")
    return canonical_result(canonical, LOOM, video_id)


@metadata_fetcher(LOOM)
def fetch_metadata(canonical_url: str) -> dict:
    print(f"Fetching Loom metadata for: {canonical_url}")

    data, error = fetch_oembed(OEMBED_ENDPOINT, canonical_url)
    if data:
        return {
            'title': clean_title(data.get('title')),
            'creator': data.get('author_name') or None,
            'thumb_remote_url': data.get('thumbnail_url') or None,
            'description': data.get('description') or None,
            'duration_seconds': parse_duration(data.get('duration')),
        }

    print(f"Loom oEmbed failed ({error}), trying Open Graph")

    page, error = fetch_page(canonical_url)
    if not page:
        print(f"Loom fetch failed: {error}")
        return {}

    tags = extract_og_tags(page)
    print(f"Loom metadata extracted: title={tags['title']}, creator={tags['author']}, thumbnail={bool(tags['image'])}")

    return {
        'title': clean_title(tags['title']),
        'creator': tags['author'],
        'thumb_remote_url': tags['image'],
        'description': tags['description'],
    }


PROVIDER = Provider(LOOM, can_handle, canonicalize, fetch_metadata)
