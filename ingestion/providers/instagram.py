"""
Instagram provider.

There is no public oEmbed, so metadata comes from the post page itself.
Instagram only returns the metadata-bearing HTML variant when the request
looks like its own web app (see request_headers); otherwise the page is a
bare login shell.
"""

import re
from typing import Optional
from urllib.parse import urlparse

from .. import config
from ..allowlist import host_matches
from ..html_utils import USER_AGENT, extract_og_tags, fetch_page, find_embedded_image, looks_like_image_url
from ..models import INSTAGRAM, canonical_result
from ..title_utils import clean_title
from .base import Provider, metadata_fetcher

FALLBACK_TITLE = 'Instagram Reel'

POST_PATH_RE = re.compile(r'^/(reels?|p|tv)/([^/?#]+)')

# Ordered from most to least reliable
IMAGE_PATTERNS = [
    r'"display_url":"([^"]+)"',
    r'"thumbnail_src":"([^"]+)"',
    r'"src":"(https:[^"]*scontent[^"]*\.jpg[^"]*)"',
    r'"src":"(https:[^"]*cdninstagram[^"]*\.jpg[^"]*)"',
    r'"image_versions2":\s*\{\s*"candidates":\s*\[\s*\{\s*"url":"([^"]+)"',
    r'"thumbnail_url":"([^"]+)"',
    r'"node":\s*\{[^}]*"display_url":"([^"]+)"',
    r'"media_url":"([^"]+)"',
]
IMAGE_HOST_MARKERS = ('instagram', 'scontent', 'cdninstagram', 'fbcdn')

CREATOR_PATTERNS = [
    re.compile(r'\(@([A-Za-z0-9._]+)\)'),
    re.compile(r'^@([A-Za-z0-9._]+)'),
]


def request_headers() -> dict:
    return {
        'User-Agent': USER_AGENT,
        'referer': 'https://www.instagram.com/',
        'sec-fetch-dest': 'document',
        'sec-fetch-mode': 'navigate',
        'sec-fetch-site': 'cross-site',
        'sec-fetch-user': '?1',
        'upgrade-insecure-requests': '1',
        'x-instagram-ajax': '1',
        'x-asbd-id': config.INSTAGRAM_ASBD_ID,
        'x-ig-app-id': config.INSTAGRAM_APP_ID,
    }


def can_handle(url: str) -> bool:
    return host_matches(url, 'instagram.com')


def canonicalize(url: str) -> Optional[dict]:
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return None

    match = POST_PATH_RE.match(parsed.path)
    if not match:
        print(f"Could not extract Instagram post ID from: {url}")
        return None

    # /reels/ID is the same reel as /reel/ID
    kind = 'reel' if match.group(1).startswith('reel') else match.group(1)
    post_id = match.group(2)
    canonical = f"https://www.instagram.com/{kind}/{post_id}/"
    print(f"Instagram canonical: {canonical}")
    return canonical_result(canonical, INSTAGRAM, post_id)


def extract_creator(title: str) -> Optional[str]:
    """Instagram OG titles usually carry the handle as "(@username)"."""
    if not title:
        return None
    for pattern in CREATOR_PATTERNS:
        match = pattern.search(title)
        if match:
            return '@' + match.group(1)
    return None


def is_instagram_image(url: str) -> bool:
    return looks_like_image_url(url, IMAGE_HOST_MARKERS)


@metadata_fetcher(INSTAGRAM, fallback_title=FALLBACK_TITLE)
def fetch_metadata(canonical_url: str) -> dict:
    print(f"Fetching Instagram metadata for: {canonical_url}")

    page, error = fetch_page(canonical_url, headers=request_headers())
    if not page:
        print(f"Instagram fetch failed: {error}")
        return {'title': FALLBACK_TITLE}

    print(f"Instagram HTML length: {len(page)} characters")

    tags = extract_og_tags(page)
    title = clean_title(tags['title'])
    thumb_url = tags['image']

    if not thumb_url:
        print("No og:image found, trying Instagram JSON patterns")
        thumb_url = find_embedded_image(page, IMAGE_PATTERNS, is_valid=is_instagram_image)

    creator = extract_creator(title)

    print(f"Instagram metadata: title={title}, thumb={'found' if thumb_url else 'none'}, creator={creator}")

    return {
        'title': title or FALLBACK_TITLE,
        'creator': creator,
        'thumb_remote_url': thumb_url,
        'description': tags['description'],
    }


PROVIDER = Provider(INSTAGRAM, can_handle, canonicalize, fetch_metadata)
