"""Snapchat: follow shortlink redirects, Open Graph, then embedded JSON keys."""

import re
from typing import Optional
from urllib.parse import urlparse

from ..allowlist import get_hostname, host_matches
from ..html_utils import USER_AGENT, extract_og_tags, fetch_page, find_embedded_image, looks_like_image_url
from ..models import SNAPCHAT, canonical_result
from ..title_utils import clean_title
from .base import Provider, metadata_fetcher

FALLBACK_TITLE = 'Snapchat Story'

SPOTLIGHT_RE = re.compile(r'^/spotlight/([A-Za-z0-9_-]+)')
STORY_RE = re.compile(r'/p/([^/?#]+)')

IMAGE_PATTERNS = [
    r'"thumbnailUrl":"([^"]+)"',
    r'"thumbnail":"([^"]+)"',
    r'"coverImageUrl":"([^"]+)"',
    r'"poster":"([^"]+)"',
]
IMAGE_HOST_MARKERS = ('snapchat', 'sc-cdn')


def can_handle(url: str) -> bool:
    return host_matches(url, 'snapchat.com')


def canonicalize(url: str) -> Optional[dict]:
    url = url.strip()
    try:
        parsed = urlparse(url)
    except ValueError:
        return None

    hostname = get_hostname(url)

    # Shortlinks resolve only over the network; fetch_metadata follows the redirect
    if hostname == 't.snapchat.com' or parsed.path.startswith('/t/'):
        print(f"Snapchat shortlink detected, keeping as-is: {url}")
        return canonical_result(url, SNAPCHAT)

    spotlight = SPOTLIGHT_RE.match(parsed.path)
    if spotlight:
        canonical = f"https://www.snapchat.com/spotlight/{spotlight.group(1)}"
        print(f"Snapchat canonical: {canonical}")
        return canonical_result(canonical, SNAPCHAT, spotlight.group(1))

    story = STORY_RE.search(parsed.path)
    if story:
        canonical = f"https://{hostname}{parsed.path}"
        print(f"Snapchat canonical: {canonical}")
        return canonical_result(canonical, SNAPCHAT, story.group(1))

    print(f"Could not extract Snapchat ID, using URL as-is: {url}")
    return canonical_result(url, SNAPCHAT)


def is_snapchat_image(url: str) -> bool:
    return looks_like_image_url(url, IMAGE_HOST_MARKERS)


@metadata_fetcher(SNAPCHAT, fallback_title=FALLBACK_TITLE)
def fetch_metadata(canonical_url: str) -> dict:
    print(f"Fetching Snapchat metadata for: {canonical_url}")

    page, error = fetch_page(canonical_url, headers={
        'User-Agent': USER_AGENT,
        'referer': 'https://www.snapchat.com/',
    })
    if not page:
        print(f"Snapchat fetch failed: {error}")
        return {'title': FALLBACK_TITLE}

    tags = extract_og_tags(page)
    thumb_url = tags['image']
    if not thumb_url:
        thumb_url = find_embedded_image(page, IMAGE_PATTERNS, is_valid=is_snapchat_image)
        if thumb_url:
            print("Found Snapchat thumbnail via JSON pattern")

    title = clean_title(tags['title'])
    print(f"Snapchat metadata: title={title}, thumb={'found' if thumb_url else 'none'}")

    return {
        'title': title or FALLBACK_TITLE,
        'creator': tags['author'],
        'thumb_remote_url': thumb_url,
        'description': tags['description'],
    }


PROVIDER = Provider(SNAPCHAT, can_handle, canonicalize, fetch_metadata)
