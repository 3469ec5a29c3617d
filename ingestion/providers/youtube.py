"""YouTube: oEmbed, then a higher-resolution thumbnail probe, then Open Graph."""

import re
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlparse

from ..allowlist import get_hostname, host_matches
from ..html_utils import extract_og_tags, fetch_oembed, fetch_page, parse_duration, url_exists
from ..models import YOUTUBE, canonical_result
from ..title_utils import clean_title
from .base import Provider, metadata_fetcher

OEMBED_ENDPOINT = 'https://www.youtube.com/oembed'
THUMBNAIL_BASE = 'https://i.ytimg.com/vi'

VIDEO_ID_RE = re.compile(r'^[A-Za-z0-9_-]+$')
PATH_ID_RE = re.compile(r'^/(?:embed|v|shorts|live)/([^/?#]+)')


def can_handle(url: str) -> bool:
    return host_matches(url, 'youtube.com', 'youtu.be')


def extract_video_id(url: str) -> Optional[str]:
    """Pull the video ID out of any supported YouTube URL shape."""
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return None

    video_id = None
    if get_hostname(url) == 'youtu.be':
        video_id = parsed.path.lstrip('/').split('/')[0]
    elif parsed.path.rstrip('/') == '/watch':
        video_id = parse_qs(parsed.query).get('v', [None])[0]
    else:
        match = PATH_ID_RE.match(parsed.path)
        if match:
            video_id = match.group(1)

    if video_id and VIDEO_ID_RE.match(video_id):
        return video_id
    return None


def canonicalize(url: str) -> Optional[dict]:
    video_id = extract_video_id(url)
    if not video_id:
        print(f"Could not extract YouTube video ID from: {url}")
        return None

    params = {'v': video_id}
    timestamp = parse_qs(urlparse(url.strip()).query).get('t', [None])[0]
    if timestamp:
        params['t'] = timestamp

    canonical = f"https://www.youtube.com/watch?{urlencode(params)}"
    print(f"YouTube canonical: {canonical}")
    return canonical_result(canonical, YOUTUBE, video_id)


def best_thumbnail(video_id: str) -> str:
    """maxresdefault when it exists, otherwise hqdefault (always present)."""
    max_res = f"{THUMBNAIL_BASE}/{video_id}/maxresdefault.jpg"
    if url_exists(max_res):
        return max_res
    return f"{THUMBNAIL_BASE}/{video_id}/hqdefault.jpg"


@metadata_fetcher(YOUTUBE)
def fetch_metadata(canonical_url: str) -> dict:
    print(f"Fetching YouTube metadata for: {canonical_url}")

    data, error = fetch_oembed(OEMBED_ENDPOINT, canonical_url, extra_params={'format': 'json'})
    if data:
        thumb_url = data.get('thumbnail_url')
        video_id = extract_video_id(canonical_url)
        if thumb_url and video_id:
            thumb_url = best_thumbnail(video_id)

        return {
            'title': clean_title(data.get('title')),
            'creator': data.get('author_name') or None,
            'thumb_remote_url': thumb_url or None,
        }

    print(f"YouTube oEmbed failed ({error}), trying Open Graph")

    page, error = fetch_page(canonical_url)
    if not page:
        print(f"YouTube Open Graph fallback failed: {error}")
        return {}

    tags = extract_og_tags(page)
    return {
        'title': clean_title(tags['title']),
        'creator': tags['author'],
        'thumb_remote_url': tags['image'],
        'duration_seconds': parse_duration(tags['duration']),
        'published_at': tags['published'],
        'description': tags['description'],
    }


PROVIDER = Provider(YOUTUBE, can_handle, canonicalize, fetch_metadata)
