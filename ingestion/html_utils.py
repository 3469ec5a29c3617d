"""
HTTP and HTML helpers shared by the platform providers.

Every fetch helper returns a (result, error) tuple instead of raising, so a
flaky origin platform can only ever degrade metadata to None.
"""

import html
import re
from typing import Callable, Iterable, Optional, Tuple

import requests
from bs4 import BeautifulSoup

from . import config

USER_AGENT = 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36'

IMAGE_EXTENSION_RE = re.compile(r'\.(jpg|jpeg|png|webp)($|\?)', re.I)
ISO_DURATION_RE = re.compile(r'^P(?:(\d+)D)?T?(?:(\d+)H)?(?:(\d+)M)?(?:(\d+(?:\.\d+)?)S)?$')


def fetch_page(url: str, headers: dict = None, timeout: float = None) -> Tuple[Optional[str], Optional[str]]:
    """Fetch a page, following redirects. Returns (html, error)."""
    request_headers = {
        'User-Agent': USER_AGENT,
        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
        'Accept-Language': 'en-US,en;q=0.5',
    }
    if headers:
        request_headers.update(headers)

    try:
        response = requests.get(
            url,
            headers=request_headers,
            timeout=timeout or config.METADATA_TIMEOUT_SECONDS,
            allow_redirects=True,
        )
        response.raise_for_status()
        return response.text, None

    except requests.exceptions.Timeout:
        return None, 'Request timed out'
    except requests.exceptions.HTTPError as e:
        return None, f'HTTP error: {e.response.status_code}'
    except requests.exceptions.RequestException as e:
        return None, f'Request failed: {str(e)}'


def fetch_oembed(endpoint: str, url: str, headers: dict = None, extra_params: dict = None) -> Tuple[Optional[dict], Optional[str]]:
    """Query an oEmbed endpoint for url. Returns (data, error)."""
    params = {'url': url}
    if extra_params:
        params.update(extra_params)

    try:
        response = requests.get(
            endpoint,
            params=params,
            headers=headers or {'User-Agent': USER_AGENT},
            timeout=config.METADATA_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
        data = response.json()
    except requests.exceptions.Timeout:
        return None, 'oEmbed request timed out'
    except requests.exceptions.HTTPError as e:
        return None, f'oEmbed HTTP error: {e.response.status_code}'
    except requests.exceptions.RequestException as e:
        return None, f'oEmbed request failed: {str(e)}'
    except ValueError:
        return None, 'oEmbed returned invalid JSON'

    if not isinstance(data, dict):
        return None, 'oEmbed returned unexpected payload'
    return data, None


def url_exists(url: str, timeout: float = None) -> bool:
    """HEAD probe - True only for a 2xx response."""
    try:
        response = requests.head(
            url,
            headers={'User-Agent': USER_AGENT},
            timeout=timeout or config.METADATA_TIMEOUT_SECONDS,
            allow_redirects=True,
        )
        return response.ok
    except requests.exceptions.RequestException:
        return False


def _meta_content(soup: BeautifulSoup, **attrs) -> Optional[str]:
    tag = soup.find('meta', attrs=attrs)
    if tag and tag.get('content'):
        return tag.get('content').strip() or None
    return None


def extract_og_tags(page_html: str) -> dict:
    """Extract Open Graph (and a few related) meta tags from a page."""
    tags = {
        'title': None,
        'image': None,
        'description': None,
        'site_name': None,
        'author': None,
        'duration': None,
        'published': None,
    }

    if not page_html:
        return tags

    soup = BeautifulSoup(page_html, 'html.parser')

    tags['title'] = _meta_content(soup, property='og:title')
    tags['image'] = (
        _meta_content(soup, property='og:image:secure_url') or
        _meta_content(soup, property='og:image') or
        _meta_content(soup, name='twitter:image')
    )
    tags['description'] = (
        _meta_content(soup, property='og:description') or
        _meta_content(soup, name='description')
    )
    tags['site_name'] = _meta_content(soup, property='og:site_name')
    tags['author'] = (
        _meta_content(soup, property='og:video:author') or
        _meta_content(soup, name='author')
    )
    tags['duration'] = (
        _meta_content(soup, property='og:video:duration') or
        _meta_content(soup, itemprop='duration')
    )
    tags['published'] = (
        _meta_content(soup, property='article:published_time') or
        _meta_content(soup, itemprop='datePublished') or
        _meta_content(soup, itemprop='uploadDate')
    )

    return tags


def parse_duration(value) -> Optional[int]:
    """Parse seconds ("253", 253.4) or ISO 8601 durations ("PT4M13S")."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(round(value)) if value >= 0 else None

    value = str(value).strip()
    if not value:
        return None
    if re.fullmatch(r'\d+(\.\d+)?', value):
        return int(round(float(value)))

    match = ISO_DURATION_RE.match(value.upper())
    if not match or not any(match.groups()):
        return None
    days, hours, minutes, seconds = match.groups()
    total = (
        int(days or 0) * 86400 +
        int(hours or 0) * 3600 +
        int(minutes or 0) * 60 +
        float(seconds or 0)
    )
    return int(round(total))


def unescape_embedded_url(raw: str) -> Optional[str]:
    """
    Turn a URL lifted out of inline JSON/HTML into a usable absolute https URL.

    Handles \\u002F and \\u0026 escapes, escaped slashes (\\/), HTML entities
    (&amp;) and protocol-relative or scheme-less URLs.
    """
    if not raw:
        return None

    cleaned = re.sub(
        r'\\u([0-9a-fA-F]{4})',
        lambda m: chr(int(m.group(1), 16)),
        raw,
    )
    # Some pages double-encode the escape and leave a bare "u002F"
    cleaned = cleaned.replace('u002F', '/').replace('u0026', '&')
    cleaned = cleaned.replace('\\', '')
    cleaned = html.unescape(cleaned).strip()

    if not cleaned:
        return None
    if cleaned.startswith('//'):
        cleaned = 'https:' + cleaned
    elif cleaned.startswith('http://'):
        cleaned = 'https://' + cleaned[len('http://'):]
    elif not cleaned.startswith('https://'):
        cleaned = 'https://' + cleaned.lstrip('/')

    return cleaned


def looks_like_image_url(url: str, host_markers: Iterable[str] = ()) -> bool:
    """True if url mentions one of host_markers or ends in an image extension."""
    if not url:
        return False
    lowered = url.lower()
    if any(marker in lowered for marker in host_markers):
        return True
    return bool(IMAGE_EXTENSION_RE.search(url))


def find_embedded_image(page_html: str, patterns: Iterable, is_valid: Callable[[str], bool] = None) -> Optional[str]:
    """
    Scan raw HTML for image URLs buried in inline JSON.

    Patterns are tried in order; each capture is unescaped and, when is_valid
    is given, must pass it before being accepted. First hit wins.
    """
    if not page_html:
        return None

    for pattern in patterns:
        match = re.search(pattern, page_html)
        if not match or not match.group(1):
            continue
        candidate = unescape_embedded_url(match.group(1))
        if not candidate:
            continue
        if is_valid is None or is_valid(candidate):
            return candidate

    return None
