"""
Thumbnail download, validation and re-hosting.

Thumbnails are never hotlinked: a remote image is downloaded (hard time box,
size cap, MIME allowlist) and re-uploaded to the owned bucket. Any failure
along the way means "no thumbnail", which is a normal outcome.
"""

import socket
import threading
import time
from typing import Optional, Tuple

import requests

from . import config
from .html_utils import USER_AGENT
from .models import INSTAGRAM, THUMBNAIL_DIRECT, THUMBNAIL_NONE
from .storage import StoreError

CHUNK_SIZE = 64 * 1024


def thumbnail_headers(platform: str) -> dict:
    headers = {'User-Agent': USER_AGENT}

    # Instagram's CDN rejects or throttles image requests without a referer
    if platform == INSTAGRAM:
        headers['referer'] = 'https://www.instagram.com/'
        headers['accept'] = 'image/avif,image/webp,image/apng,image/svg+xml,image/*,*/*;q=0.8'

    return headers


def normalize_content_type(value: Optional[str]) -> str:
    """'image/JPEG; charset=binary' -> 'image/jpeg'"""
    if not value:
        return ''
    return value.split(';')[0].strip().lower()


def thumbnail_key(platform: str, record_id: str, content_type: str) -> str:
    """Deterministic blob key, so re-runs overwrite the same object."""
    ext = content_type.split('/')[-1]
    return f"{platform}/{record_id}.{ext}"


def _shutdown_socket(response) -> None:
    """Shut the response's socket so a read blocked in another thread returns."""
    connection = getattr(response.raw, 'connection', None)
    sock = getattr(connection, 'sock', None)
    if sock is None:
        return
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError as e:
        # Already closed by the reading thread
        print(f"Thumbnail socket shutdown skipped: {e}")


def download_thumbnail(
    url: str,
    platform: str,
    timeout: float = None,
    max_bytes: int = None,
    content_types: tuple = None,
) -> Tuple[Optional[bytes], Optional[str], Optional[str]]:
    """
    Download a thumbnail image. Returns (data, content_type, error).

    The whole download must finish within timeout seconds of wall-clock time,
    the response must declare one of content_types and the body must be
    non-empty and no larger than max_bytes.

    Connecting and waiting for the response headers each get half of the
    budget. Once headers arrive a timer shuts the socket down at the deadline,
    so a server trickling bytes cannot hold the download open.
    """
    timeout = timeout if timeout is not None else config.THUMBNAIL_TIMEOUT_SECONDS
    max_bytes = max_bytes if max_bytes is not None else config.THUMBNAIL_MAX_BYTES
    content_types = content_types or config.THUMBNAIL_CONTENT_TYPES

    timed_out_error = f'Thumbnail download timed out after {timeout}s'
    deadline = time.monotonic() + timeout
    expired = threading.Event()
    timer = None

    def abort(response):
        expired.set()
        _shutdown_socket(response)

    try:
        with requests.get(
            url,
            headers=thumbnail_headers(platform),
            timeout=(timeout / 2, timeout / 2),
            stream=True,
        ) as response:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return None, None, timed_out_error

            timer = threading.Timer(remaining, abort, args=(response,))
            timer.daemon = True
            timer.start()

            if not response.ok:
                return None, None, f'Thumbnail fetch failed: HTTP {response.status_code}'

            content_type = normalize_content_type(response.headers.get('Content-Type'))
            if content_type not in content_types:
                return None, None, f'Invalid thumbnail content type: {content_type or "missing"}'

            declared = response.headers.get('Content-Length', '')
            if declared.isdigit() and int(declared) > max_bytes:
                return None, None, f'Thumbnail too large: {declared} bytes'

            chunks = []
            size = 0
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if expired.is_set() or time.monotonic() > deadline:
                    return None, None, timed_out_error
                size += len(chunk)
                if size > max_bytes:
                    return None, None, f'Thumbnail too large: over {max_bytes} bytes'
                chunks.append(chunk)

            # A shutdown socket reads as EOF, possibly without an error
            if expired.is_set():
                return None, None, timed_out_error
            if size == 0:
                return None, None, 'Thumbnail is empty'

            return b''.join(chunks), content_type, None

    except requests.exceptions.Timeout:
        return None, None, timed_out_error
    except requests.exceptions.RequestException as e:
        if expired.is_set():
            return None, None, timed_out_error
        return None, None, f'Thumbnail download failed: {str(e)}'
    finally:
        if timer is not None:
            timer.cancel()


def rehost_thumbnail(blobs, platform: str, record_id: str, remote_url: Optional[str], cfg=None) -> dict:
    """
    Copy a remote thumbnail into the blob store.

    Returns the record fields to update: thumbnail_source is 'direct' with a
    thumbnail_url into our bucket, or 'none'.
    """
    if not remote_url:
        return {'thumbnail_source': THUMBNAIL_NONE}

    print(f"Downloading thumbnail from: {remote_url}")

    kwargs = {}
    if cfg is not None:
        kwargs = {
            'timeout': cfg.thumbnail_timeout,
            'max_bytes': cfg.thumbnail_max_bytes,
            'content_types': cfg.thumbnail_content_types,
        }

    data, content_type, error = download_thumbnail(remote_url, platform, **kwargs)
    if error:
        print(f"Skipping thumbnail: {error}")
        return {'thumbnail_source': THUMBNAIL_NONE}

    key = thumbnail_key(platform, record_id, content_type)
    try:
        blobs.upload(key, data, content_type, upsert=True)
    except StoreError as e:
        print(f"Thumbnail upload failed: {e}")
        return {'thumbnail_source': THUMBNAIL_NONE}

    public_url = blobs.get_public_url(key)
    print(f"Thumbnail uploaded: {public_url}")
    return {
        'thumbnail_url': public_url,
        'thumbnail_source': THUMBNAIL_DIRECT,
    }
