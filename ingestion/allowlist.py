"""Hostname allowlist - the first gate every shared link goes through."""

from urllib.parse import urlparse

ALLOWED_SCHEMES = ('http', 'https')

ALLOWED_HOSTNAMES = frozenset([
    # YouTube
    'youtube.com',
    'www.youtube.com',
    'm.youtube.com',
    'youtu.be',

    # TikTok
    'tiktok.com',
    'www.tiktok.com',
    'm.tiktok.com',
    'vm.tiktok.com',
    'vt.tiktok.com',

    # Instagram
    'instagram.com',
    'www.instagram.com',
    'm.instagram.com',

    # Snapchat
    'snapchat.com',
    'www.snapchat.com',
    'story.snapchat.com',
    't.snapchat.com',

    # Loom
    'loom.com',
    'www.loom.com',
])


def get_hostname(url) -> str:
    """Lower-cased hostname of url, or '' if it cannot be parsed."""
    if not isinstance(url, str):
        return ''
    try:
        return (urlparse(url.strip()).hostname or '').lower()
    except ValueError:
        return ''


def is_allowed_hostname(url, allowed_hostnames=ALLOWED_HOSTNAMES) -> bool:
    """Check if url is an http(s) URL on one of the allowed hostnames.

    Never raises - anything unparseable is simply not allowed.
    """
    if not isinstance(url, str):
        return False
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False

    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        return False

    return (parsed.hostname or '').lower() in allowed_hostnames


def host_matches(url, *domains) -> bool:
    """True if the URL's hostname is one of domains or a subdomain of one."""
    hostname = get_hostname(url)
    if not hostname:
        return False
    return any(hostname == d or hostname.endswith('.' + d) for d in domains)
