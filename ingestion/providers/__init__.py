"""Platform providers, in dispatch order."""

from typing import Iterable, Optional

from .base import Provider, metadata_fetcher
from . import instagram, loom, snapchat, tiktok, youtube

PROVIDERS = (
    youtube.PROVIDER,
    tiktok.PROVIDER,
    instagram.PROVIDER,
    snapchat.PROVIDER,
    loom.PROVIDER,
)


def find_provider(url: str, providers: Iterable[Provider] = PROVIDERS) -> Optional[Provider]:
    """First provider whose can_handle accepts url, or None."""
    for provider in providers:
        if provider.can_handle(url):
            return provider
    return None


__all__ = [
    'PROVIDERS',
    'Provider',
    'find_provider',
    'metadata_fetcher',
]
