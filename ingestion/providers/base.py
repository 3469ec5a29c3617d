"""Provider record shared by all platform modules."""

import functools
import traceback
from typing import Callable, NamedTuple, Optional

from ..models import empty_metadata


class Provider(NamedTuple):
    """One platform: three free functions, no shared state."""
    platform: str
    can_handle: Callable[[str], bool]
    canonicalize: Callable[[str], Optional[dict]]
    fetch_metadata: Callable[[str], dict]


def metadata_fetcher(platform: str, fallback_title: str = None):
    """
    Make a fetch_metadata function total.

    Whatever the wrapped function does, callers get a dict with every metadata
    field present. Unexpected exceptions are logged and turned into the
    platform's fallback metadata.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(canonical_url):
            try:
                result = func(canonical_url) or {}
            except Exception as e:
                print(f"{platform} metadata fetch error: {e}\n{traceback.format_exc()}")
                result = {'title': fallback_title}
            return empty_metadata(**result)
        return wrapper
    return decorator
