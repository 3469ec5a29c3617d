"""
Title processing utilities for saved videos.

Titles scraped from social platforms arrive with HTML entities, stray
control characters and, on TikTok and Instagram, the whole caption. Titles
exceeding MAX_TITLE_LENGTH are truncated at word boundaries (not mid-word).
"""

import html
import re
from typing import Optional, Tuple

MAX_TITLE_LENGTH = 200


def truncate_title(title: str, max_length: int = MAX_TITLE_LENGTH) -> Tuple[str, bool]:
    """
    Truncate title at word boundary, not mid-word.

    Args:
        title: The title to truncate
        max_length: Maximum length (default 200)

    Returns:
        Tuple of (truncated_title, was_truncated)

    Examples:
        >>> truncate_title("Hello World", 70)
        ('Hello World', False)

        >>> truncate_title("This is a very long title that exceeds the limit", 20)
        ('This is a very long', True)
    """
    if not title:
        return ('', False)

    title = ' '.join(title.split())

    if len(title) <= max_length:
        return (title, False)

    truncated = title[:max_length]
    last_space = truncated.rfind(' ')

    # Single long word: cut at the limit with an ellipsis
    if last_space == -1:
        return (title[:max_length-3] + '...', True)

    return (truncated[:last_space].rstrip(), True)


def sanitize_title(title: str) -> str:
    """
    Sanitize a scraped title for display.

    - Decodes HTML entities (&amp;, &#39;, ...)
    - Removes null bytes and control characters
    - Normalizes whitespace
    """
    if not title:
        return ''

    title = html.unescape(title)
    title = re.sub(r'[\x00-\x1f\x7f-\x9f]', ' ', title)
    return ' '.join(title.split())


def clean_title(title: Optional[str]) -> Optional[str]:
    """Sanitize and truncate a title; returns None when nothing usable is left."""
    if not title:
        return None

    cleaned, _ = truncate_title(sanitize_title(title))
    return cleaned or None
