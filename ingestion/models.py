"""
Shared record and metadata shapes for the shared-link ingestion pipeline.

Records and metadata travel through the pipeline as plain dicts. The helpers
here build them with every key present so callers never have to guess
whether a field is missing or just empty.
"""

# Supported platforms, in dispatch order
YOUTUBE = 'youtube'
TIKTOK = 'tiktok'
INSTAGRAM = 'instagram'
SNAPCHAT = 'snapchat'
LOOM = 'loom'

PLATFORMS = (YOUTUBE, TIKTOK, INSTAGRAM, SNAPCHAT, LOOM)

# meta_status state machine: pending_meta -> ready | failed_meta
META_PENDING = 'pending_meta'
META_READY = 'ready'
META_FAILED = 'failed_meta'

THUMBNAIL_DIRECT = 'direct'
THUMBNAIL_NONE = 'none'

# Sentinel errors callers pattern-match on
UNSUPPORTED_PLATFORM = 'UNSUPPORTED_PLATFORM'
DUPLICATE_VIDEO = 'DUPLICATE_VIDEO'

METADATA_FIELDS = (
    'title',
    'creator',
    'duration_seconds',
    'published_at',
    'thumb_remote_url',
    'description',
)


def generic_title(platform: str) -> str:
    """Placeholder title stored until enrichment finds a real one."""
    return f"{platform.capitalize()} Video"


def empty_metadata(**overrides) -> dict:
    """Metadata dict with every field present and set to None."""
    metadata = {field: None for field in METADATA_FIELDS}
    metadata.update(overrides)
    return metadata


def canonical_result(canonical: str, platform: str, video_id: str = None) -> dict:
    return {
        'canonical': canonical,
        'platform': platform,
        'video_id': video_id,
    }


def placeholder_record(user_id, category_id, canonical_url, platform, note=None, reminder_at=None) -> dict:
    """Initial row inserted before any metadata is known."""
    return {
        'user_id': user_id,
        'category_id': category_id,
        'url': canonical_url,
        'platform': platform,
        'title': generic_title(platform),
        'meta_status': META_PENDING,
        'note': note,
        'reminder_date': reminder_at,
    }
