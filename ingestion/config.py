"""
Configuration for the shared-link ingestion pipeline.

Values come from environment variables (set on the Cloud Function). The
pipeline itself receives an IngestionConfig built once by load_config().
"""

import os
from typing import NamedTuple, Tuple

# Record store (Supabase)
SUPABASE_URL = os.environ.get('SUPABASE_URL')
SUPABASE_SERVICE_ROLE_KEY = os.environ.get('SUPABASE_SERVICE_ROLE_KEY')
VIDEOS_TABLE = os.environ.get('VIDEOS_TABLE', 'videos')

# Blob store (Cloud Storage)
BUCKET_NAME = os.environ.get('GCS_BUCKET', 'video-thumbnails')
GOOGLE_SERVICE_ACCOUNT = os.environ.get('GOOGLE_SERVICE_ACCOUNT')
SCOPES = ['https://www.googleapis.com/auth/cloud-platform']

# Outbound requests
METADATA_TIMEOUT_SECONDS = float(os.environ.get('METADATA_TIMEOUT_SECONDS', '10'))
THUMBNAIL_TIMEOUT_SECONDS = float(os.environ.get('THUMBNAIL_TIMEOUT_SECONDS', '5'))
THUMBNAIL_MAX_BYTES = int(os.environ.get('THUMBNAIL_MAX_BYTES', str(5 * 1024 * 1024)))
THUMBNAIL_CONTENT_TYPES = ('image/jpeg', 'image/png', 'image/webp')

# Instagram only serves metadata-bearing HTML when these match its web app
INSTAGRAM_APP_ID = os.environ.get('INSTAGRAM_APP_ID', '936619743392459')
INSTAGRAM_ASBD_ID = os.environ.get('INSTAGRAM_ASBD_ID', '129477')


class IngestionConfig(NamedTuple):
    allowed_hostnames: frozenset
    providers: tuple
    thumbnail_timeout: float = THUMBNAIL_TIMEOUT_SECONDS
    thumbnail_max_bytes: int = THUMBNAIL_MAX_BYTES
    thumbnail_content_types: Tuple[str, ...] = THUMBNAIL_CONTENT_TYPES


def load_config(**overrides) -> IngestionConfig:
    """Build the pipeline configuration from module defaults plus overrides."""
    from .allowlist import ALLOWED_HOSTNAMES
    from .providers import PROVIDERS

    values = {
        'allowed_hostnames': ALLOWED_HOSTNAMES,
        'providers': PROVIDERS,
        'thumbnail_timeout': THUMBNAIL_TIMEOUT_SECONDS,
        'thumbnail_max_bytes': THUMBNAIL_MAX_BYTES,
        'thumbnail_content_types': THUMBNAIL_CONTENT_TYPES,
    }
    values.update(overrides)
    return IngestionConfig(**values)
