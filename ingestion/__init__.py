"""Shared-link ingestion pipeline for saved videos."""

from .allowlist import (
    ALLOWED_HOSTNAMES,
    is_allowed_hostname,
)

from .models import (
    PLATFORMS,
    UNSUPPORTED_PLATFORM,
    DUPLICATE_VIDEO,
    generic_title,
    empty_metadata,
)

from .orchestrator import (
    LinkIngestor,
    start_background_thread,
)

from .providers import (
    PROVIDERS,
    find_provider,
)

from .storage import (
    StoreError,
    DuplicateRecordError,
    SupabaseRecordStore,
    GCSBlobStore,
)

__all__ = [
    # Allowlist
    'ALLOWED_HOSTNAMES',
    'is_allowed_hostname',
    # Models
    'PLATFORMS',
    'UNSUPPORTED_PLATFORM',
    'DUPLICATE_VIDEO',
    'generic_title',
    'empty_metadata',
    # Pipeline
    'LinkIngestor',
    'start_background_thread',
    'PROVIDERS',
    'find_provider',
    # Stores
    'StoreError',
    'DuplicateRecordError',
    'SupabaseRecordStore',
    'GCSBlobStore',
]
