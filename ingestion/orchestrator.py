"""
Shared-link ingestion orchestrator.

Responsibilities:
- Reject links outside the hostname allowlist
- Route the link to its platform provider and canonicalize it
- Refuse duplicates per (user, canonical URL)
- Insert a placeholder record and return immediately
- Enrich the record in the background (metadata + re-hosted thumbnail)

Does NOT:
- Retry enrichment (each record is enriched once)
- Resolve shortlinks before dedup (two shortlinks to the same video are
  different canonical URLs)
"""

import threading
import traceback
from datetime import datetime, timezone

from .allowlist import is_allowed_hostname
from .config import load_config
from .models import (
    DUPLICATE_VIDEO,
    META_FAILED,
    META_READY,
    UNSUPPORTED_PLATFORM,
    generic_title,
    placeholder_record,
)
from .providers import find_provider
from .storage import DuplicateRecordError, StoreError
from .thumbnails import rehost_thumbnail
from .title_utils import clean_title

NO_PROVIDER_ERROR = 'Unable to determine video platform for this URL.'
CANONICALIZE_ERROR = 'Failed to process video URL. Please check the URL format.'
INSERT_ERROR = 'Failed to save video to database.'


def start_background_thread(target, *args):
    """Fire-and-forget: run target(*args) on a daemon thread."""
    thread = threading.Thread(target=target, args=args, daemon=True, name='enrich-metadata')
    thread.start()
    return thread


def failure(error: str) -> dict:
    return {'success': False, 'error': error}


class LinkIngestor:
    """Saves shared video links for users and enriches them out of band."""

    def __init__(self, records, blobs, config=None, run_in_background=start_background_thread):
        self.records = records
        self.blobs = blobs
        self.config = config or load_config()
        self.run_in_background = run_in_background

    def save_video_link(self, url, user_id, category_id, note=None, reminder_at=None) -> dict:
        """
        Save a shared link as a pending video record.

        Returns {'success': True, 'video_id', 'platform'} as soon as the
        placeholder row exists, or {'success': False, 'error'} where error is
        UNSUPPORTED_PLATFORM, DUPLICATE_VIDEO or a human-readable message.
        """
        print(f"save_video_link called: url={url}, user={user_id}, category={category_id}")

        if not is_allowed_hostname(url, self.config.allowed_hostnames):
            print(f"Unsupported hostname: {url}")
            return failure(UNSUPPORTED_PLATFORM)

        url = url.strip()

        provider = find_provider(url, self.config.providers)
        if provider is None:
            print(f"No provider found for URL: {url}")
            return failure(NO_PROVIDER_ERROR)

        print(f"Provider found: {provider.platform}")

        result = provider.canonicalize(url)
        if not result:
            print(f"Failed to canonicalize URL: {url}")
            return failure(CANONICALIZE_ERROR)

        canonical = result['canonical']
        platform = result['platform']
        print(f"Canonical URL: {canonical}")

        # Fast path; the unique constraint on insert is the authoritative check
        try:
            existing = self.records.find_one(user_id, canonical)
        except StoreError as e:
            print(f"Error checking for duplicates, relying on insert constraint: {e}")
            existing = None

        if existing:
            print(f"Duplicate video detected: {existing.get('id')}")
            return failure(DUPLICATE_VIDEO)

        record = placeholder_record(user_id, category_id, canonical, platform, note, reminder_at)
        try:
            saved = self.records.insert(record)
        except DuplicateRecordError:
            print(f"Duplicate video rejected by store constraint: {canonical}")
            return failure(DUPLICATE_VIDEO)
        except Exception as e:
            print(f"Failed to insert video record: {e}\n{traceback.format_exc()}")
            return failure(INSERT_ERROR)

        record_id = saved['id']
        print(f"Video record created with ID: {record_id}")

        try:
            self.run_in_background(self._enrich_in_background, record_id, canonical, provider)
        except Exception as e:
            # Record stays pending_meta; the save itself succeeded
            print(f"Could not start background enrichment for {record_id}: {e}")

        return {
            'success': True,
            'video_id': record_id,
            'platform': platform,
        }

    def _enrich_in_background(self, record_id, canonical_url, provider):
        try:
            self.enrich(record_id, canonical_url, provider)
        except Exception as e:
            print(f"Background metadata enrichment failed for {record_id}: {e}\n{traceback.format_exc()}")

    def enrich(self, record_id, canonical_url, provider) -> bool:
        """
        Fetch metadata and thumbnail for a record and write them back once.

        Returns True when the record reached 'ready'. Any failure is recorded
        on the row as failed_meta (best effort) instead of being raised.
        """
        platform = provider.platform
        print(f"Background: fetching metadata for video {record_id}")

        try:
            metadata = provider.fetch_metadata(canonical_url)
            print(f"Metadata fetched for {record_id}: title={metadata.get('title')}, "
                  f"thumb={'found' if metadata.get('thumb_remote_url') else 'none'}")

            update = {
                'title': clean_title(metadata.get('title')) or generic_title(platform),
                'creator': metadata.get('creator'),
                'duration': metadata.get('duration_seconds'),
                'published_at': metadata.get('published_at'),
                'description': metadata.get('description'),
                'thumbnail_last_checked_at': datetime.now(timezone.utc).isoformat(),
            }
            update.update(rehost_thumbnail(
                self.blobs,
                platform,
                record_id,
                metadata.get('thumb_remote_url'),
                self.config,
            ))
            update['meta_status'] = META_READY
            update['meta_error'] = None

            self.records.update(record_id, update)

        except Exception as e:
            print(f"Failed to update video metadata for {record_id}: {e}\n{traceback.format_exc()}")
            self._mark_failed(record_id, str(e) or e.__class__.__name__)
            return False

        print(f"Video {record_id} updated successfully")
        return True

    def _mark_failed(self, record_id, message):
        try:
            self.records.update(record_id, {
                'meta_status': META_FAILED,
                'meta_error': message,
            })
        except Exception as e:
            print(f"Could not mark {record_id} as failed_meta, left pending: {e}")
