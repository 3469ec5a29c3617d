"""
Shared pytest fixtures for the shared-link ingestion tests.
"""

import pytest
import sys
import importlib.util
import uuid
from pathlib import Path

# Project root for finding the Cloud Function module and the ingestion package
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from ingestion.config import load_config
from ingestion.storage import DuplicateRecordError, StoreError


def _load_module_from_path(module_name: str, file_path: Path):
    """Load a module from a specific file path."""
    spec = importlib.util.spec_from_file_location(module_name, file_path)
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module


# The Cloud Function lives in a hyphenated directory, so load it by path
_save_shared_link_module = _load_module_from_path(
    'save_shared_link_main',
    PROJECT_ROOT / 'save-shared-link' / 'main.py'
)


# ============================================================================
# In-memory collaborators
# ============================================================================

class InMemoryRecordStore:
    """Record store with the same (user_id, url) unique constraint as the table."""

    def __init__(self, failing_updates=0, dedupe_reads=True):
        self.rows = {}
        self.updates = []
        self.failing_updates = failing_updates
        self.dedupe_reads = dedupe_reads

    def insert(self, record):
        for row in self.rows.values():
            if row['user_id'] == record['user_id'] and row['url'] == record['url']:
                raise DuplicateRecordError('duplicate key value violates unique constraint')
        row = dict(record, id=str(uuid.uuid4()))
        self.rows[row['id']] = row
        return dict(row)

    def find_one(self, user_id, url):
        if not self.dedupe_reads:
            return None
        for row in self.rows.values():
            if row['user_id'] == user_id and row['url'] == url:
                return {'id': row['id']}
        return None

    def update(self, record_id, fields):
        if self.failing_updates:
            self.failing_updates -= 1
            raise StoreError('update failed: connection reset')
        if record_id not in self.rows:
            raise StoreError(f'No record with id {record_id}')
        self.rows[record_id].update(fields)
        self.updates.append((record_id, dict(fields)))


class InMemoryBlobStore:
    def __init__(self, fail_uploads=False):
        self.objects = {}
        self.fail_uploads = fail_uploads

    def upload(self, key, data, content_type, upsert=True):
        if self.fail_uploads:
            raise StoreError(f'Upload of {key} failed')
        if key in self.objects and not upsert:
            raise StoreError(f'{key} already exists')
        self.objects[key] = (data, content_type)

    def get_public_url(self, key):
        return f"https://storage.googleapis.com/test-thumbnails/{key}"


class DeferredRunner:
    """Captures background work so tests decide when it runs."""

    def __init__(self):
        self.tasks = []

    def __call__(self, target, *args):
        self.tasks.append((target, args))

    def run_all(self):
        tasks, self.tasks = self.tasks, []
        for target, args in tasks:
            target(*args)


def run_inline(target, *args):
    target(*args)


def run_nothing(target, *args):
    pass


# ============================================================================
# Pipeline fixtures
# ============================================================================

@pytest.fixture
def record_store():
    return InMemoryRecordStore()


@pytest.fixture
def blob_store():
    return InMemoryBlobStore()


@pytest.fixture
def ingestion_config():
    return load_config()


@pytest.fixture
def make_ingestor(record_store, blob_store, ingestion_config):
    """Factory for LinkIngestor wired to the in-memory stores."""
    from ingestion.orchestrator import LinkIngestor

    def factory(run_in_background=run_inline, records=None, blobs=None, config=None):
        return LinkIngestor(
            records if records is not None else record_store,
            blobs if blobs is not None else blob_store,
            config=config or ingestion_config,
            run_in_background=run_in_background,
        )

    return factory


@pytest.fixture
def deferred_runner():
    return DeferredRunner()


# ============================================================================
# HTML samples
# ============================================================================

@pytest.fixture
def youtube_watch_html():
    return """
    <!DOCTYPE html>
    <html>
    <head>
        <title>Never Gonna Give You Up - YouTube</title>
        <meta property="og:title" content="Rick Astley - Never Gonna Give You Up">
        <meta property="og:image" content="https://i.ytimg.com/vi/dQw4w9WgXcQ/maxresdefault.jpg">
        <meta property="og:description" content="The official video for Never Gonna Give You Up">
        <meta itemprop="duration" content="PT3M33S">
        <meta itemprop="datePublished" content="2009-10-25">
    </head>
    <body></body>
    </html>
    """


@pytest.fixture
def instagram_reel_html():
    return """
    <!DOCTYPE html>
    <html>
    <head>
        <meta property="og:title" content="Chef Ana (@chef.ana) &bull; Instagram reel">
        <meta property="og:image" content="https://scontent.cdninstagram.com/v/t51/abc.jpg?stp=dst&amp;_nc_ht=scontent">
        <meta property="og:description" content="12K likes - pasta night">
    </head>
    <body></body>
    </html>
    """


@pytest.fixture
def instagram_login_shell_html():
    """What Instagram serves when it does not like the request."""
    return """
    <!DOCTYPE html>
    <html>
    <head><title>Instagram</title></head>
    <body><div id="react-root"></div><script>window._sharedData = {"config":{}};</script></body>
    </html>
    """


@pytest.fixture
def mock_flask_request():
    """Factory for creating mock Flask request objects."""
    class MockRequest:
        def __init__(self, json_data=None, method='POST'):
            self._json = json_data
            self.method = method
            self.data = b''

        def get_json(self, force=False, silent=False):
            return self._json

    return MockRequest


@pytest.fixture
def save_shared_link_module():
    return _save_shared_link_module


@pytest.fixture
def save_shared_link():
    """Returns main entry point from save-shared-link."""
    return _save_shared_link_module.save_shared_link


@pytest.fixture
def skip_background():
    """Background runner that never runs the enrichment."""
    return run_nothing


@pytest.fixture
def record_store_factory():
    return InMemoryRecordStore


@pytest.fixture
def blob_store_factory():
    return InMemoryBlobStore
