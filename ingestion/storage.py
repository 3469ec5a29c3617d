"""
Record and blob store collaborators.

Saved videos live in a Supabase (Postgres) table with a unique constraint on
(user_id, url). Thumbnails are re-hosted in a public Cloud Storage bucket
under deterministic keys, so re-uploading the same record overwrites in place.
"""

import json
from typing import Optional

from google.api_core import exceptions as google_exceptions
from google.cloud import storage
from google.oauth2 import service_account
from postgrest.exceptions import APIError
from supabase import Client, create_client

from . import config

# Postgres unique_violation
UNIQUE_VIOLATION = '23505'


class StoreError(Exception):
    """A read or write against an owned store failed."""


class DuplicateRecordError(StoreError):
    """The (user_id, url) unique constraint rejected an insert."""


_supabase_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """Singleton Supabase client using the service role key.

    Raises:
        RuntimeError: If SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY are not set.
    """
    global _supabase_client
    if _supabase_client is None:
        if not config.SUPABASE_URL or not config.SUPABASE_SERVICE_ROLE_KEY:
            raise RuntimeError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY required")
        _supabase_client = create_client(config.SUPABASE_URL, config.SUPABASE_SERVICE_ROLE_KEY)
    return _supabase_client


def get_storage_client():
    """Initialize Cloud Storage client."""
    creds_json = config.GOOGLE_SERVICE_ACCOUNT
    if creds_json:
        creds_dict = json.loads(creds_json)
        creds = service_account.Credentials.from_service_account_info(
            creds_dict,
            scopes=config.SCOPES
        )
        return storage.Client(credentials=creds, project=creds_dict.get('project_id'))
    else:
        # Default credentials inside Cloud Functions
        return storage.Client()


class SupabaseRecordStore:
    """Saved-video rows in a Supabase table."""

    def __init__(self, client: Client = None, table: str = None):
        self._client = client
        self.table = table or config.VIDEOS_TABLE

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_supabase_client()
        return self._client

    def insert(self, record: dict) -> dict:
        """Insert a row and return it as stored (including its generated id)."""
        try:
            response = self.client.table(self.table).insert(record).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise DuplicateRecordError(e.message) from e
            raise StoreError(e.message or str(e)) from e

        if not response.data:
            raise StoreError('Insert returned no row')
        return response.data[0]

    def find_one(self, user_id: str, url: str) -> Optional[dict]:
        try:
            response = (
                self.client.table(self.table)
                .select('id')
                .eq('user_id', user_id)
                .eq('url', url)
                .limit(1)
                .execute()
            )
        except APIError as e:
            raise StoreError(e.message or str(e)) from e

        return response.data[0] if response.data else None

    def update(self, record_id: str, fields: dict) -> None:
        try:
            response = self.client.table(self.table).update(fields).eq('id', record_id).execute()
        except APIError as e:
            raise StoreError(e.message or str(e)) from e

        if not response.data:
            raise StoreError(f'No record with id {record_id}')


class GCSBlobStore:
    """Public thumbnail bucket in Cloud Storage."""

    def __init__(self, client=None, bucket_name: str = None):
        self._client = client
        self.bucket_name = bucket_name or config.BUCKET_NAME

    @property
    def client(self):
        if self._client is None:
            self._client = get_storage_client()
        return self._client

    def upload(self, key: str, data: bytes, content_type: str, upsert: bool = True) -> None:
        """Upload bytes under key. Without upsert an existing object is an error."""
        blob = self.client.bucket(self.bucket_name).blob(key)
        kwargs = {} if upsert else {'if_generation_match': 0}
        try:
            blob.upload_from_string(data, content_type=content_type, **kwargs)
        except google_exceptions.GoogleAPIError as e:
            raise StoreError(f'Upload of {key} failed: {e}') from e

    def get_public_url(self, key: str) -> str:
        # Bucket is public via IAM
        return f"https://storage.googleapis.com/{self.bucket_name}/{key}"
