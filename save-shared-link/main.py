"""
Save Shared Link Cloud Function

Receives links shared from the mobile share sheet and saves them as videos.

Responsibilities:
- Validate the request body
- Hand the link to the ingestion pipeline
- Answer immediately; metadata is fetched in the background

Does NOT:
- Authenticate the caller (the gateway in front of this function does that
  and forwards the user id)
- Create or validate categories
"""

import functions_framework
import json
import os
import sys
import traceback

# Add the ingestion package to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from ingestion import GCSBlobStore, LinkIngestor, SupabaseRecordStore

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Headers': 'authorization, x-client-info, apikey, content-type',
}

_ingestor = None


def get_ingestor() -> LinkIngestor:
    """Build the pipeline once per instance."""
    global _ingestor
    if _ingestor is None:
        _ingestor = LinkIngestor(SupabaseRecordStore(), GCSBlobStore())
    return _ingestor


@functions_framework.http
def save_shared_link(request):
    """
    Main Cloud Function entry point.

    Expected JSON input:
    {
        "url": "https://youtu.be/dQw4w9WgXcQ",
        "userId": "...",
        "categoryId": "...",
        "note": "optional",
        "reminderAt": "optional ISO timestamp"
    }
    """
    if request.method == 'OPTIONS':
        return ('', 204, {**CORS_HEADERS, 'Access-Control-Allow-Methods': 'POST'})

    headers = {**CORS_HEADERS, 'Content-Type': 'application/json'}

    try:
        request_json = request.get_json(silent=True) or {}

        url = request_json.get('url')
        user_id = request_json.get('userId')
        category_id = request_json.get('categoryId')

        if not url or not category_id or not user_id:
            return (json.dumps({
                'error': 'Missing required fields: url, userId and categoryId'
            }), 400, headers)

        print(f"Saving shared link: url={url}, category={category_id}")

        result = get_ingestor().save_video_link(
            url,
            user_id,
            category_id,
            note=request_json.get('note'),
            reminder_at=request_json.get('reminderAt'),
        )

        # Rejections are answered with 200 so the share sheet can show the sentinel
        if not result['success']:
            print(f"Save failed: {result['error']}")
            return (json.dumps({'error': result['error']}), 200, headers)

        return (json.dumps({
            'success': True,
            'videoId': result['video_id'],
            'platform': result['platform'],
            'message': 'Video link saved successfully. Metadata is being fetched in the background.',
        }), 200, headers)

    except Exception as e:
        print(f"Unexpected error: {str(e)}\n{traceback.format_exc()}")
        return (json.dumps({
            'error': 'An unexpected error occurred',
            'details': str(e),
        }), 500, headers)
