"""
Google Cloud Storage Sink - Load Layer

Opens a writable object in a GCS bucket so logs can be streamed straight
into it, optionally creating the bucket first.
"""

from datetime import datetime, timezone
from typing import Optional
import logging

from google.api_core.exceptions import Conflict
from google.cloud import storage

logger = logging.getLogger(__name__)


def gcs_object_name(zone_id: str, now: Optional[datetime] = None) -> str:
    """Object name for one run: cloudflare_els_<zone>_<unix seconds>.json"""
    now = now or datetime.now(tz=timezone.utc)
    return f"cloudflare_els_{zone_id}_{int(now.timestamp())}.json"


def open_gcs_writer(
    project_id: str,
    bucket_name: str,
    object_name: str,
    skip_create_bucket: bool = False,
    client: Optional[storage.Client] = None,
):
    """
    Open `object_name` in `bucket_name` for binary writing

    Args:
        project_id: GCP project that owns (or will own) the bucket
        bucket_name: Bucket name
        object_name: Object to create
        skip_create_bucket: Do not attempt to create the bucket
        client: Optional storage client (defaults to application credentials)

    Returns:
        A file-like writer; closing it finalizes the upload
    """
    client = client or storage.Client(project=project_id)

    if skip_create_bucket:
        bucket = client.bucket(bucket_name)
    else:
        try:
            bucket = client.create_bucket(bucket_name, project=project_id)
            logger.info(f"Created bucket {bucket_name}")
        except Conflict:
            logger.info(f"Bucket {bucket_name} already exists.")
            bucket = client.bucket(bucket_name)

    logger.info(f"Uploading logs to gs://{bucket_name}/{object_name}")
    # BlobWriter.flush() raises unless told to ignore it; close() finalizes
    return bucket.blob(object_name).open("wb", ignore_flush=True)
