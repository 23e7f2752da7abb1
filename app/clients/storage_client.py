"""
S3-compatible object storage client (AWS S3, Cloudflare R2, MinIO, ...).

Uploads are content-addressed: the object key is the SHA-1 of the bytes
plus the original extension, so re-uploading the same file is a no-op
overwrite and always yields the same public URL.
"""
import hashlib
import logging
import posixpath
from io import BytesIO
from typing import Optional

import boto3
from botocore.client import Config

from app.config import settings

logger = logging.getLogger(__name__)

_s3 = None


def missing_setting() -> Optional[str]:
    """Name of the first storage env var that is not configured, if any."""
    required = (
        ("S3_ENDPOINT", settings.s3_endpoint),
        ("S3_ACCESS_KEY_ID", settings.s3_access_key_id),
        ("S3_SECRET_ACCESS_KEY", settings.s3_secret_access_key),
        ("S3_BUCKET", settings.s3_bucket),
    )
    for name, value in required:
        if not value:
            return name
    return None


def init_storage() -> None:
    """Create the S3 client if storage is configured."""
    global _s3
    missing = missing_setting()
    if missing:
        logger.warning("Object storage disabled: %s is not defined", missing)
        return
    _s3 = boto3.client(
        "s3",
        endpoint_url=settings.s3_endpoint,
        aws_access_key_id=settings.s3_access_key_id,
        aws_secret_access_key=settings.s3_secret_access_key,
        config=Config(signature_version="s3v4"),
        region_name=settings.s3_region,
    )
    logger.info("Object storage client ready (bucket=%s)", settings.s3_bucket)


def get_s3():
    if _s3 is None:
        init_storage()
    if _s3 is None:
        raise RuntimeError("Object storage is not configured")
    return _s3


def content_key(data: bytes, filename: str, folder: str = "") -> str:
    """
    Object key for an upload.
    Key format: {folder}/{sha1(data)}.{extension of filename}
    """
    suffix = filename.rsplit(".", 1)[-1] if "." in filename else ""
    digest = hashlib.sha1(data).hexdigest()
    return posixpath.join(folder, f"{digest}.{suffix}")


def public_url(key: str) -> str:
    host = settings.s3_access_host or settings.s3_endpoint
    return f"{host}/{key}"


def put_object(key: str, data: bytes, content_type: Optional[str] = None):
    params = {"Bucket": settings.s3_bucket, "Key": key, "Body": BytesIO(data)}
    if content_type:
        params["ContentType"] = content_type
    response = get_s3().put_object(**params)
    logger.debug("Uploaded object %s (%d bytes)", key, len(data))
    return response
