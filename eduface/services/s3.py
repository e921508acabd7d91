"""AWS S3: student reference photos."""
import asyncio
import logging
import uuid

import boto3
from botocore.exceptions import ClientError

from eduface.config import settings

logger = logging.getLogger(__name__)

_s3 = None

_EXTENSIONS = {"image/jpeg": "jpg", "image/png": "png", "image/webp": "webp"}


def get_s3():
    global _s3
    if _s3 is None:
        _s3 = boto3.client(
            "s3",
            region_name=settings.aws_region,
            aws_access_key_id=settings.aws_access_key_id or None,
            aws_secret_access_key=settings.aws_secret_access_key or None,
        )
    return _s3


def _put_sync(key: str, body: bytes, content_type: str) -> None:
    get_s3().put_object(Bucket=settings.s3_bucket_faces, Key=key, Body=body, ContentType=content_type)


def _get_sync(key: str) -> bytes:
    obj = get_s3().get_object(Bucket=settings.s3_bucket_faces, Key=key)
    return obj["Body"].read()


async def upload_reference_image(admission_number: str, body: bytes, content_type: str = "image/jpeg") -> tuple[str, str]:
    """Upload an enrollment photo; return (public_url, s3_key)."""
    ext = _EXTENSIONS.get(content_type, "jpg")
    key = f"faces/{admission_number}/{uuid.uuid4().hex}.{ext}"
    bucket = settings.s3_bucket_faces
    await asyncio.to_thread(_put_sync, key, body, content_type or "image/jpeg")
    url = f"https://{bucket}.s3.{settings.aws_region}.amazonaws.com/{key}"
    return url, key


async def fetch_reference_image(key: str) -> bytes:
    return await asyncio.to_thread(_get_sync, key)


async def delete_reference_image(key: str) -> None:
    try:
        await asyncio.to_thread(get_s3().delete_object, Bucket=settings.s3_bucket_faces, Key=key)
    except ClientError as e:
        logger.warning(f"Could not delete reference photo {key}: {e}")
