"""License document storage: local disk (served under /uploads) or S3."""
import os
import uuid
import logging
from dataclasses import dataclass
from pathlib import Path

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import UploadFile

from hercycle.core.config import settings
from hercycle.core.constants import ALLOWED_LICENSE_CONTENT_TYPES, ALLOWED_LICENSE_EXTENSIONS
from hercycle.utils.errors import ValidationError

logger = logging.getLogger(__name__)

LICENSE_PREFIX = "license"


@dataclass
class StoredFile:
    url: str
    filename: str
    original_name: str
    size: int
    mimetype: str


def _get_s3_client():
    return boto3.client(
        "s3",
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        region_name=settings.AWS_REGION,
    )


def _license_filename(original: str) -> str:
    ext = os.path.splitext(original)[1].lower()
    return f"{LICENSE_PREFIX}-{uuid.uuid4().hex}{ext}"


def validate_license_file(filename: str | None, content_type: str | None, size: int) -> None:
    ext = os.path.splitext(filename or "")[1].lower()
    if ext not in ALLOWED_LICENSE_EXTENSIONS or (content_type or "").lower() not in ALLOWED_LICENSE_CONTENT_TYPES:
        raise ValidationError("Only PDF, JPEG, JPG, and PNG files are allowed")
    if size == 0:
        raise ValidationError("Uploaded file is empty")
    if size > settings.MAX_UPLOAD_BYTES:
        limit_mb = settings.MAX_UPLOAD_BYTES // (1024 * 1024)
        raise ValidationError(f"File too large. Maximum size is {limit_mb}MB")


async def save_license_document(file: UploadFile) -> StoredFile:
    """Validate and persist an uploaded license, returning where it now lives."""
    if file is None or not file.filename:
        raise ValidationError("No file uploaded")

    contents = await file.read(settings.MAX_UPLOAD_BYTES + 1)
    await file.close()
    validate_license_file(file.filename, file.content_type, len(contents))

    name = _license_filename(file.filename)
    if settings.STORAGE_BACKEND == "s3":
        url = _upload_s3(contents, name, file.content_type)
    else:
        url = _upload_local(contents, name)

    logger.info("Stored license document %s (%d bytes)", name, len(contents))
    return StoredFile(
        url=url,
        filename=name,
        original_name=file.filename,
        size=len(contents),
        mimetype=file.content_type,
    )


def _upload_local(contents: bytes, name: str) -> str:
    base_dir = Path(settings.UPLOAD_DIR)
    base_dir.mkdir(parents=True, exist_ok=True)
    with (base_dir / name).open("wb") as f:
        f.write(contents)
    # Served by the StaticFiles mount in main.py
    return f"/uploads/{name}"


def _upload_s3(contents: bytes, name: str, content_type: str) -> str:
    bucket = settings.AWS_S3_BUCKET
    if not bucket:
        raise RuntimeError("AWS_S3_BUCKET is not configured")
    key = f"licenses/{name}"
    try:
        _get_s3_client().put_object(Bucket=bucket, Key=key, Body=contents, ContentType=content_type)
    except (BotoCoreError, ClientError):
        logger.exception("S3 upload failed for %s", key)
        raise

    if settings.AWS_PUBLIC_BASE_URL:
        return f"{settings.AWS_PUBLIC_BASE_URL.rstrip('/')}/{key}"
    return f"https://{bucket}.s3.{settings.AWS_REGION}.amazonaws.com/{key}"
