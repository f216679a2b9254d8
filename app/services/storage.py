import logging
import os
import secrets
import time

import boto3
from botocore.config import Config
from fastapi import HTTPException

from app.config import settings

logger = logging.getLogger(__name__)


class StorageService:
    """Turns uploaded bytes into a stable file reference.

    Uses S3/MinIO when configured, the local upload directory otherwise. The
    workflow only ever sees the returned reference.
    """

    @staticmethod
    def is_s3_configured() -> bool:
        return bool(
            settings.s3_endpoint_url
            and settings.s3_access_key
            and settings.s3_secret_key
        )

    @staticmethod
    def _get_client():  # type: ignore[return]
        if not StorageService.is_s3_configured():
            raise RuntimeError(
                "S3 storage is not configured. "
                "Set S3_ENDPOINT_URL, S3_ACCESS_KEY, and S3_SECRET_KEY."
            )
        return boto3.client(
            "s3",
            endpoint_url=settings.s3_endpoint_url,
            aws_access_key_id=settings.s3_access_key,
            aws_secret_access_key=settings.s3_secret_key,
            region_name=settings.s3_region,
            config=Config(signature_version="s3v4"),
        )

    @staticmethod
    def generate_file_name(original_name: str | None) -> str:
        _, ext = os.path.splitext(os.path.basename(original_name or ""))
        unique = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}"
        return f"{unique}{ext.lower()}"

    @staticmethod
    def save(original_name: str | None, data: bytes) -> str:
        if not data:
            raise HTTPException(status_code=400, detail="File is required")
        if len(data) > settings.max_upload_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"File exceeds {settings.max_upload_bytes} bytes",
            )

        file_name = StorageService.generate_file_name(original_name)
        if StorageService.is_s3_configured():
            key = f"uploads/{file_name}"
            client = StorageService._get_client()
            client.put_object(Bucket=settings.s3_bucket_name, Key=key, Body=data)
            logger.info("Stored upload %s in bucket %s", key, settings.s3_bucket_name)
            return f"s3://{settings.s3_bucket_name}/{key}"

        os.makedirs(settings.upload_dir, exist_ok=True)
        path = os.path.join(settings.upload_dir, file_name)
        with open(path, "wb") as fh:
            fh.write(data)
        logger.info("Stored upload %s (%d bytes)", path, len(data))
        return f"{settings.upload_url_prefix.rstrip('/')}/{file_name}"


storage = StorageService()
