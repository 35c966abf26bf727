"""
Media uploads (avatars, cover images) to an S3-compatible bucket.

Files are stored under MEDIA_PREFIX with a random key; the returned URL is
MEDIA_BASE_URL + key, so the bucket (or a CDN in front of it) must serve them.
"""
from __future__ import annotations

import logging
import mimetypes
import os
import uuid
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from utils.exceptions import UploadError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}


class S3MediaUploader:
    def __init__(
        self,
        bucket: str,
        base_url: Optional[str] = None,
        prefix: str = "media",
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        client=None,
    ):
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        self.base_url = (base_url or f"https://{bucket}.s3.amazonaws.com").rstrip("/")
        self._client = client or boto3.client("s3", region_name=region, endpoint_url=endpoint_url)

    @classmethod
    def from_config(cls, config) -> "S3MediaUploader":
        return cls(
            bucket=config["MEDIA_BUCKET"],
            base_url=config.get("MEDIA_BASE_URL"),
            prefix=config.get("MEDIA_PREFIX", "media"),
            region=config.get("AWS_REGION"),
            endpoint_url=config.get("MEDIA_ENDPOINT_URL"),
        )

    def build_key(self, folder: str, filename: str) -> str:
        _, ext = os.path.splitext(secure_filename(filename or ""))
        return "/".join(p for p in (self.prefix, folder.strip("/"), f"{uuid.uuid4().hex}{ext.lower()}") if p)

    def upload(self, file: FileStorage, folder: str) -> str:
        """Upload one incoming file and return its public URL."""
        if file is None or not file.filename:
            raise UploadError("No file provided")
        _, ext = os.path.splitext(file.filename.lower())
        if ext not in ALLOWED_IMAGE_EXTENSIONS:
            raise UploadError(f"Unsupported file type: {ext or 'unknown'}")

        key = self.build_key(folder, file.filename)
        content_type = file.mimetype or mimetypes.guess_type(file.filename)[0] or "application/octet-stream"
        try:
            self._client.upload_fileobj(file.stream, self.bucket, key, ExtraArgs={"ContentType": content_type})
        except (BotoCoreError, ClientError) as exc:
            logger.exception("upload to s3://%s/%s failed", self.bucket, key)
            raise UploadError(f"Error while uploading {folder}") from exc
        return f"{self.base_url}/{key}"
