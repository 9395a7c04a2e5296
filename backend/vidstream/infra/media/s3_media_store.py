# vidstream/infra/media/s3_media_store.py
"""
S3 media store.

Uploads staged avatar/cover files with boto3 ``upload_file`` and returns a
public URL for the object. Failures from the backend are logged and reported
as ``None`` so the caller can turn them into a validation error.
"""

from __future__ import annotations

import logging
import mimetypes
import os
from uuid import uuid4

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from vidstream.services._shared.ports import MediaAsset, MediaStore

logger = logging.getLogger(__name__)


class S3MediaStore(MediaStore):
    """
    :param bucket: Target bucket.
    :param client: Preconfigured boto3 S3 client; created lazily when omitted.
    :param public_base_url: Base URL objects are served from. Defaults to the
        virtual-hosted bucket URL.
    :param prefix: Key prefix for every object.
    :param region: Region used for the lazily created client and default URL.
    """

    def __init__(
        self,
        bucket: str,
        *,
        client=None,
        public_base_url: str | None = None,
        prefix: str = "media/",
        region: str | None = None,
    ) -> None:
        if not bucket:
            raise ValueError("S3 bucket name is required.")
        self.bucket = bucket
        self.prefix = prefix
        self.region = region
        self._client = client
        if public_base_url:
            self.public_base_url = public_base_url.rstrip("/")
        elif region:
            self.public_base_url = f"https://{bucket}.s3.{region}.amazonaws.com"
        else:
            self.public_base_url = f"https://{bucket}.s3.amazonaws.com"

    @property
    def client(self):
        """Get or create the S3 client."""
        if self._client is None:
            self._client = boto3.client("s3", region_name=self.region)
        return self._client

    def _object_key(self, local_path: str) -> str:
        return f"{self.prefix}{uuid4().hex}-{os.path.basename(local_path)}"

    def upload(self, local_path: str) -> MediaAsset | None:
        if not local_path or not os.path.isfile(local_path):
            logger.warning("Staged upload not found", extra={"reason": "missing_file"})
            return None

        key = self._object_key(local_path)
        content_type, _ = mimetypes.guess_type(local_path)
        extra_args = {"ContentType": content_type} if content_type else None
        try:
            self.client.upload_file(local_path, self.bucket, key, ExtraArgs=extra_args)
        except (BotoCoreError, ClientError):
            logger.exception("S3 upload failed", extra={"reason": "s3_error"})
            return None
        finally:
            try:
                os.remove(local_path)
            except FileNotFoundError:
                pass

        return MediaAsset(url=f"{self.public_base_url}/{key}", public_id=key)

    def delete(self, public_id: str) -> bool:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=public_id)
        except (BotoCoreError, ClientError):
            logger.exception("S3 delete failed", extra={"reason": "s3_error"})
            return False
        return True
