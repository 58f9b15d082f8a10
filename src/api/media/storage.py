"""
S3-compatible object storage for video files and thumbnails.

Uploads return the public URL of the stored object; deletes accept either
that URL or the bare object key.
"""
import logging
import posixpath
import uuid
from dataclasses import dataclass
from typing import BinaryIO, Optional
from urllib.parse import urlparse

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from api.config import settings

logger = logging.getLogger("media")


@dataclass(frozen=True)
class UploadedMedia:
    url: str
    key: str


class MediaStore:
    def __init__(self, client, bucket: str, public_url: Optional[str] = None):
        self.client = client
        self.bucket = bucket
        self.public_url = (public_url or "").rstrip("/")

    def url_for(self, key: str) -> str:
        if self.public_url:
            return f"{self.public_url}/{key}"
        return f"s3://{self.bucket}/{key}"

    def key_for(self, url_or_key: str) -> str:
        if self.public_url and url_or_key.startswith(self.public_url + "/"):
            return url_or_key[len(self.public_url) + 1:]
        parsed = urlparse(url_or_key)
        if not parsed.scheme:
            return url_or_key
        path = parsed.path.lstrip("/")
        if parsed.scheme == "s3" or parsed.netloc == self.bucket:
            return path
        prefix = f"{self.bucket}/"
        return path[len(prefix):] if path.startswith(prefix) else path

    def upload(self, fileobj: BinaryIO, filename: str, content_type: Optional[str], folder: str) -> Optional[UploadedMedia]:
        """Store a blob; None means the upload failed and was logged."""
        ext = posixpath.splitext(filename or "")[1].lower()
        key = f"{folder}/{uuid.uuid4()}{ext}"
        extra = {"ContentType": content_type} if content_type else {}
        try:
            self.client.upload_fileobj(fileobj, self.bucket, key, ExtraArgs=extra)
        except (BotoCoreError, ClientError) as exc:
            logger.error(f"Media upload failed for {filename}: {exc}")
            return None
        logger.info(f"Uploaded media {key}")
        return UploadedMedia(url=self.url_for(key), key=key)

    def delete(self, url_or_key: str) -> None:
        key = self.key_for(url_or_key)
        self.client.delete_object(Bucket=self.bucket, Key=key)
        logger.info(f"Deleted media {key}")


_store: Optional[MediaStore] = None


def get_media_store() -> MediaStore:
    """FastAPI dependency returning the process-wide media store."""
    global _store
    if _store is None:
        client = boto3.client(
            "s3",
            endpoint_url=settings.MEDIA_ENDPOINT_URL,
            aws_access_key_id=settings.MEDIA_ACCESS_KEY,
            aws_secret_access_key=settings.MEDIA_SECRET_KEY,
            config=Config(signature_version="s3v4"),
            region_name=settings.MEDIA_REGION,
        )
        _store = MediaStore(client, settings.MEDIA_BUCKET, settings.MEDIA_PUBLIC_URL)
    return _store
