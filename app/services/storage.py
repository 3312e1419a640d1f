"""Blob storage adapter.

Bytes live in an external object store; the database only keeps the blob URL.
Two backends share one contract:

* ``S3BlobStorage`` talks to any S3-compatible store (Backblaze B2, AWS S3, MinIO)
  through boto3.
* ``LocalBlobStorage`` keeps blobs under a directory, for development and tests.

``attempt_delete`` is the only delete the services call. It never raises: a blob
that cannot be removed is logged and left orphaned, and the metadata row is
still deleted.
"""
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
import hashlib
import logging
import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from starlette.concurrency import run_in_threadpool
from app.config import settings

logger = logging.getLogger(__name__)


class BlobStorageError(Exception):
    pass


class BlobStorage:
    def generate_storage_key(self, user_id: str, filename: str) -> str:
        """Generate unique key for file storage"""
        timestamp = datetime.now(timezone.utc).isoformat()
        unique_id = hashlib.sha256(f"{user_id}{filename}{timestamp}".encode()).hexdigest()[:16]
        return f"users/{user_id}/files/{unique_id}/{filename}"

    async def put(self, storage_key: str, data: bytes, content_type: str | None = None) -> str:
        """Store bytes under ``storage_key`` and return the blob URL."""
        raise NotImplementedError

    async def fetch(self, blob_url: str) -> bytes:
        raise NotImplementedError

    async def delete(self, blob_url: str) -> None:
        raise NotImplementedError

    async def attempt_delete(self, blob_url: str) -> None:
        try:
            await self.delete(blob_url)
        except Exception as e:
            logger.warning(f"Failed to delete blob {blob_url}: {str(e)}")


class S3BlobStorage(BlobStorage):
    def __init__(
        self,
        bucket: str | None = None,
        endpoint_url: str | None = None,
        public_base_url: str | None = None,
        client=None,
    ):
        self.bucket = bucket or settings.BLOB_BUCKET_NAME
        self.endpoint_url = endpoint_url or settings.BLOB_ENDPOINT_URL

        if client is None:
            if not settings.BLOB_ACCESS_KEY_ID or not settings.BLOB_SECRET_ACCESS_KEY:
                logger.warning("Blob storage credentials not set. Storage calls may fail.")
            client = boto3.client(
                's3',
                endpoint_url=self.endpoint_url,
                aws_access_key_id=settings.BLOB_ACCESS_KEY_ID,
                aws_secret_access_key=settings.BLOB_SECRET_ACCESS_KEY,
                region_name=settings.BLOB_REGION,
                config=Config(signature_version='s3v4'),
            )
        self.s3_client = client

        base = public_base_url or settings.BLOB_PUBLIC_BASE_URL
        if not base:
            base = f"{(self.endpoint_url or 'https://s3.amazonaws.com').rstrip('/')}/{self.bucket}"
        self.public_base_url = base.rstrip("/")

    def url_for(self, storage_key: str) -> str:
        return f"{self.public_base_url}/{storage_key}"

    def key_for(self, blob_url: str) -> str:
        prefix = f"{self.public_base_url}/"
        if not blob_url.startswith(prefix):
            raise BlobStorageError(f"Blob URL outside bucket: {blob_url}")
        return blob_url[len(prefix):]

    def _put(self, storage_key: str, data: bytes, content_type: str | None):
        extra_args = {'ServerSideEncryption': 'AES256'}
        if content_type:
            extra_args['ContentType'] = content_type
        try:
            self.s3_client.put_object(Bucket=self.bucket, Key=storage_key, Body=data, **extra_args)
        except (BotoCoreError, ClientError) as e:
            raise BlobStorageError(f"Failed to upload file: {str(e)}") from e

    def _get(self, storage_key: str) -> bytes:
        try:
            response = self.s3_client.get_object(Bucket=self.bucket, Key=storage_key)
            return response['Body'].read()
        except (BotoCoreError, ClientError) as e:
            raise BlobStorageError(f"Failed to download file: {str(e)}") from e

    def _delete(self, storage_key: str):
        try:
            self.s3_client.delete_object(Bucket=self.bucket, Key=storage_key)
        except (BotoCoreError, ClientError) as e:
            raise BlobStorageError(f"Failed to delete file: {str(e)}") from e

    async def put(self, storage_key: str, data: bytes, content_type: str | None = None) -> str:
        await run_in_threadpool(self._put, storage_key, data, content_type)
        return self.url_for(storage_key)

    async def fetch(self, blob_url: str) -> bytes:
        return await run_in_threadpool(self._get, self.key_for(blob_url))

    async def delete(self, blob_url: str) -> None:
        await run_in_threadpool(self._delete, self.key_for(blob_url))


class LocalBlobStorage(BlobStorage):
    SCHEME = "local://"

    def __init__(self, root: str | Path | None = None):
        self.root = Path(root or settings.LOCAL_STORAGE_DIR).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, blob_url: str) -> Path:
        if not blob_url.startswith(self.SCHEME):
            raise BlobStorageError(f"Not a local blob URL: {blob_url}")
        path = (self.root / blob_url[len(self.SCHEME):]).resolve()
        if self.root not in path.parents:
            raise BlobStorageError(f"Blob URL escapes storage root: {blob_url}")
        return path

    def _write(self, path: Path, data: bytes):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    async def put(self, storage_key: str, data: bytes, content_type: str | None = None) -> str:
        blob_url = f"{self.SCHEME}{storage_key}"
        await run_in_threadpool(self._write, self.path_for(blob_url), data)
        return blob_url

    async def fetch(self, blob_url: str) -> bytes:
        path = self.path_for(blob_url)
        try:
            return await run_in_threadpool(path.read_bytes)
        except OSError as e:
            raise BlobStorageError(f"Failed to download file: {str(e)}") from e

    async def delete(self, blob_url: str) -> None:
        path = self.path_for(blob_url)
        try:
            await run_in_threadpool(path.unlink)
        except OSError as e:
            raise BlobStorageError(f"Failed to delete file: {str(e)}") from e


@lru_cache
def get_blob_storage() -> BlobStorage:
    if settings.STORAGE_BACKEND == "local":
        return LocalBlobStorage()
    return S3BlobStorage()
