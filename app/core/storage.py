"""
File storage abstraction layer supporting both local filesystem and AWS S3.

Job attachments are written under a caller-chosen key and addressed by the
returned URL, so the API never streams files itself.
"""

import logging
import os
from typing import BinaryIO, Optional
import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from app.core.config import settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when a backend fails to store an object"""


class StorageBackend:
    """Abstract base class for storage backends"""

    def upload_file(self, file: BinaryIO, key: str, content_type: Optional[str] = None) -> str:
        """Upload file under `key` and return its URL"""
        raise NotImplementedError

    def delete_file(self, key: str) -> bool:
        """Delete file from storage"""
        raise NotImplementedError

    def describe(self) -> str:
        raise NotImplementedError


class LocalStorage(StorageBackend):
    """Local filesystem storage backend for development"""

    def __init__(self, base_dir: str = "uploads"):
        self.base_dir = base_dir

    def _path(self, key: str) -> str:
        # Keys are built server-side but filenames come from clients
        safe_parts = [part for part in key.split("/") if part not in ("", ".", "..")]
        return os.path.join(self.base_dir, *safe_parts)

    def upload_file(self, file: BinaryIO, key: str, content_type: Optional[str] = None) -> str:
        file_path = self._path(key)
        os.makedirs(os.path.dirname(file_path), exist_ok=True)

        try:
            with open(file_path, "wb") as buffer:
                buffer.write(file.read())
        except OSError as e:
            raise StorageError(f"Failed to write {file_path}: {e}") from e

        return file_path

    def delete_file(self, key: str) -> bool:
        file_path = self._path(key)
        if os.path.exists(file_path):
            os.remove(file_path)
            return True
        return False

    def describe(self) -> str:
        return f"local:{self.base_dir}"


class S3Storage(StorageBackend):
    """AWS S3 storage backend"""

    def __init__(self):
        self.bucket_name = settings.S3_BUCKET_NAME
        self.region = settings.AWS_REGION

        # Bounded waits; failures surface to the caller instead of being retried
        client_config = Config(
            connect_timeout=settings.STORAGE_CONNECT_TIMEOUT,
            read_timeout=settings.STORAGE_READ_TIMEOUT,
            retries={"max_attempts": 1, "mode": "standard"},
        )

        # Without explicit keys boto3 falls back to IAM roles
        if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
            self.s3_client = boto3.client(
                's3',
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                region_name=self.region,
                config=client_config,
            )
        else:
            self.s3_client = boto3.client('s3', region_name=self.region, config=client_config)

    def upload_file(self, file: BinaryIO, key: str, content_type: Optional[str] = None) -> str:
        extra_args = {'ServerSideEncryption': 'AES256'}
        if content_type:
            extra_args['ContentType'] = content_type

        try:
            self.s3_client.upload_fileobj(file, self.bucket_name, key, ExtraArgs=extra_args)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error uploading {key} to S3: {e}")
            raise StorageError(f"Failed to upload file to S3: {e}") from e

        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{key}"

    def delete_file(self, key: str) -> bool:
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=key)
            return True
        except ClientError as e:
            logger.error(f"Error deleting {key} from S3: {e}")
            return False

    def describe(self) -> str:
        return f"s3:{self.bucket_name}"


def get_storage() -> StorageBackend:
    """Get storage backend based on USE_S3 setting"""
    if settings.USE_S3:
        if not settings.S3_BUCKET_NAME:
            raise ValueError("S3_BUCKET_NAME must be set when USE_S3=True")
        return S3Storage()
    return LocalStorage(settings.LOCAL_UPLOAD_DIR)


# Singleton instance
storage = get_storage()
