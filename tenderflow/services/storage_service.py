import asyncio
import os
import tempfile
import uuid
from pathlib import Path

import aiobotocore.session
from botocore.exceptions import BotoCoreError, ClientError

from tenderflow.core.config import settings
from tenderflow.core.errors import DependencyFailure, NotFoundError
from tenderflow.core.logging_config import logger


def _storage_name(file_name: str) -> str:
    return f"{uuid.uuid4()}{Path(file_name).suffix.lower()}"


class LocalStorage:
    def __init__(self, base_path: str):
        self.base_path = Path(base_path)

    async def store(self, file_name: str, content: bytes) -> str:
        self.base_path.mkdir(parents=True, exist_ok=True)
        path = self.base_path / _storage_name(file_name)
        try:
            await asyncio.to_thread(path.write_bytes, content)
        except OSError as e:
            logger.error(f"Failed to write {file_name} to {path}: {e}")
            raise DependencyFailure(f"Could not store {file_name}") from e
        logger.info(f"Stored {file_name} at {path}")
        return str(path)

    async def retrieve(self, path: str) -> Path:
        local = Path(path)
        if not local.exists():
            raise NotFoundError(f"Stored file {path} not found")
        return local

    async def delete(self, path: str) -> None:
        Path(path).unlink(missing_ok=True)

    async def release(self, local_path: Path) -> None:
        # retrieve() hands out the stored file itself
        return None


class S3Storage:
    def __init__(self, bucket: str, endpoint_url: str | None = None, region: str | None = None,
                 access_key: str | None = None, secret_key: str | None = None):
        self.bucket = bucket
        self.client_kwargs = {
            "endpoint_url": endpoint_url,
            "aws_access_key_id": access_key,
            "aws_secret_access_key": secret_key,
            "region_name": region,
        }

    def _client(self):
        session = aiobotocore.session.get_session()
        return session.create_client("s3", **self.client_kwargs)

    def _key(self, path: str) -> str:
        return path.replace(f"s3://{self.bucket}/", "", 1)

    async def store(self, file_name: str, content: bytes) -> str:
        key = f"documents/{_storage_name(file_name)}"
        try:
            async with self._client() as s3_client:
                await s3_client.put_object(Bucket=self.bucket, Key=key, Body=content)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error uploading {file_name} to S3: {str(e)}")
            raise DependencyFailure(f"Could not store {file_name}") from e
        path = f"s3://{self.bucket}/{key}"
        logger.info(f"Successfully uploaded {file_name} to S3: {path}")
        return path

    async def retrieve(self, path: str) -> Path:
        key = self._key(path)
        try:
            async with self._client() as s3_client:
                response = await s3_client.get_object(Bucket=self.bucket, Key=key)
                async with response["Body"] as stream:
                    content = await stream.read()
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                raise NotFoundError(f"Stored file {path} not found") from e
            logger.error(f"Failed to download from S3 {path}: {str(e)}")
            raise DependencyFailure(f"Could not retrieve {path}") from e
        except BotoCoreError as e:
            logger.error(f"Failed to download from S3 {path}: {str(e)}")
            raise DependencyFailure(f"Could not retrieve {path}") from e

        fd, local_name = tempfile.mkstemp(suffix=Path(key).suffix)
        with os.fdopen(fd, "wb") as handle:
            handle.write(content)
        return Path(local_name)

    async def delete(self, path: str) -> None:
        try:
            async with self._client() as s3_client:
                await s3_client.delete_object(Bucket=self.bucket, Key=self._key(path))
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to delete {path} from S3: {str(e)}")
            raise DependencyFailure(f"Could not delete {path}") from e

    async def release(self, local_path: Path) -> None:
        """Removes the temporary copy made by ``retrieve``."""
        await asyncio.to_thread(Path(local_path).unlink, missing_ok=True)


def get_storage():
    if settings.STORAGE_BACKEND == "s3":
        return S3Storage(
            bucket=settings.S3_BUCKET_NAME,
            endpoint_url=settings.S3_ENDPOINT_URL,
            region=settings.S3_REGION,
            access_key=settings.S3_ACCESS_KEY,
            secret_key=settings.S3_SECRET_KEY,
        )
    return LocalStorage(settings.STORAGE_PATH)
