"""Attachment blob storage (MinIO / S3-compatible).

The minio client is blocking, so every call is pushed to a worker thread.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

import structlog
from minio import Minio
from minio.deleteobjects import DeleteObject

from Teskilat.config import Settings, load_settings

log = structlog.get_logger()


class BlobStoreError(Exception):
    """Raised when the object store reports objects it could not delete."""

    def __init__(self, message: str, failed: list[str] | None = None):
        self.failed = failed or []
        super().__init__(message)


class BlobStore(Protocol):
    async def bucket_exists(self, bucket: str) -> bool: ...

    async def list_object_names(self, bucket: str) -> list[str]: ...

    async def remove_objects(self, bucket: str, names: list[str]) -> int: ...


class MinioBlobStore:
    def __init__(self, client: Minio):
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> MinioBlobStore:
        client = Minio(
            f"{settings.minio_endpoint}:{settings.minio_port}",
            access_key=settings.minio_root_user,
            secret_key=settings.minio_root_password.get_secret_value(),
            secure=settings.minio_use_ssl,
        )
        return cls(client)

    async def bucket_exists(self, bucket: str) -> bool:
        return await asyncio.to_thread(self._client.bucket_exists, bucket_name=bucket)

    async def list_object_names(self, bucket: str) -> list[str]:
        def _list() -> list[str]:
            objects = self._client.list_objects(bucket_name=bucket, recursive=True)
            return [obj.object_name for obj in objects if obj.object_name]

        return await asyncio.to_thread(_list)

    async def remove_objects(self, bucket: str, names: list[str]) -> int:
        """Bulk-delete ``names``; returns how many were removed."""
        if not names:
            return 0

        def _remove() -> list[str]:
            # remove_objects is lazy: errors only surface while iterating
            errors = self._client.remove_objects(
                bucket_name=bucket,
                delete_object_list=[DeleteObject(name) for name in names],
            )
            return [err.name for err in errors]

        failed = await asyncio.to_thread(_remove)
        if failed:
            log.warning("blobstore.remove.partial", bucket=bucket, failed=len(failed))
            raise BlobStoreError(
                f"{len(failed)} of {len(names)} objects could not be removed from '{bucket}'",
                failed=failed,
            )
        return len(names)


_blob_store: BlobStore | None = None


def get_blob_store() -> BlobStore:
    global _blob_store
    if _blob_store is None:
        _blob_store = MinioBlobStore.from_settings(load_settings())
    return _blob_store
