"""Irreversible wipe of all relational rows and attachment blobs.

The two stores do not share a transaction. The relational purge commits first
and the blob purge follows; a failure in between leaves the relational store
empty while objects remain, which is reported as WipePartialFailure so the
caller can retry.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from Teskilat import models
from Teskilat.blobstore import BlobStore
from Teskilat.db import session_scope
from Teskilat.metrics import inc_counter
from Teskilat.simulation.errors import WipeError, WipePartialFailure

log = structlog.get_logger()


@dataclass(frozen=True)
class WipeResult:
    files_removed: int
    message: str = "All data wiped"

    def to_payload(self) -> dict:
        return {"message": self.message, "filesRemoved": self.files_removed}


async def purge_relational(session: AsyncSession) -> None:
    """Delete every entity, relationship and attachment row."""
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        tables = ", ".join(model.__tablename__ for model in models.WIPE_ORDER)
        await session.execute(text(f"TRUNCATE TABLE {tables} CASCADE"))
        return
    # No TRUNCATE elsewhere; delete children before parents
    for model in models.WIPE_ORDER:
        await session.execute(model.__table__.delete())


class WipeCoordinator:
    def __init__(self, blob_store: BlobStore, *, bucket: str):
        self._blobs = blob_store
        self._bucket = bucket

    async def wipe(self) -> WipeResult:
        try:
            async with session_scope() as session:
                await purge_relational(session)
        except Exception as exc:
            inc_counter("simulation.wipe.failed")
            log.error("simulation.wipe.relational.failed", error=str(exc))
            raise WipeError("Failed to wipe data") from exc
        log.info("simulation.wipe.relational.cleared")

        pending: int | None = None
        try:
            removed = 0
            if await self._blobs.bucket_exists(self._bucket):
                names = await self._blobs.list_object_names(self._bucket)
                pending = len(names)
                removed = await self._blobs.remove_objects(self._bucket, names)
            else:
                log.info("simulation.wipe.blob.skipped", bucket=self._bucket, reason="no_bucket")
        except Exception as exc:
            inc_counter("simulation.wipe.partial")
            # Fields needed to reconcile the bucket by hand
            log.error(
                "simulation.wipe.blob.failed",
                bucket=self._bucket,
                pending_objects=pending,
                error=str(exc),
                relational_cleared=True,
            )
            raise WipePartialFailure(self._bucket, pending, str(exc)) from exc

        inc_counter("simulation.wipe.completed")
        inc_counter("simulation.wipe.files_removed", removed)
        log.info("simulation.wipe.completed", bucket=self._bucket, files_removed=removed)
        return WipeResult(files_removed=removed)
