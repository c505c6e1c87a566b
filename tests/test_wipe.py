import pytest
from sqlalchemy import select

from Teskilat import models, repos
from Teskilat.blobstore import BlobStoreError
from Teskilat.db import session_scope
from Teskilat.metrics import get_counter
from Teskilat.simulation import (
    WipeCoordinator,
    WipeError,
    WipePartialFailure,
    import_document,
)
from Teskilat.simulation import wipe as wipe_module


class FakeBlobStore:
    def __init__(self, objects=None, *, exists=True, fail_remove=False):
        self.objects = {"teskilat-files": list(objects or [])} if exists else {}
        self.fail_remove = fail_remove
        self.calls: list[str] = []

    async def bucket_exists(self, bucket):
        self.calls.append("bucket_exists")
        return bucket in self.objects

    async def list_object_names(self, bucket):
        self.calls.append("list")
        return list(self.objects[bucket])

    async def remove_objects(self, bucket, names):
        self.calls.append("remove")
        if self.fail_remove:
            raise BlobStoreError("2 of 3 objects could not be removed", failed=names[:2])
        self.objects[bucket] = [n for n in self.objects[bucket] if n not in names]
        return len(names)


async def _seed(case_document):
    await import_document(case_document)
    async with session_scope() as s:
        person_id = (await s.scalars(select(models.Person.id))).first()
        s.add(
            models.File(
                file_name="passport.pdf",
                file_type="application/pdf",
                file_url="people/passport.pdf",
                person_id=person_id,
            )
        )


async def _total_rows() -> int:
    async with session_scope() as s:
        total = 0
        for model in models.WIPE_ORDER:
            total += await repos.count_rows(s, model)
        return total


@pytest.mark.asyncio
async def test_wipe_clears_every_table_and_bucket(case_document):
    await _seed(case_document)
    assert await _total_rows() > 0
    blobs = FakeBlobStore(["people/passport.pdf", "events/photo.jpg", "nested/a/b.txt"])

    result = await WipeCoordinator(blobs, bucket="teskilat-files").wipe()

    assert result.to_payload() == {"message": "All data wiped", "filesRemoved": 3}
    assert await _total_rows() == 0
    assert blobs.objects["teskilat-files"] == []
    assert get_counter("simulation.wipe.completed") == 1
    assert get_counter("simulation.wipe.files_removed") == 3


@pytest.mark.asyncio
async def test_wipe_on_empty_store():
    blobs = FakeBlobStore([])
    result = await WipeCoordinator(blobs, bucket="teskilat-files").wipe()
    assert result.files_removed == 0
    assert await _total_rows() == 0


@pytest.mark.asyncio
async def test_wipe_without_bucket_skips_blob_phase(case_document):
    await import_document(case_document)
    blobs = FakeBlobStore(exists=False)

    result = await WipeCoordinator(blobs, bucket="teskilat-files").wipe()

    assert result.files_removed == 0
    assert blobs.calls == ["bucket_exists"]
    assert await _total_rows() == 0


@pytest.mark.asyncio
async def test_blob_failure_is_reported_as_partial(case_document):
    await import_document(case_document)
    blobs = FakeBlobStore(["a", "b", "c"], fail_remove=True)

    with pytest.raises(WipePartialFailure) as ei:
        await WipeCoordinator(blobs, bucket="teskilat-files").wipe()

    exc = ei.value
    assert exc.bucket == "teskilat-files"
    assert exc.pending_objects == 3
    assert "teskilat-files" in str(exc)
    # Relational phase already committed
    assert await _total_rows() == 0
    assert get_counter("simulation.wipe.partial") == 1
    assert get_counter("simulation.wipe.completed") == 0


@pytest.mark.asyncio
async def test_relational_failure_leaves_blobs_alone(monkeypatch, case_document):
    await import_document(case_document)
    blobs = FakeBlobStore(["a"])

    async def _broken(session):
        raise RuntimeError("database is locked")

    monkeypatch.setattr(wipe_module, "purge_relational", _broken)

    with pytest.raises(WipeError):
        await WipeCoordinator(blobs, bucket="teskilat-files").wipe()

    assert blobs.calls == []
    assert blobs.objects["teskilat-files"] == ["a"]
    assert await _total_rows() > 0
    assert get_counter("simulation.wipe.failed") == 1


@pytest.mark.asyncio
async def test_wipe_then_import_starts_clean(case_document):
    await import_document(case_document)
    await WipeCoordinator(FakeBlobStore(), bucket="teskilat-files").wipe()
    summary = await import_document(case_document)
    assert summary.people == 2
    async with session_scope() as s:
        assert await repos.count_rows(s, models.Person) == 2
