# tests/conftest.py

import os
from collections.abc import AsyncIterator

import pytest

# Point the app (Teskilat.db.get_engine) at a process-local in-memory DB before
# any app module is imported.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("LOGGING_FILE", "NONE")

# The DB module resolves its URL at import; dotenv/TOML could still win there,
# so override the module-level constant before any engine is created.
import Teskilat.db as _db  # noqa: E402

_db.DATABASE_URL = os.environ["DATABASE_URL"]
_db._engine = None
_db._sessionmaker = None
_db._schema_initialized = False

# Import models so all ORM tables are registered on Base.metadata before create_all
from Teskilat import models as _models  # noqa: F401,E402
from Teskilat.db import Base, dispose_engine, get_engine, get_sessionmaker  # noqa: E402
from Teskilat.metrics import reset_counters  # noqa: E402


# Each test gets a brand-new in-memory database bound to its own event loop.
# Disposing the StaticPool engine drops the database with its only connection.
@pytest.fixture(autouse=True)
async def _fresh_db_per_test() -> AsyncIterator[None]:
    await dispose_engine()
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    _db._schema_initialized = True
    reset_counters()
    try:
        yield None
    finally:
        reset_counters()
        await dispose_engine()


@pytest.fixture
async def db():
    sm = get_sessionmaker()
    async with sm() as s:
        try:
            yield s
        finally:
            await s.rollback()
            await s.close()


@pytest.fixture
def case_document() -> dict:
    """A small but complete investigation graph touching every relationship kind."""
    return {
        "people": [
            {
                "_ref": "p-ahmet",
                "firstName": "Ahmet",
                "lastName": "Yilmaz",
                "aliases": ["Hoca"],
                "dateOfBirth": "1975-03-14T00:00:00Z",
                "riskLevel": "HIGH",
                "socialMedia": {"x": "@ahmety"},
                "tags": ["finance"],
            },
            {"_ref": "p-elif", "firstName": "Elif", "lastName": "Demir", "riskLevel": "LOW"},
        ],
        "organizations": [
            {"_ref": "o-holding", "name": "Yilmaz Holding", "country": "TR", "riskLevel": "MEDIUM"},
            {"_ref": "o-shell", "name": "Anadolu Trade Ltd", "country": "CY"},
        ],
        "events": [
            {
                "_ref": "e-meeting",
                "title": "Istanbul meeting",
                "date": "2021-06-01T10:00:00Z",
                "latitude": 41.0082,
                "longitude": 28.9784,
                "estimatedStatus": "CONFIRMED",
            },
            {"_ref": "e-transfer", "title": "Wire transfer", "estimatedStatus": "SUSPECTED"},
        ],
        "relationships": [
            {
                "type": "person-to-person",
                "source": "p-ahmet",
                "target": "p-elif",
                "relationshipType": "associate",
                "strength": "STRONG",
            },
            {
                "type": "person-to-org",
                "person": "p-ahmet",
                "organization": "o-holding",
                "role": "CEO",
            },
            {
                "type": "person-to-org",
                "person": "p-elif",
                "organization": "o-shell",
                "role": "Director",
                "currentlyActive": False,
            },
            {
                "type": "org-to-org",
                "source": "o-holding",
                "target": "o-shell",
                "relationshipType": "subsidiary",
            },
            {"type": "event-to-person", "event": "e-meeting", "person": "p-ahmet"},
            {"type": "event-to-org", "event": "e-transfer", "organization": "o-shell"},
            {"type": "event-to-event", "source": "e-meeting", "target": "e-transfer"},
        ],
    }
