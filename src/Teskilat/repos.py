# repos.py

from __future__ import annotations

import uuid
from typing import Any

from fastapi.encoders import jsonable_encoder
from pydantic.alias_generators import to_camel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from Teskilat import models


async def healthcheck(s: AsyncSession) -> None:
    """Lightweight DB check to confirm connectivity and basic query works."""
    await s.execute(select(models.Person.id).limit(1))


async def get_live(
    s: AsyncSession, model: type[models.Base], entity_id: uuid.UUID
) -> Any | None:
    """Fetch one row by id, treating soft-deleted rows as absent."""
    q = await s.execute(
        select(model).where(model.id == entity_id, model.deleted_at.is_(None))
    )
    return q.scalar_one_or_none()


async def count_rows(s: AsyncSession, model: type[models.Base]) -> int:
    q = await s.execute(select(func.count()).select_from(model))
    return int(q.scalar_one())


def row_to_payload(obj: models.Base) -> dict[str, Any]:
    """Serialize an ORM row to camelCase JSON-safe values."""
    data = {to_camel(col.key): getattr(obj, col.key) for col in obj.__table__.columns}
    return jsonable_encoder(data)
