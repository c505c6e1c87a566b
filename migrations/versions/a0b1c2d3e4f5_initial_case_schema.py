"""initial case schema: entities, relationships, file attachments

Revision ID: a0b1c2d3e4f5
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "a0b1c2d3e4f5"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_ENUMS = {
    "risk_level": ("LOW", "MEDIUM", "HIGH", "CRITICAL"),
    "estimated_status": ("CONFIRMED", "SUSPECTED", "UNVERIFIED", "DENIED"),
    "relation_strength": ("STRONG", "MODERATE", "WEAK", "UNKNOWN"),
}


def _enum(name: str) -> sa.types.TypeEngine:
    values = _ENUMS[name]
    # Postgres types are created once up front, not per table
    return sa.Enum(*values, name=name).with_variant(
        postgresql.ENUM(*values, name=name, create_type=False), "postgresql"
    )


def _string_list() -> sa.types.TypeEngine:
    return sa.JSON().with_variant(postgresql.ARRAY(sa.Text()), "postgresql")


def _timestamps(*, updated: bool = True) -> list[sa.Column]:
    cols = [sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)]
    if updated:
        cols.append(sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False))
    cols.append(sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True))
    return cols


def _fk(column: str, target: str, *, nullable: bool = False) -> sa.Column:
    return sa.Column(column, sa.Uuid(), sa.ForeignKey(target), nullable=nullable)


def upgrade() -> None:
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        for name, values in _ENUMS.items():
            postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)

    op.create_table(
        "person",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("first_name", sa.Text()),
        sa.Column("last_name", sa.Text()),
        sa.Column("aliases", _string_list()),
        sa.Column("date_of_birth", sa.DateTime(timezone=True)),
        sa.Column("place_of_birth", sa.Text()),
        sa.Column("nationality", sa.Text()),
        sa.Column("gender", sa.Text()),
        sa.Column("photo_url", sa.Text()),
        sa.Column("email", _string_list()),
        sa.Column("phone", _string_list()),
        sa.Column("address", sa.Text()),
        sa.Column("passport_no", sa.Text()),
        sa.Column("national_id", sa.Text()),
        sa.Column("tax_id", sa.Text()),
        sa.Column("drivers_license", sa.Text()),
        sa.Column("social_media", sa.JSON().with_variant(postgresql.JSONB(), "postgresql")),
        sa.Column("notes", sa.Text()),
        sa.Column("tags", _string_list()),
        sa.Column("risk_level", _enum("risk_level")),
        *_timestamps(),
    )
    op.create_table(
        "organization",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("type", sa.Text()),
        sa.Column("industry", sa.Text()),
        sa.Column("country", sa.Text()),
        sa.Column("address", sa.Text()),
        sa.Column("website", sa.Text()),
        sa.Column("phone", _string_list()),
        sa.Column("email", _string_list()),
        sa.Column("founded_at", sa.DateTime(timezone=True)),
        sa.Column("description", sa.Text()),
        sa.Column("notes", sa.Text()),
        sa.Column("tags", _string_list()),
        sa.Column("risk_level", _enum("risk_level")),
        *_timestamps(),
    )
    op.create_table(
        "event",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("type", sa.Text()),
        sa.Column("description", sa.Text()),
        sa.Column("date", sa.DateTime(timezone=True)),
        sa.Column("end_date", sa.DateTime(timezone=True)),
        sa.Column("location", sa.Text()),
        sa.Column("latitude", sa.Float()),
        sa.Column("longitude", sa.Float()),
        sa.Column("country", sa.Text()),
        sa.Column("estimated_status", _enum("estimated_status")),
        sa.Column("notes", sa.Text()),
        sa.Column("tags", _string_list()),
        *_timestamps(),
    )

    op.create_table(
        "person_to_person_relation",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _fk("source_person_id", "person.id"),
        _fk("target_person_id", "person.id"),
        sa.Column("relationship_type", sa.Text()),
        sa.Column("context", sa.Text()),
        sa.Column("estimated_status", _enum("estimated_status")),
        sa.Column("strength", _enum("relation_strength")),
        sa.Column("start_date", sa.DateTime(timezone=True)),
        sa.Column("end_date", sa.DateTime(timezone=True)),
        sa.Column("notes", sa.Text()),
        sa.Column("tags", _string_list()),
        *_timestamps(),
    )
    op.create_table(
        "person_to_org_relation",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _fk("person_id", "person.id"),
        _fk("organization_id", "organization.id"),
        sa.Column("role", sa.Text()),
        sa.Column("department", sa.Text()),
        sa.Column("context", sa.Text()),
        sa.Column("estimated_status", _enum("estimated_status")),
        sa.Column("currently_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("start_date", sa.DateTime(timezone=True)),
        sa.Column("end_date", sa.DateTime(timezone=True)),
        sa.Column("notes", sa.Text()),
        sa.Column("tags", _string_list()),
        *_timestamps(),
    )
    op.create_table(
        "org_to_org_relation",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _fk("source_org_id", "organization.id"),
        _fk("target_org_id", "organization.id"),
        sa.Column("relationship_type", sa.Text()),
        sa.Column("context", sa.Text()),
        sa.Column("estimated_status", _enum("estimated_status")),
        sa.Column("currently_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("start_date", sa.DateTime(timezone=True)),
        sa.Column("end_date", sa.DateTime(timezone=True)),
        sa.Column("notes", sa.Text()),
        sa.Column("tags", _string_list()),
        *_timestamps(),
    )
    op.create_table(
        "event_to_person",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _fk("event_id", "event.id"),
        _fk("person_id", "person.id"),
        sa.Column("role", sa.Text()),
        sa.Column("notes", sa.Text()),
        *_timestamps(updated=False),
    )
    op.create_table(
        "event_to_organization",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _fk("event_id", "event.id"),
        _fk("organization_id", "organization.id"),
        sa.Column("role", sa.Text()),
        sa.Column("notes", sa.Text()),
        *_timestamps(updated=False),
    )
    op.create_table(
        "event_to_event",
        sa.Column("id", sa.Uuid(), primary_key=True),
        _fk("source_event_id", "event.id"),
        _fk("target_event_id", "event.id"),
        sa.Column("relationship_type", sa.Text()),
        sa.Column("notes", sa.Text()),
        *_timestamps(updated=False),
    )

    for table, columns in (
        ("person_to_person_relation", ("source_person_id", "target_person_id")),
        ("person_to_org_relation", ("person_id", "organization_id")),
        ("org_to_org_relation", ("source_org_id", "target_org_id")),
        ("event_to_person", ("event_id", "person_id")),
        ("event_to_organization", ("event_id", "organization_id")),
        ("event_to_event", ("source_event_id", "target_event_id")),
    ):
        for column in columns:
            op.create_index(f"ix_{table}_{column}", table, [column])

    op.create_table(
        "file",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("file_name", sa.Text(), nullable=False),
        sa.Column("file_type", sa.Text(), nullable=False),
        sa.Column("file_url", sa.Text(), nullable=False),
        sa.Column("file_size", sa.Integer()),
        sa.Column("description", sa.Text()),
        sa.Column("uploaded_by", sa.Text()),
        _fk("person_id", "person.id", nullable=True),
        _fk("organization_id", "organization.id", nullable=True),
        _fk("event_id", "event.id", nullable=True),
        _fk("person_to_person_relation_id", "person_to_person_relation.id", nullable=True),
        _fk("person_to_org_relation_id", "person_to_org_relation.id", nullable=True),
        _fk("org_to_org_relation_id", "org_to_org_relation.id", nullable=True),
        _fk("event_to_event_relation_id", "event_to_event.id", nullable=True),
        *_timestamps(updated=False),
    )


def downgrade() -> None:
    op.drop_table("file")
    for table in (
        "event_to_event",
        "event_to_organization",
        "event_to_person",
        "org_to_org_relation",
        "person_to_org_relation",
        "person_to_person_relation",
        "event",
        "organization",
        "person",
    ):
        op.drop_table(table)
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        for name in _ENUMS:
            postgresql.ENUM(name=name).drop(bind, checkfirst=True)
