# models.py

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Text,
    Uuid,
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import Mapped, mapped_column

from Teskilat.db import Base


class RiskLevel(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class EstimatedStatus(str, enum.Enum):
    CONFIRMED = "CONFIRMED"
    SUSPECTED = "SUSPECTED"
    UNVERIFIED = "UNVERIFIED"
    DENIED = "DENIED"


class RelationStrength(str, enum.Enum):
    STRONG = "STRONG"
    MODERATE = "MODERATE"
    WEAK = "WEAK"
    UNKNOWN = "UNKNOWN"


# text[] on Postgres, JSON list elsewhere
StringList = JSON(none_as_null=True).with_variant(postgresql.ARRAY(Text), "postgresql")
JSONDocument = JSON(none_as_null=True).with_variant(
    postgresql.JSONB(none_as_null=True), "postgresql"
)

_risk_level = SAEnum(RiskLevel, name="risk_level")
_estimated_status = SAEnum(EstimatedStatus, name="estimated_status")
_relation_strength = SAEnum(RelationStrength, name="relation_strength")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _uuid_pk() -> Mapped[uuid.UUID]:
    return mapped_column(Uuid, primary_key=True, default=uuid.uuid4)


def _created_at() -> Mapped[datetime]:
    return mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)


def _updated_at() -> Mapped[datetime]:
    return mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)


def _deleted_at() -> Mapped[datetime | None]:
    # Soft-deletion marker; NULL means live
    return mapped_column(DateTime(timezone=True), nullable=True)


# --- Core entities ---


class Person(Base):
    __tablename__ = "person"
    id: Mapped[uuid.UUID] = _uuid_pk()
    first_name: Mapped[str | None] = mapped_column(Text)
    last_name: Mapped[str | None] = mapped_column(Text)
    aliases: Mapped[list[str] | None] = mapped_column(StringList)
    date_of_birth: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    place_of_birth: Mapped[str | None] = mapped_column(Text)
    nationality: Mapped[str | None] = mapped_column(Text)
    gender: Mapped[str | None] = mapped_column(Text)
    photo_url: Mapped[str | None] = mapped_column(Text)
    email: Mapped[list[str] | None] = mapped_column(StringList)
    phone: Mapped[list[str] | None] = mapped_column(StringList)
    address: Mapped[str | None] = mapped_column(Text)
    passport_no: Mapped[str | None] = mapped_column(Text)
    national_id: Mapped[str | None] = mapped_column(Text)
    tax_id: Mapped[str | None] = mapped_column(Text)
    drivers_license: Mapped[str | None] = mapped_column(Text)
    social_media: Mapped[dict | None] = mapped_column(JSONDocument)
    notes: Mapped[str | None] = mapped_column(Text)
    tags: Mapped[list[str] | None] = mapped_column(StringList)
    risk_level: Mapped[RiskLevel | None] = mapped_column(_risk_level)
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()
    deleted_at: Mapped[datetime | None] = _deleted_at()


class Organization(Base):
    __tablename__ = "organization"
    id: Mapped[uuid.UUID] = _uuid_pk()
    name: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str | None] = mapped_column(Text)
    industry: Mapped[str | None] = mapped_column(Text)
    country: Mapped[str | None] = mapped_column(Text)
    address: Mapped[str | None] = mapped_column(Text)
    website: Mapped[str | None] = mapped_column(Text)
    phone: Mapped[list[str] | None] = mapped_column(StringList)
    email: Mapped[list[str] | None] = mapped_column(StringList)
    founded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    description: Mapped[str | None] = mapped_column(Text)
    notes: Mapped[str | None] = mapped_column(Text)
    tags: Mapped[list[str] | None] = mapped_column(StringList)
    risk_level: Mapped[RiskLevel | None] = mapped_column(_risk_level)
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()
    deleted_at: Mapped[datetime | None] = _deleted_at()


class Event(Base):
    __tablename__ = "event"
    id: Mapped[uuid.UUID] = _uuid_pk()
    title: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str | None] = mapped_column(Text)
    description: Mapped[str | None] = mapped_column(Text)
    date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    location: Mapped[str | None] = mapped_column(Text)
    latitude: Mapped[float | None] = mapped_column(Float)
    longitude: Mapped[float | None] = mapped_column(Float)
    country: Mapped[str | None] = mapped_column(Text)
    estimated_status: Mapped[EstimatedStatus | None] = mapped_column(_estimated_status)
    notes: Mapped[str | None] = mapped_column(Text)
    tags: Mapped[list[str] | None] = mapped_column(StringList)
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()
    deleted_at: Mapped[datetime | None] = _deleted_at()


# --- Relationship tables ---


class PersonToPersonRelation(Base):
    __tablename__ = "person_to_person_relation"
    id: Mapped[uuid.UUID] = _uuid_pk()
    source_person_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("person.id"), nullable=False, index=True
    )
    target_person_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("person.id"), nullable=False, index=True
    )
    relationship_type: Mapped[str | None] = mapped_column(Text)
    context: Mapped[str | None] = mapped_column(Text)
    estimated_status: Mapped[EstimatedStatus | None] = mapped_column(_estimated_status)
    strength: Mapped[RelationStrength | None] = mapped_column(_relation_strength)
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    notes: Mapped[str | None] = mapped_column(Text)
    tags: Mapped[list[str] | None] = mapped_column(StringList)
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()
    deleted_at: Mapped[datetime | None] = _deleted_at()


class PersonToOrgRelation(Base):
    __tablename__ = "person_to_org_relation"
    id: Mapped[uuid.UUID] = _uuid_pk()
    person_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("person.id"), nullable=False, index=True
    )
    organization_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("organization.id"), nullable=False, index=True
    )
    role: Mapped[str | None] = mapped_column(Text)
    department: Mapped[str | None] = mapped_column(Text)
    context: Mapped[str | None] = mapped_column(Text)
    estimated_status: Mapped[EstimatedStatus | None] = mapped_column(_estimated_status)
    currently_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    notes: Mapped[str | None] = mapped_column(Text)
    tags: Mapped[list[str] | None] = mapped_column(StringList)
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()
    deleted_at: Mapped[datetime | None] = _deleted_at()


class OrgToOrgRelation(Base):
    __tablename__ = "org_to_org_relation"
    id: Mapped[uuid.UUID] = _uuid_pk()
    source_org_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("organization.id"), nullable=False, index=True
    )
    target_org_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("organization.id"), nullable=False, index=True
    )
    relationship_type: Mapped[str | None] = mapped_column(Text)
    context: Mapped[str | None] = mapped_column(Text)
    estimated_status: Mapped[EstimatedStatus | None] = mapped_column(_estimated_status)
    currently_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    notes: Mapped[str | None] = mapped_column(Text)
    tags: Mapped[list[str] | None] = mapped_column(StringList)
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()
    deleted_at: Mapped[datetime | None] = _deleted_at()


class EventToPerson(Base):
    __tablename__ = "event_to_person"
    id: Mapped[uuid.UUID] = _uuid_pk()
    event_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("event.id"), nullable=False, index=True)
    person_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("person.id"), nullable=False, index=True
    )
    role: Mapped[str | None] = mapped_column(Text)
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = _created_at()
    deleted_at: Mapped[datetime | None] = _deleted_at()


class EventToOrganization(Base):
    __tablename__ = "event_to_organization"
    id: Mapped[uuid.UUID] = _uuid_pk()
    event_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("event.id"), nullable=False, index=True)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("organization.id"), nullable=False, index=True
    )
    role: Mapped[str | None] = mapped_column(Text)
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = _created_at()
    deleted_at: Mapped[datetime | None] = _deleted_at()


class EventToEvent(Base):
    __tablename__ = "event_to_event"
    id: Mapped[uuid.UUID] = _uuid_pk()
    source_event_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("event.id"), nullable=False, index=True
    )
    target_event_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("event.id"), nullable=False, index=True
    )
    relationship_type: Mapped[str | None] = mapped_column(Text)
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = _created_at()
    deleted_at: Mapped[datetime | None] = _deleted_at()


# --- File (polymorphic attachment) ---


class File(Base):
    __tablename__ = "file"
    id: Mapped[uuid.UUID] = _uuid_pk()
    file_name: Mapped[str] = mapped_column(Text, nullable=False)
    file_type: Mapped[str] = mapped_column(Text, nullable=False)
    # Object name inside the attachment bucket
    file_url: Mapped[str] = mapped_column(Text, nullable=False)
    file_size: Mapped[int | None] = mapped_column(Integer)
    description: Mapped[str | None] = mapped_column(Text)
    uploaded_by: Mapped[str | None] = mapped_column(Text)

    # Exactly one owner should be set per record
    person_id: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("person.id"), nullable=True)
    organization_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("organization.id"), nullable=True
    )
    event_id: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("event.id"), nullable=True)
    person_to_person_relation_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("person_to_person_relation.id"), nullable=True
    )
    person_to_org_relation_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("person_to_org_relation.id"), nullable=True
    )
    org_to_org_relation_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("org_to_org_relation.id"), nullable=True
    )
    event_to_event_relation_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("event_to_event.id"), nullable=True
    )

    created_at: Mapped[datetime] = _created_at()
    deleted_at: Mapped[datetime | None] = _deleted_at()


# Child-first order; safe for row-by-row deletes under FK enforcement
WIPE_ORDER: tuple[type[Base], ...] = (
    File,
    EventToEvent,
    EventToOrganization,
    EventToPerson,
    OrgToOrgRelation,
    PersonToOrgRelation,
    PersonToPersonRelation,
    Event,
    Organization,
    Person,
)
