"""Typed shape of a simulation import document.

The wire format is camelCase JSON; entity entries carry a caller-chosen ``_ref``
instead of a database id. Relationship entries are a closed union keyed by
``type``, and every variant declares which of its fields are endpoints and
which entity collection each endpoint must point into.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StringConstraints,
    ValidationError,
)
from pydantic.alias_generators import to_camel

from Teskilat.models import EstimatedStatus, RelationStrength, RiskLevel
from Teskilat.simulation.errors import SchemaValidationError

NonEmptyStr = Annotated[str, StringConstraints(min_length=1)]


def _parse_iso_datetime(value: Any) -> Any:
    # Full date-time only: no epoch numbers, no bare dates, 'T' separator
    if not isinstance(value, str) or len(value) < 16 or value[10] not in "Tt":
        raise ValueError("expected an ISO-8601 date-time string")
    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        raise ValueError("expected an ISO-8601 date-time string") from exc


def _assume_utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


Timestamp = Annotated[datetime, BeforeValidator(_parse_iso_datetime), AfterValidator(_assume_utc)]


class Collection(str, enum.Enum):
    """Entity collections of a document; values are the wire keys."""

    PEOPLE = "people"
    ORGANIZATIONS = "organizations"
    EVENTS = "events"


class RelationshipKind(str, enum.Enum):
    PERSON_TO_PERSON = "person-to-person"
    PERSON_TO_ORG = "person-to-org"
    ORG_TO_ORG = "org-to-org"
    EVENT_TO_PERSON = "event-to-person"
    EVENT_TO_ORG = "event-to-org"
    EVENT_TO_EVENT = "event-to-event"

    @property
    def breakdown_key(self) -> str:
        return _BREAKDOWN_KEYS[self]


_BREAKDOWN_KEYS = {
    RelationshipKind.PERSON_TO_PERSON: "personToPerson",
    RelationshipKind.PERSON_TO_ORG: "personToOrg",
    RelationshipKind.ORG_TO_ORG: "orgToOrg",
    RelationshipKind.EVENT_TO_PERSON: "eventToPerson",
    RelationshipKind.EVENT_TO_ORG: "eventToOrg",
    RelationshipKind.EVENT_TO_EVENT: "eventToEvent",
}


@dataclass(frozen=True)
class Endpoint:
    """One end of a relationship: document field, target collection, FK column."""

    field: str
    collection: Collection
    column: str


class _WireModel(BaseModel):
    # Wire keys only; unknown keys (snake_case included) are dropped
    model_config = ConfigDict(alias_generator=to_camel, extra="ignore", frozen=True)


class _SummaryModel(_WireModel):
    model_config = ConfigDict(populate_by_name=True)


# --- Entity entries ---


class EntityEntry(_WireModel):
    ref: NonEmptyStr = Field(alias="_ref")

    def attributes(self) -> dict[str, Any]:
        """Column values for the persisted row (everything except ``_ref``)."""
        return self.model_dump(exclude={"ref"})


class PersonEntry(EntityEntry):
    first_name: str | None = None
    last_name: str | None = None
    aliases: list[str] | None = None
    date_of_birth: Timestamp | None = None
    place_of_birth: str | None = None
    nationality: str | None = None
    gender: str | None = None
    photo_url: str | None = None
    email: list[str] | None = None
    phone: list[str] | None = None
    address: str | None = None
    passport_no: str | None = None
    national_id: str | None = None
    tax_id: str | None = None
    drivers_license: str | None = None
    social_media: dict[str, str] | None = None
    notes: str | None = None
    tags: list[str] | None = None
    risk_level: RiskLevel | None = None


class OrganizationEntry(EntityEntry):
    name: NonEmptyStr
    type: str | None = None
    industry: str | None = None
    country: str | None = None
    address: str | None = None
    website: str | None = None
    phone: list[str] | None = None
    email: list[str] | None = None
    founded_at: Timestamp | None = None
    description: str | None = None
    notes: str | None = None
    tags: list[str] | None = None
    risk_level: RiskLevel | None = None


class EventEntry(EntityEntry):
    title: NonEmptyStr
    type: str | None = None
    description: str | None = None
    date: Timestamp | None = None
    end_date: Timestamp | None = None
    location: str | None = None
    latitude: StrictFloat | None = None
    longitude: StrictFloat | None = None
    country: str | None = None
    estimated_status: EstimatedStatus | None = None
    notes: str | None = None
    tags: list[str] | None = None


# --- Relationship entries ---


class RelationshipEntryBase(_WireModel):
    kind: ClassVar[RelationshipKind]
    endpoints: ClassVar[tuple[Endpoint, Endpoint]]

    def endpoint_refs(self) -> list[tuple[Endpoint, str]]:
        return [(ep, getattr(self, ep.field)) for ep in self.endpoints]

    def attributes(self) -> dict[str, Any]:
        """Non-endpoint column values for the persisted row."""
        return self.model_dump(exclude={"type", *(ep.field for ep in self.endpoints)})


class PersonToPersonEntry(RelationshipEntryBase):
    kind = RelationshipKind.PERSON_TO_PERSON
    endpoints = (
        Endpoint("source", Collection.PEOPLE, "source_person_id"),
        Endpoint("target", Collection.PEOPLE, "target_person_id"),
    )

    type: Literal["person-to-person"]
    source: NonEmptyStr
    target: NonEmptyStr
    relationship_type: str | None = None
    context: str | None = None
    estimated_status: EstimatedStatus | None = None
    strength: RelationStrength | None = None
    start_date: Timestamp | None = None
    end_date: Timestamp | None = None
    notes: str | None = None
    tags: list[str] | None = None


class PersonToOrgEntry(RelationshipEntryBase):
    kind = RelationshipKind.PERSON_TO_ORG
    endpoints = (
        Endpoint("person", Collection.PEOPLE, "person_id"),
        Endpoint("organization", Collection.ORGANIZATIONS, "organization_id"),
    )

    type: Literal["person-to-org"]
    person: NonEmptyStr
    organization: NonEmptyStr
    role: str | None = None
    department: str | None = None
    context: str | None = None
    estimated_status: EstimatedStatus | None = None
    currently_active: StrictBool = True
    start_date: Timestamp | None = None
    end_date: Timestamp | None = None
    notes: str | None = None
    tags: list[str] | None = None


class OrgToOrgEntry(RelationshipEntryBase):
    kind = RelationshipKind.ORG_TO_ORG
    endpoints = (
        Endpoint("source", Collection.ORGANIZATIONS, "source_org_id"),
        Endpoint("target", Collection.ORGANIZATIONS, "target_org_id"),
    )

    type: Literal["org-to-org"]
    source: NonEmptyStr
    target: NonEmptyStr
    relationship_type: str | None = None
    context: str | None = None
    estimated_status: EstimatedStatus | None = None
    currently_active: StrictBool = True
    start_date: Timestamp | None = None
    end_date: Timestamp | None = None
    notes: str | None = None
    tags: list[str] | None = None


class EventToPersonEntry(RelationshipEntryBase):
    kind = RelationshipKind.EVENT_TO_PERSON
    endpoints = (
        Endpoint("event", Collection.EVENTS, "event_id"),
        Endpoint("person", Collection.PEOPLE, "person_id"),
    )

    type: Literal["event-to-person"]
    event: NonEmptyStr
    person: NonEmptyStr
    role: str | None = None
    notes: str | None = None


class EventToOrgEntry(RelationshipEntryBase):
    kind = RelationshipKind.EVENT_TO_ORG
    endpoints = (
        Endpoint("event", Collection.EVENTS, "event_id"),
        Endpoint("organization", Collection.ORGANIZATIONS, "organization_id"),
    )

    type: Literal["event-to-org"]
    event: NonEmptyStr
    organization: NonEmptyStr
    role: str | None = None
    notes: str | None = None


class EventToEventEntry(RelationshipEntryBase):
    kind = RelationshipKind.EVENT_TO_EVENT
    endpoints = (
        Endpoint("source", Collection.EVENTS, "source_event_id"),
        Endpoint("target", Collection.EVENTS, "target_event_id"),
    )

    type: Literal["event-to-event"]
    source: NonEmptyStr
    target: NonEmptyStr
    relationship_type: str | None = None
    notes: str | None = None


RelationshipEntry = Annotated[
    Union[
        PersonToPersonEntry,
        PersonToOrgEntry,
        OrgToOrgEntry,
        EventToPersonEntry,
        EventToOrgEntry,
        EventToEventEntry,
    ],
    Field(discriminator="type"),
]


class ImportDocument(BaseModel):
    people: list[PersonEntry] = Field(default_factory=list)
    organizations: list[OrganizationEntry] = Field(default_factory=list)
    events: list[EventEntry] = Field(default_factory=list)
    relationships: list[RelationshipEntry] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore", frozen=True)

    def entries(self, collection: Collection) -> list[EntityEntry]:
        return list(getattr(self, collection.value))

    def refs(self, collection: Collection) -> list[str]:
        return [entry.ref for entry in self.entries(collection)]

    def relationships_of(self, kind: RelationshipKind) -> list[RelationshipEntryBase]:
        return [rel for rel in self.relationships if rel.kind is kind]

    @property
    def is_empty(self) -> bool:
        return not (self.people or self.organizations or self.events or self.relationships)


# --- Outbound summary ---


class RelationshipBreakdown(_SummaryModel):
    person_to_person: int = 0
    person_to_org: int = 0
    org_to_org: int = 0
    event_to_person: int = 0
    event_to_org: int = 0
    event_to_event: int = 0


class ImportSummary(_SummaryModel):
    people: int = 0
    organizations: int = 0
    events: int = 0
    relationships: int = 0
    breakdown: RelationshipBreakdown = Field(default_factory=RelationshipBreakdown)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


def _problems_from(exc: ValidationError) -> list[dict[str, Any]]:
    problems: list[dict[str, Any]] = []
    for err in exc.errors(include_url=False):
        path = ".".join(str(part) for part in err["loc"]) or "<root>"
        problems.append({"path": path, "reason": err["msg"]})
    return problems


def parse_document(value: Any) -> ImportDocument:
    """Validate an already-decoded JSON value into an ImportDocument.

    Raises:
        SchemaValidationError: listing every offending field, not just the first.
    """
    try:
        return ImportDocument.model_validate(value)
    except ValidationError as exc:
        raise SchemaValidationError(_problems_from(exc)) from exc
