"""Transactional graph writer for simulation imports.

Entities go in first (people, organizations, events) so that every relationship
row can name durable ids for both of its endpoints. The writer never commits;
the caller owns the transaction and rolls it back if anything here raises.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Sequence

import structlog
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession

from Teskilat import models
from Teskilat.simulation.errors import UnresolvedReferenceError
from Teskilat.simulation.schemas import (
    Collection,
    EntityEntry,
    ImportDocument,
    ImportSummary,
    RelationshipBreakdown,
    RelationshipEntryBase,
    RelationshipKind,
)

log = structlog.get_logger()

ENTITY_MODELS: dict[Collection, type[models.Base]] = {
    Collection.PEOPLE: models.Person,
    Collection.ORGANIZATIONS: models.Organization,
    Collection.EVENTS: models.Event,
}

RELATIONSHIP_MODELS: dict[RelationshipKind, type[models.Base]] = {
    RelationshipKind.PERSON_TO_PERSON: models.PersonToPersonRelation,
    RelationshipKind.PERSON_TO_ORG: models.PersonToOrgRelation,
    RelationshipKind.ORG_TO_ORG: models.OrgToOrgRelation,
    RelationshipKind.EVENT_TO_PERSON: models.EventToPerson,
    RelationshipKind.EVENT_TO_ORG: models.EventToOrganization,
    RelationshipKind.EVENT_TO_EVENT: models.EventToEvent,
}


class ReferenceMap:
    """Write-once mapping from document ``_ref`` to the id storage assigned."""

    def __init__(self) -> None:
        self._ids: dict[str, uuid.UUID] = {}

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, ref: object) -> bool:
        return ref in self._ids

    def bind(self, refs: Sequence[str], ids: Iterable[uuid.UUID]) -> None:
        ids = list(ids)
        if len(ids) != len(refs):
            raise UnresolvedReferenceError(
                f"storage returned {len(ids)} ids for {len(refs)} inserted rows"
            )
        for ref, ident in zip(refs, ids):
            if ref in self._ids:
                raise ValueError(f'_ref "{ref}" is already bound')
            self._ids[ref] = ident

    def resolve(self, ref: str) -> uuid.UUID:
        try:
            return self._ids[ref]
        except KeyError as exc:
            raise UnresolvedReferenceError(f'_ref "{ref}" was never bound') from exc


class GraphWriter:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def write(self, document: ImportDocument) -> ImportSummary:
        refs = ReferenceMap()
        created: dict[Collection, int] = {}
        for collection, model in ENTITY_MODELS.items():
            created[collection] = await self._insert_entities(
                model, document.entries(collection), refs
            )

        breakdown: dict[str, int] = {}
        for kind, model in RELATIONSHIP_MODELS.items():
            breakdown[kind.breakdown_key] = await self._insert_relationships(
                model, document.relationships_of(kind), refs
            )

        return ImportSummary(
            people=created[Collection.PEOPLE],
            organizations=created[Collection.ORGANIZATIONS],
            events=created[Collection.EVENTS],
            relationships=sum(breakdown.values()),
            breakdown=RelationshipBreakdown.model_validate(breakdown),
        )

    async def _insert_entities(
        self, model: type[models.Base], entries: list[EntityEntry], refs: ReferenceMap
    ) -> int:
        if not entries:
            return 0
        rows = [entry.attributes() for entry in entries]
        # Ids come back in parameter order so they zip with the input refs
        result = await self._session.scalars(
            insert(model).returning(model.id, sort_by_parameter_order=True), rows
        )
        refs.bind([entry.ref for entry in entries], result.all())
        log.debug("simulation.write.entities", table=model.__tablename__, rows=len(rows))
        return len(rows)

    async def _insert_relationships(
        self,
        model: type[models.Base],
        entries: list[RelationshipEntryBase],
        refs: ReferenceMap,
    ) -> int:
        if not entries:
            return 0
        rows = []
        for entry in entries:
            row = entry.attributes()
            for endpoint, ref in entry.endpoint_refs():
                row[endpoint.column] = refs.resolve(ref)
            rows.append(row)
        await self._session.execute(insert(model), rows)
        log.debug("simulation.write.relationships", table=model.__tablename__, rows=len(rows))
        return len(rows)
