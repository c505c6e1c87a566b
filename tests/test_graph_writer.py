import pytest
from sqlalchemy import select

from Teskilat import models, repos
from Teskilat.models import RiskLevel
from Teskilat.simulation import GraphWriter, UnresolvedReferenceError, parse_document


@pytest.mark.asyncio
async def test_writer_resolves_refs_to_storage_ids(db, case_document):
    summary = await GraphWriter(db).write(parse_document(case_document))
    await db.commit()

    assert summary.people == 2
    assert summary.organizations == 2
    assert summary.events == 2
    assert summary.relationships == 7

    people = {p.first_name: p for p in (await db.scalars(select(models.Person))).all()}
    orgs = {o.name: o for o in (await db.scalars(select(models.Organization))).all()}

    employment = (await db.scalars(select(models.PersonToOrgRelation))).all()
    links = {(r.person_id, r.organization_id) for r in employment}
    assert links == {
        (people["Ahmet"].id, orgs["Yilmaz Holding"].id),
        (people["Elif"].id, orgs["Anadolu Trade Ltd"].id),
    }

    p2p = (await db.scalars(select(models.PersonToPersonRelation))).one()
    assert p2p.source_person_id == people["Ahmet"].id
    assert p2p.target_person_id == people["Elif"].id


@pytest.mark.asyncio
async def test_writer_persists_attributes(db, case_document):
    await GraphWriter(db).write(parse_document(case_document))
    await db.commit()

    ahmet = (
        await db.scalars(select(models.Person).where(models.Person.first_name == "Ahmet"))
    ).one()
    assert ahmet.aliases == ["Hoca"]
    assert ahmet.risk_level is RiskLevel.HIGH
    assert ahmet.social_media == {"x": "@ahmety"}
    assert ahmet.deleted_at is None

    inactive = (
        await db.scalars(
            select(models.PersonToOrgRelation).where(models.PersonToOrgRelation.role == "Director")
        )
    ).one()
    assert inactive.currently_active is False

    active = (
        await db.scalars(
            select(models.PersonToOrgRelation).where(models.PersonToOrgRelation.role == "CEO")
        )
    ).one()
    assert active.currently_active is True


@pytest.mark.asyncio
async def test_writer_breakdown_counts(db, case_document):
    summary = await GraphWriter(db).write(parse_document(case_document))
    payload = summary.to_payload()
    assert payload["breakdown"] == {
        "personToPerson": 1,
        "personToOrg": 2,
        "orgToOrg": 1,
        "eventToPerson": 1,
        "eventToOrg": 1,
        "eventToEvent": 1,
    }
    assert sum(payload["breakdown"].values()) == payload["relationships"]


@pytest.mark.asyncio
async def test_writer_refuses_unbound_ref(db):
    # Bypassing the integrity check: the writer must not invent an endpoint
    doc = parse_document(
        {
            "people": [{"_ref": "p1"}],
            "relationships": [{"type": "person-to-person", "source": "p1", "target": "nobody"}],
        }
    )
    with pytest.raises(UnresolvedReferenceError):
        await GraphWriter(db).write(doc)
    await db.rollback()
    assert await repos.count_rows(db, models.Person) == 0


@pytest.mark.asyncio
async def test_writer_empty_document(db):
    summary = await GraphWriter(db).write(parse_document({}))
    assert summary.to_payload()["relationships"] == 0
    assert summary.people == summary.organizations == summary.events == 0
