"""Pre-write referential checks over a parsed import document.

Both checks are pure and always run to completion so a caller can fix every
problem in one round-trip.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from Teskilat.simulation.errors import ReferenceIntegrityError
from Teskilat.simulation.schemas import Collection, ImportDocument


@dataclass(frozen=True)
class IntegrityReport:
    duplicates: list[str] = field(default_factory=list)
    dangling: list[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not self.duplicates and not self.dangling


def find_duplicate_refs(document: ImportDocument) -> list[str]:
    """Return each ``_ref`` used more than once across all entity collections.

    Each offending value is listed once, in the order its first repeat is seen.
    """
    seen: set[str] = set()
    dupes: list[str] = []
    for collection in Collection:
        for ref in document.refs(collection):
            if ref in seen and ref not in dupes:
                dupes.append(ref)
            seen.add(ref)
    return dupes


def find_dangling_refs(document: ImportDocument) -> list[str]:
    """Return one message per relationship endpoint missing from its collection."""
    known = {collection: set(document.refs(collection)) for collection in Collection}
    errors: list[str] = []
    for rel in document.relationships:
        for endpoint, ref in rel.endpoint_refs():
            if ref not in known[endpoint.collection]:
                errors.append(
                    f'{rel.kind.value}: {endpoint.field} "{ref}" '
                    f"not found in {endpoint.collection.value}"
                )
    return errors


def check_references(document: ImportDocument) -> IntegrityReport:
    return IntegrityReport(
        duplicates=find_duplicate_refs(document),
        dangling=find_dangling_refs(document),
    )


def ensure_references_clean(document: ImportDocument) -> IntegrityReport:
    """Raise ReferenceIntegrityError unless the document's ref graph is clean."""
    report = check_references(document)
    if not report.clean:
        raise ReferenceIntegrityError(report.duplicates, report.dangling)
    return report
