"""Simulation bulk import and full wipe."""  # noqa: N999

from .errors import (
    GraphWriteError,
    ReferenceIntegrityError,
    SchemaValidationError,
    SimulationError,
    UnresolvedReferenceError,
    WipeError,
    WipePartialFailure,
)
from .integrity import IntegrityReport, check_references, ensure_references_clean
from .pipeline import import_document, validate_document
from .schemas import ImportDocument, ImportSummary, RelationshipKind, parse_document
from .wipe import WipeCoordinator, WipeResult, purge_relational
from .writer import GraphWriter, ReferenceMap

__all__ = [
    "GraphWriteError",
    "GraphWriter",
    "ImportDocument",
    "ImportSummary",
    "IntegrityReport",
    "ReferenceIntegrityError",
    "ReferenceMap",
    "RelationshipKind",
    "SchemaValidationError",
    "SimulationError",
    "UnresolvedReferenceError",
    "WipeCoordinator",
    "WipeError",
    "WipePartialFailure",
    "WipeResult",
    "check_references",
    "ensure_references_clean",
    "import_document",
    "parse_document",
    "purge_relational",
    "validate_document",
]
