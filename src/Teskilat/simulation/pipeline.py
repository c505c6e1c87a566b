"""Simulation import entry point: validate, check refs, write in one transaction."""

from __future__ import annotations

import time
from typing import Any

import structlog

from Teskilat.db import session_scope
from Teskilat.metrics import inc_counter, observe_histogram
from Teskilat.simulation.errors import (
    GraphWriteError,
    ReferenceIntegrityError,
    SchemaValidationError,
)
from Teskilat.simulation.integrity import ensure_references_clean
from Teskilat.simulation.schemas import ImportDocument, ImportSummary, parse_document
from Teskilat.simulation.writer import GraphWriter

log = structlog.get_logger()


def validate_document(value: Any) -> ImportDocument:
    """Run both pre-write stages; no storage is touched.

    Raises:
        SchemaValidationError: the document shape is wrong.
        ReferenceIntegrityError: duplicate or dangling ``_ref`` values.
    """
    try:
        document = parse_document(value)
    except SchemaValidationError as exc:
        inc_counter("simulation.import.rejected.schema")
        log.info("simulation.import.rejected", stage="schema", problems=len(exc.problems))
        raise

    try:
        ensure_references_clean(document)
    except ReferenceIntegrityError as exc:
        inc_counter("simulation.import.rejected.integrity")
        log.info(
            "simulation.import.rejected",
            stage="integrity",
            duplicates=len(exc.duplicates),
            dangling=len(exc.dangling),
        )
        raise
    return document


async def import_document(value: Any) -> ImportSummary:
    """Import a decoded JSON document atomically and return per-kind counts.

    Validation failures are raised before any storage access. Any failure while
    writing rolls the whole transaction back and surfaces as GraphWriteError;
    no partial counts are reported.
    """
    inc_counter("simulation.import.requested")
    start = time.perf_counter()
    document = validate_document(value)

    try:
        async with session_scope() as session:
            summary = await GraphWriter(session).write(document)
    except Exception as exc:
        inc_counter("simulation.import.rolled_back")
        log.error(
            "simulation.import.rolled_back",
            error_type=type(exc).__name__,
            error=str(exc),
        )
        raise GraphWriteError() from exc

    duration_ms = int((time.perf_counter() - start) * 1000)
    observe_histogram("simulation.import.duration_ms", duration_ms)
    inc_counter("simulation.import.committed")
    payload = summary.to_payload()
    for key in ("people", "organizations", "events", "relationships"):
        inc_counter(f"simulation.import.rows.{key}", payload[key])
    log.info("simulation.import.committed", duration_ms=duration_ms, **payload)
    return summary
