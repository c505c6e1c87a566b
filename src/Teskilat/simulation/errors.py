"""Error taxonomy for the bulk import and wipe pipeline."""

from __future__ import annotations

from typing import Any

GRAPH_WRITE_FAILED = "Failed to import simulation data. Transaction rolled back."


class SimulationError(Exception):
    """Base exception for simulation import/wipe errors."""

    pass


class SchemaValidationError(SimulationError):
    """The document failed structural validation.

    ``problems`` holds one ``{"path": ..., "reason": ...}`` entry per offending field.
    """

    def __init__(self, problems: list[dict[str, Any]]):
        self.problems = problems
        super().__init__(f"Validation failed ({len(problems)} problem(s))")


class ReferenceIntegrityError(SimulationError):
    """Duplicate or dangling ``_ref`` values were found; nothing was written."""

    def __init__(self, duplicates: list[str], dangling: list[str]):
        self.duplicates = duplicates
        self.dangling = dangling
        super().__init__(self.summary)

    @property
    def summary(self) -> str:
        if self.duplicates and self.dangling:
            return "Duplicate and dangling _ref references found"
        if self.duplicates:
            return "Duplicate _ref keys found"
        return "Dangling _ref references in relationships"

    @property
    def details(self) -> list[str]:
        return [*self.duplicates, *self.dangling]


class UnresolvedReferenceError(LookupError):
    """A ``_ref`` was looked up before (or without) being bound.

    Only reachable when the integrity check was bypassed; aborts the write.
    """

    pass


class GraphWriteError(SimulationError):
    """The write transaction failed and was rolled back."""

    def __init__(self, message: str = GRAPH_WRITE_FAILED):
        super().__init__(message)


class WipeError(SimulationError):
    """The relational purge failed; the blob store was not touched."""

    pass


class WipePartialFailure(SimulationError):
    """Relational rows were purged but the blob purge did not finish."""

    def __init__(self, bucket: str, pending_objects: int | None, reason: str):
        self.bucket = bucket
        self.pending_objects = pending_objects
        self.reason = reason
        super().__init__(
            f"Relational data wiped but blob purge of bucket '{bucket}' failed: {reason}"
        )
