#!/usr/bin/env python3
"""
Operator CLI: bulk-import a JSON graph, wipe everything, or serve the HTTP API.

Examples:
  PYTHONPATH=./src python scripts/simulation.py import fixtures/case.json
  PYTHONPATH=./src python scripts/simulation.py wipe --yes
  PYTHONPATH=./src python scripts/simulation.py serve --port 18000

Runs the same pipeline as the HTTP endpoints, against the configured database
and MinIO bucket.
"""
from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import click
import uvicorn

# Ensure src is on the import path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from Teskilat.blobstore import get_blob_store  # noqa: E402
from Teskilat.config import load_settings  # noqa: E402
from Teskilat.db import dispose_engine  # noqa: E402
from Teskilat.logging import setup_logging  # noqa: E402
from Teskilat.simulation import (  # noqa: E402
    GraphWriteError,
    ReferenceIntegrityError,
    SchemaValidationError,
    WipeCoordinator,
    WipeError,
    WipePartialFailure,
    import_document,
)


def _emit(payload: dict, *, err: bool = False) -> None:
    click.echo(json.dumps(payload, indent=2), err=err)


async def _with_engine(coro):
    try:
        return await coro
    finally:
        await dispose_engine()


@click.group()
def cli() -> None:
    """Simulation data tools."""
    setup_logging(load_settings())


@cli.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def import_cmd(path: Path) -> None:
    """Import the simulation document at PATH in a single transaction."""
    try:
        body = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        _emit({"error": "Invalid JSON body", "details": [str(exc)]}, err=True)
        sys.exit(2)

    try:
        summary = asyncio.run(_with_engine(import_document(body)))
    except SchemaValidationError as exc:
        _emit({"error": "Validation failed", "details": exc.problems}, err=True)
        sys.exit(1)
    except ReferenceIntegrityError as exc:
        _emit({"error": exc.summary, "details": exc.details}, err=True)
        sys.exit(1)
    except GraphWriteError as exc:
        _emit({"error": str(exc)}, err=True)
        sys.exit(1)
    _emit({"data": summary.to_payload()})


@cli.command("wipe")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt.")
def wipe_cmd(yes: bool) -> None:
    """Delete ALL relational rows and every object in the attachment bucket."""
    settings = load_settings()
    if not yes:
        click.confirm(
            f"This permanently deletes all data and bucket '{settings.minio_bucket}'"
            " contents. Continue?",
            abort=True,
        )
    coordinator = WipeCoordinator(get_blob_store(), bucket=settings.minio_bucket)
    try:
        result = asyncio.run(_with_engine(coordinator.wipe()))
    except WipePartialFailure as exc:
        _emit({"error": str(exc), "partial": True, "bucket": exc.bucket}, err=True)
        sys.exit(3)
    except WipeError:
        _emit({"error": "Failed to wipe data"}, err=True)
        sys.exit(1)
    _emit({"data": result.to_payload()})


@cli.command("serve")
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", type=int, default=None, help="Defaults to app.port from settings.")
def serve_cmd(host: str, port: int | None) -> None:
    """Run the HTTP API under uvicorn."""
    settings = load_settings()
    uvicorn.run("Teskilat.app:app", host=host, port=port or settings.app_port)


if __name__ == "__main__":  # pragma: no cover
    cli()
