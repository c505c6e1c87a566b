"""FastAPI app entrypoint for Teskilat."""

import time
import uuid

import structlog
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from Teskilat import models, repos
from Teskilat.blobstore import BlobStore, get_blob_store
from Teskilat.config import load_settings
from Teskilat.db import session_scope
from Teskilat.logging import redact_settings, setup_logging
from Teskilat.metrics import get_counters
from Teskilat.simulation import (
    GraphWriteError,
    ReferenceIntegrityError,
    SchemaValidationError,
    WipeCoordinator,
    WipeError,
    WipePartialFailure,
    import_document,
)

log = structlog.get_logger()
settings = load_settings()
setup_logging(settings)
app = FastAPI(title="Teskilat")


@app.on_event("startup")
async def startup():
    log.info("app.startup", config=redact_settings(settings))


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Assign a request_id, bind it to structlog context, and measure duration."""
    from structlog.contextvars import bind_contextvars, clear_contextvars

    request_id = str(uuid.uuid4())
    start = time.perf_counter()
    bind_contextvars(request_id=request_id)
    status_code = 500
    try:
        response = await call_next(request)
        status_code = getattr(response, "status_code", 200)
        return response
    finally:
        duration_ms = int((time.perf_counter() - start) * 1000)
        log.info(
            "http.request.completed",
            http_path=str(request.url.path),
            http_method=request.method,
            http_status_code=status_code,
            duration_ms=duration_ms,
        )
        clear_contextvars()


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


# --- Error mapping ---


@app.exception_handler(SchemaValidationError)
async def _schema_error(request: Request, exc: SchemaValidationError):
    return _error(400, "Validation failed", details=exc.problems)


@app.exception_handler(ReferenceIntegrityError)
async def _integrity_error(request: Request, exc: ReferenceIntegrityError):
    return _error(400, exc.summary, details=exc.details)


@app.exception_handler(GraphWriteError)
async def _write_error(request: Request, exc: GraphWriteError):
    return _error(500, str(exc))


@app.exception_handler(WipeError)
async def _wipe_error(request: Request, exc: WipeError):
    return _error(500, "Failed to wipe data")


@app.exception_handler(WipePartialFailure)
async def _wipe_partial(request: Request, exc: WipePartialFailure):
    return _error(500, str(exc), partial=True, relationalCleared=True, bucket=exc.bucket)


# --- Simulation ---


@app.post("/api/simulation", status_code=201)
async def import_simulation(request: Request):
    if not settings.features_simulation:
        return _error(403, "Simulation import is disabled")
    try:
        body = await request.json()
    except ValueError:
        return _error(400, "Invalid JSON body")
    summary = await import_document(body)
    return {"data": summary.to_payload()}


@app.delete("/api/simulation")
async def wipe_simulation(blob_store: BlobStore = Depends(get_blob_store)):
    if not settings.features_wipe:
        return _error(403, "Wipe is disabled")
    result = await WipeCoordinator(blob_store, bucket=settings.minio_bucket).wipe()
    return {"data": result.to_payload()}


# --- Read-only lookups ---


async def _entity_response(model: type[models.Base], entity_id: uuid.UUID, label: str):
    async with session_scope() as s:
        obj = await repos.get_live(s, model, entity_id)
        if obj is None:
            return _error(404, f"{label} not found")
        return {"data": repos.row_to_payload(obj)}


@app.get("/api/people/{entity_id}")
async def get_person(entity_id: uuid.UUID):
    return await _entity_response(models.Person, entity_id, "Person")


@app.get("/api/organizations/{entity_id}")
async def get_organization(entity_id: uuid.UUID):
    return await _entity_response(models.Organization, entity_id, "Organization")


@app.get("/api/events/{entity_id}")
async def get_event(entity_id: uuid.UUID):
    return await _entity_response(models.Event, entity_id, "Event")


# --- Ops ---


@app.get("/healthz")
async def healthz():
    try:
        async with session_scope() as s:
            await repos.healthcheck(s)
    except Exception as err:
        raise HTTPException(status_code=500, detail=f"unhealthy: {err}") from err
    return {"status": "ok"}


@app.get("/metrics")
async def metrics():
    if not settings.metrics_endpoint_enabled:
        raise HTTPException(status_code=404, detail="metrics disabled")
    return get_counters()
