# logging.py

import logging
import os
from logging.handlers import RotatingFileHandler

import structlog
from sqlalchemy.engine import make_url
from structlog.contextvars import merge_contextvars

from Teskilat.config import Settings

_DEFAULT_LOG_FILE = "logs/teskilat.jsonl"
_SENSITIVE_SUFFIXES = ("_password", "_secret", "_key")


def _json_formatter() -> structlog.stdlib.ProcessorFormatter:
    # Renders structlog events and stdlib/third-party records alike
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.add_log_level,
            merge_contextvars,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        foreign_pre_chain=[structlog.processors.add_log_level, merge_contextvars],
    )


def _handler_level(name: str | None, fallback: int) -> int | None:
    """Map a configured level name to a logging level; None disables the handler."""
    if (name or "").upper() == "NONE":
        return None
    return getattr(logging, (name or "").upper(), fallback)


def setup_logging(settings: Settings | None = None) -> None:
    """Configure structlog over stdlib logging.

    Console always gets JSON; a rotating JSONL file is added unless its level is
    NONE. Request-scoped values bound with ``bind_contextvars`` (``request_id``)
    are merged into every line.
    """
    level_name = (settings.logging_level if settings else "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    formatter = _json_formatter()
    logging.captureWarnings(True)

    handlers: list[logging.Handler] = []
    console_level = _handler_level(settings.logging_console if settings else level_name, level)
    if console_level is not None:
        console = logging.StreamHandler()
        console.setLevel(console_level)
        handlers.append(console)

    file_level = _handler_level(settings.logging_file if settings else level_name, level)
    if file_level is not None:
        path = settings.logging_file_path if settings else _DEFAULT_LOG_FILE
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        rotating = RotatingFileHandler(
            path,
            maxBytes=settings.logging_max_bytes if settings else 5_000_000,
            backupCount=settings.logging_backup_count if settings else 5,
        )
        rotating.setLevel(file_level)
        handlers.append(rotating)

    for handler in handlers:
        handler.setFormatter(formatter)
    logging.basicConfig(level=level, handlers=handlers, force=True)

    # uvicorn installs its own handlers; route everything through ours
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "sqlalchemy.engine"):
        lg = logging.getLogger(name)
        lg.handlers = []
        lg.propagate = True

    structlog.configure(
        processors=[
            merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def redact_settings(settings: Settings) -> dict:
    """Settings as a dict safe to log: MinIO credentials and DB password hidden."""
    data = settings.model_dump()
    for k in data:
        if k.startswith("minio_root_") or k.endswith(_SENSITIVE_SUFFIXES):
            data[k] = "[REDACTED]"
    data["database_url"] = make_url(settings.database_url).render_as_string(hide_password=True)
    return data
