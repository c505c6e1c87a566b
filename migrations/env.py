"""Alembic environment for the Teskilat case schema.

The target URL comes from the app Settings (.env, environment, config.toml),
with .env.local allowed to override for local runs. Async driver names are
swapped for their sync counterparts since Alembic runs synchronously here.
"""

import pathlib
from logging.config import fileConfig

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url

_ROOT = pathlib.Path(__file__).resolve().parents[1]
if (_ROOT / ".env.local").exists():
    load_dotenv(dotenv_path=_ROOT / ".env.local", override=True)

from Teskilat import models  # noqa: E402,F401  (registers tables on Base.metadata)
from Teskilat.config import load_settings  # noqa: E402
from Teskilat.db import Base  # noqa: E402

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)
target_metadata = Base.metadata

_SYNC_DRIVERS = {"postgresql": "postgresql+psycopg", "sqlite": "sqlite"}


def _sync_db_url() -> str:
    url = make_url(load_settings().database_url)
    backend = url.get_backend_name()
    if backend not in _SYNC_DRIVERS:
        raise RuntimeError(f"unsupported migration backend: {backend}")
    return url.set(drivername=_SYNC_DRIVERS[backend]).render_as_string(hide_password=False)


def run_migrations_offline() -> None:
    context.configure(
        url=_sync_db_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(_sync_db_url())
    with engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()
    engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
