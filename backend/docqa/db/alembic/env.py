"""Alembic entry point for the document and conversation schema.

The URL comes from DATABASE_URL when set, falling back to alembic.ini. The
service itself talks through aiosqlite/asyncpg; migrations use the matching
sync drivers.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from backend.docqa.config import get_settings
from backend.docqa.db.engine import normalize_sync_url
from backend.docqa.db.models import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def resolve_migration_url() -> str:
    url = get_settings().database_url or config.get_main_option("sqlalchemy.url") or ""
    return normalize_sync_url(url)


def run_migrations_offline(url: str) -> None:
    """Render the migration SQL without connecting."""
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online(url: str) -> None:
    """Apply migrations over a single short-lived connection."""
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = url
    engine = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()


migration_url = resolve_migration_url()

if context.is_offline_mode():
    run_migrations_offline(migration_url)
else:
    run_migrations_online(migration_url)
