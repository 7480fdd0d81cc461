"""Alembic environment for the Campus Connect schema.

``alembic.ini`` puts ``src/`` on the path, so the application package is
imported directly and its settings supply the database URL unless
``ALEMBIC_URL`` or an explicit ``sqlalchemy.url`` overrides it.
"""
from __future__ import annotations

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

import campus_connect.models  # noqa: F401  registers every table on Base.metadata
from campus_connect.core.settings import settings
from campus_connect.db.session import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

database_url = (
    os.getenv("ALEMBIC_URL")
    or config.get_main_option("sqlalchemy.url")
    or settings.database_url_sync
)
# ConfigParser interpolates "%", which shows up in URL-encoded passwords.
config.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))

target_metadata = Base.metadata

# Bookkeeping tables owned by Alembic or by the database engine itself.
UNMANAGED_TABLES = frozenset({"alembic_version", "sqlite_sequence"})


def include_object(obj, name, type_, reflected, compare_to):
    """Keep autogenerate focused on the tables declared by the models."""
    if type_ == "table":
        return name not in UNMANAGED_TABLES
    return True


def _configure_options() -> dict:
    # SQLite cannot ALTER constraints or enum checks, so changes are rendered as table copies.
    return {
        "target_metadata": target_metadata,
        "include_object": include_object,
        "compare_type": True,
        "render_as_batch": database_url.startswith("sqlite"),
    }


def run_migrations_offline() -> None:
    """Emit SQL for the configured URL without connecting."""
    context.configure(
        url=database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_options(),
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply migrations over a live connection."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, **_configure_options())

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
