# alembic/env.py
import logging
import os
import sys
from logging.config import fileConfig

from sqlalchemy import create_engine

from alembic import context

# Projekt-Root in den Python-Pfad, damit 'formbuilder' gefunden wird
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

# Lädt auch die .env-Datei (python-dotenv in formbuilder.core.config)
from formbuilder.core.config import DATABASE_URL  # noqa: E402
from formbuilder.database import Base  # noqa: E402
from formbuilder import models  # noqa: E402,F401  Tabellen registrieren

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")

target_metadata = Base.metadata


def sync_url(url: str) -> str:
    """Alembic migriert synchron: Async-Treiber aus der URL entfernen."""
    for driver in ("+asyncpg", "+aiosqlite"):
        url = url.replace(driver, "")
    return url


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode (SQL-Skript statt Verbindung)."""
    offline_url = sync_url(DATABASE_URL)
    logger.info(f"Offline-Migration mit URL: {offline_url}")
    context.configure(
        url=offline_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    online_url = sync_url(DATABASE_URL)
    logger.info(f"Online-Migration mit URL: {online_url}")
    connectable = create_engine(online_url)

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
