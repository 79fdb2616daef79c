# formbuilder/database.py
import logging
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from .core.config import DATABASE_URL, SQL_ECHO

logger = logging.getLogger(__name__)

# echo=True gibt alle SQL-Statements aus. Nur zum Debuggen einschalten.
engine = create_async_engine(DATABASE_URL, echo=SQL_ECHO)

# expire_on_commit=False, damit Objekte nach dem Commit ohne Lazy-Load lesbar bleiben
AsyncSessionFactory = async_sessionmaker(
    bind=engine, class_=AsyncSession, autoflush=False, expire_on_commit=False
)

Base = declarative_base()


async def get_db_session() -> AsyncIterator[AsyncSession]:
    async with AsyncSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()  # Rollback bei Fehlern
            raise


async def create_db_and_tables():
    """
    Tabellen werden über Alembic verwaltet. Für lokale SQLite-Setups ohne
    Migrationen legt diese Funktion fehlende Tabellen an.
    """
    if not DATABASE_URL.startswith("sqlite"):
        logger.info("Datenbankschema wird durch Alembic verwaltet.")
        return
    from . import models  # noqa: F401  Tabellen an Base.metadata registrieren

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("SQLite-Tabellen sichergestellt.")
