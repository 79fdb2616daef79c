import logging
import secrets
from typing import Awaitable, Callable, List, Optional, Union

import pydantic
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .. import models, schemas
from ..core.config import PUBLIC_ID_LENGTH, PUBLIC_ID_MAX_ATTEMPTS
from ..core.errors import NotFound, StorageUnavailable, ValidationError, storage_errors
from ..database import AsyncSessionFactory

logger = logging.getLogger(__name__)


def _dump_list(items) -> list:
    return [item.model_dump(mode="json", by_alias=True, exclude_none=True) for item in items]


def _dump_settings(settings: schemas.FormSettings) -> dict:
    return settings.model_dump(mode="json", by_alias=True, exclude_none=True)


def _is_public_id_collision(error: IntegrityError) -> bool:
    # SQLite: "UNIQUE constraint failed: forms.public_id",
    # PostgreSQL: Constraint-Name "ix_forms_public_id"
    return "public_id" in str(error.orig)


def new_public_id(length: int = PUBLIC_ID_LENGTH) -> str:
    return secrets.token_urlsafe(length)[:length]


async def generate_public_id(db: AsyncSession) -> str:
    """Erzeugt eine noch nie vergebene öffentliche ID.

    Die Unique-Constraint auf ``forms.public_id`` bleibt die letzte Instanz;
    hier wird bei einer Kollision einfach neu gewürfelt.
    """
    for attempt in range(1, PUBLIC_ID_MAX_ATTEMPTS + 1):
        candidate = new_public_id()
        with storage_errors("check public id"):
            taken = await db.scalar(
                select(models.Form.id).where(models.Form.public_id == candidate)
            )
        if taken is None:
            return candidate
        logger.warning(f"Public-ID-Kollision bei Versuch {attempt}: {candidate}")
    raise StorageUnavailable("Could not allocate a unique public id")


async def create_form(
    db: AsyncSession, form_in: Union[schemas.FormBase, schemas.FormCreate]
) -> models.Form:
    """Legt das Formular an. Schnappt ein paralleler Schreiber dieselbe
    öffentliche ID weg, wird mit einer neuen ID erneut eingefügt.
    """
    for attempt in range(1, PUBLIC_ID_MAX_ATTEMPTS + 1):
        public_id = await generate_public_id(db)
        db_form = models.Form(
            public_id=public_id,
            title=form_in.title,
            description=form_in.description,
            fields=_dump_list(form_in.fields),
            steps=_dump_list(form_in.steps),
            settings=_dump_settings(form_in.settings),
            is_published=form_in.is_published,
        )
        with storage_errors("create form"):
            db.add(db_form)
            try:
                await db.commit()
            except IntegrityError as e:
                if not _is_public_id_collision(e):
                    raise
                await db.rollback()
                logger.warning(
                    f"Public-ID '{public_id}' beim Einfügen schon vergeben "
                    f"(Versuch {attempt}), neuer Versuch."
                )
                continue
            await db.refresh(db_form)
        logger.info(f"Formular erstellt mit ID {db_form.id} (public_id={public_id})")
        return db_form
    raise StorageUnavailable("Could not allocate a unique public id")


async def get_form(db: AsyncSession, form_id: int) -> Optional[models.Form]:
    with storage_errors("fetch form"):
        return await db.get(models.Form, form_id)


async def get_form_by_public_id(
    db: AsyncSession, public_id: str
) -> Optional[models.Form]:
    with storage_errors("fetch form"):
        result = await db.execute(
            select(models.Form).where(models.Form.public_id == public_id)
        )
        return result.scalar_one_or_none()


async def get_all_forms(db: AsyncSession) -> List[models.Form]:
    with storage_errors("fetch forms"):
        result = await db.execute(select(models.Form).order_by(models.Form.id))
        return list(result.scalars().all())


async def update_form(
    db: AsyncSession, form_id: int, form_in: schemas.FormUpdate
) -> Optional[models.Form]:
    """Übernimmt die gesetzten Felder und prüft die zusammengeführte Struktur."""
    db_form = await get_form(db, form_id)
    if db_form is None:
        return None

    changes = form_in.model_dump(exclude_unset=True)
    current = schemas.FormRead.model_validate(db_form).content()
    try:
        merged = schemas.FormBase.model_validate({**current.model_dump(), **changes})
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid form data: {e.errors()[0]['msg']}") from e
    problems = schemas.check_structure(merged.steps, merged.fields)
    if problems:
        raise ValidationError("Invalid form data: " + "; ".join(problems))

    db_form.title = merged.title
    db_form.description = merged.description
    db_form.fields = _dump_list(merged.fields)
    db_form.steps = _dump_list(merged.steps)
    db_form.settings = _dump_settings(merged.settings)
    db_form.is_published = merged.is_published
    db_form.updated_at = models.utcnow()
    with storage_errors("update form"):
        await db.commit()
        await db.refresh(db_form)
    logger.info(f"Formular {form_id} aktualisiert ({', '.join(changes) or 'keine Felder'})")
    return db_form


async def delete_form(db: AsyncSession, form_id: int) -> bool:
    """Löscht das Formular samt aller Antworten. False, wenn es nichts gab."""
    with storage_errors("delete form"):
        # Antworten explizit zuerst, SQLite erzwingt ON DELETE CASCADE nicht immer
        await db.execute(
            delete(models.Response).where(models.Response.form_id == form_id)
        )
        result = await db.execute(delete(models.Form).where(models.Form.id == form_id))
        await db.commit()
    deleted = result.rowcount > 0
    if deleted:
        logger.info(f"Formular {form_id} und zugehörige Antworten gelöscht.")
    return deleted


SaveForm = Callable[[schemas.FormDocument], Awaitable[schemas.FormRead]]


async def save_form(db: AsyncSession, document: schemas.FormDocument) -> schemas.FormRead:
    """Speichert ein Builder-Formular: neu anlegen oder bestehendes aktualisieren."""
    content = document.content()
    problems = schemas.check_structure(content.steps, content.fields)
    if problems:
        raise ValidationError("Invalid form data: " + "; ".join(problems))

    if document.id is None:
        db_form = await create_form(db, content)
    else:
        db_form = await update_form(
            db, document.id, schemas.FormUpdate.model_validate(content.model_dump())
        )
        if db_form is None:
            raise NotFound("Form not found")
    return schemas.FormRead.model_validate(db_form)


def form_saver(
    session_factory: async_sessionmaker = AsyncSessionFactory,
) -> SaveForm:
    """Speicherfunktion für Builder-Sitzungen, eine DB-Session pro Aufruf."""

    async def _save(document: schemas.FormDocument) -> schemas.FormRead:
        async with session_factory() as session:
            return await save_form(session, document)

    return _save
