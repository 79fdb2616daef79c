import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from .. import models, schemas
from ..core.errors import NotFound, storage_errors

logger = logging.getLogger(__name__)


async def create_response(
    db: AsyncSession, response_in: schemas.ResponseCreate
) -> models.Response:
    with storage_errors("store response"):
        form_exists = await db.scalar(
            select(models.Form.id).where(models.Form.id == response_in.form_id)
        )
    if form_exists is None:
        raise NotFound("Form not found")

    db_response = models.Response(
        form_id=response_in.form_id,
        data=response_in.data,
        is_complete=response_in.is_complete,
    )
    with storage_errors("store response"):
        db.add(db_response)
        await db.commit()
        await db.refresh(db_response)
    logger.info(
        f"Antwort {db_response.id} für Formular {response_in.form_id} gespeichert "
        f"(vollständig={db_response.is_complete})."
    )
    return db_response


async def get_responses_by_form(db: AsyncSession, form_id: int) -> List[models.Response]:
    with storage_errors("fetch responses"):
        result = await db.execute(
            select(models.Response)
            .where(models.Response.form_id == form_id)
            .order_by(models.Response.id)
        )
        return list(result.scalars().all())


async def get_response(db: AsyncSession, response_id: int) -> Optional[models.Response]:
    with storage_errors("fetch response"):
        return await db.get(models.Response, response_id)


async def delete_response(db: AsyncSession, response_id: int) -> bool:
    with storage_errors("delete response"):
        result = await db.execute(
            delete(models.Response).where(models.Response.id == response_id)
        )
        await db.commit()
    return result.rowcount > 0
