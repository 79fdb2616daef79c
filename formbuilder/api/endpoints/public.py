import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ... import schemas
from ...core.errors import NotFound
from ...crud import crud_form, crud_response
from ...database import get_db_session
from ...lifecycle import validate_response_data

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/public", tags=["public"])


@router.post("/{public_id}/submit", response_model=schemas.SubmitResult)
async def submit_public_form(
    public_id: str,
    submission: schemas.PublicSubmission,
    db: AsyncSession = Depends(get_db_session),
):
    """Abgabe über den öffentlichen Link, immer als finale Antwort."""
    db_form = await crud_form.get_form_by_public_id(db, public_id)
    if db_form is None:
        raise NotFound("Form not found")

    final = schemas.ResponseSubmission(data=submission.data, is_complete=True)
    validate_response_data(schemas.FormRead.model_validate(db_form), final)
    db_response = await crud_response.create_response(
        db, schemas.ResponseCreate(form_id=db_form.id, data=final.data, is_complete=True)
    )
    logger.info(f"Öffentliche Abgabe für Formular '{public_id}' gespeichert.")
    return schemas.SubmitResult(response=schemas.ResponseRead.model_validate(db_response))
