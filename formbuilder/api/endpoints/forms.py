import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ... import schemas
from ...core.errors import NotFound
from ...crud import crud_form, crud_response
from ...database import get_db_session
from ...lifecycle import validate_response_data

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/forms", tags=["forms"])


@router.post("", response_model=schemas.FormRead)
async def create_form(
    form_in: schemas.FormCreate, db: AsyncSession = Depends(get_db_session)
):
    db_form = await crud_form.create_form(db, form_in)
    return schemas.FormRead.model_validate(db_form)


@router.get("", response_model=List[schemas.FormRead])
async def list_forms(db: AsyncSession = Depends(get_db_session)):
    forms = await crud_form.get_all_forms(db)
    return [schemas.FormRead.model_validate(f) for f in forms]


# Vor /{form_id} registriert, damit "public" nicht als ID geparst wird
@router.get("/public/{public_id}", response_model=schemas.FormRead)
async def get_form_by_public_id(
    public_id: str, db: AsyncSession = Depends(get_db_session)
):
    db_form = await crud_form.get_form_by_public_id(db, public_id)
    if db_form is None:
        logger.info(f"Formular mit public_id '{public_id}' nicht gefunden.")
        raise NotFound("Form not found")
    return schemas.FormRead.model_validate(db_form)


@router.get("/{form_id}", response_model=schemas.FormRead)
async def get_form(form_id: int, db: AsyncSession = Depends(get_db_session)):
    db_form = await crud_form.get_form(db, form_id)
    if db_form is None:
        raise NotFound("Form not found")
    return schemas.FormRead.model_validate(db_form)


@router.put("/{form_id}", response_model=schemas.FormRead)
async def update_form(
    form_id: int,
    form_in: schemas.FormUpdate,
    db: AsyncSession = Depends(get_db_session),
):
    db_form = await crud_form.update_form(db, form_id, form_in)
    if db_form is None:
        raise NotFound("Form not found")
    return schemas.FormRead.model_validate(db_form)


@router.delete("/{form_id}", response_model=schemas.SuccessResponse)
async def delete_form(form_id: int, db: AsyncSession = Depends(get_db_session)):
    if not await crud_form.delete_form(db, form_id):
        raise NotFound("Form not found")
    return schemas.SuccessResponse()


# --- Antworten eines Formulars ---


@router.post("/{form_id}/responses", response_model=schemas.ResponseRead)
async def create_response(
    form_id: int,
    submission: schemas.ResponseSubmission,
    db: AsyncSession = Depends(get_db_session),
):
    db_form = await crud_form.get_form(db, form_id)
    if db_form is None:
        raise NotFound("Form not found")
    validate_response_data(schemas.FormRead.model_validate(db_form), submission)
    db_response = await crud_response.create_response(
        db,
        schemas.ResponseCreate(
            form_id=form_id, data=submission.data, is_complete=submission.is_complete
        ),
    )
    return schemas.ResponseRead.model_validate(db_response)


@router.get("/{form_id}/responses", response_model=List[schemas.ResponseRead])
async def list_responses(form_id: int, db: AsyncSession = Depends(get_db_session)):
    responses = await crud_response.get_responses_by_form(db, form_id)
    return [schemas.ResponseRead.model_validate(r) for r in responses]
