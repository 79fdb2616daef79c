from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ... import schemas
from ...core.errors import NotFound
from ...crud import crud_response
from ...database import get_db_session

router = APIRouter(prefix="/api/responses", tags=["responses"])


@router.get("/{response_id}", response_model=schemas.ResponseRead)
async def get_response(response_id: int, db: AsyncSession = Depends(get_db_session)):
    db_response = await crud_response.get_response(db, response_id)
    if db_response is None:
        raise NotFound("Response not found")
    return schemas.ResponseRead.model_validate(db_response)


@router.delete("/{response_id}", response_model=schemas.SuccessResponse)
async def delete_response(
    response_id: int, db: AsyncSession = Depends(get_db_session)
):
    if not await crud_response.delete_response(db, response_id):
        raise NotFound("Response not found")
    return schemas.SuccessResponse()
