from typing import List

from fastapi import APIRouter

from ... import schemas
from ...builder.templates import get_template, list_templates

router = APIRouter(prefix="/api/templates", tags=["templates"])


@router.get("", response_model=List[schemas.TemplateSummary])
async def read_templates():
    return list_templates()


@router.get("/{key}", response_model=schemas.FormBase)
async def read_template(key: str):
    return get_template(key)
