"""School registry router"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_session
from app.schemas.school import SchoolCreate, SchoolCreateResponse, SchoolResponse
from app.services.school_service import SchoolService


router = APIRouter(tags=["schools"])


def get_school_service(
    session: AsyncSession = Depends(get_session),
) -> SchoolService:
    return SchoolService(session=session)


@router.post(
    "/schools",
    response_model=SchoolCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a school",
)
async def create_school(
    payload: SchoolCreate,
    service: SchoolService = Depends(get_school_service),
) -> SchoolCreateResponse:
    return await service.create_school(payload)


@router.get(
    "/schools",
    response_model=list[SchoolResponse],
    summary="List schools ordered by name",
)
async def list_schools(
    service: SchoolService = Depends(get_school_service),
) -> list[SchoolResponse]:
    return await service.list_schools()
