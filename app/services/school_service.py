"""School registry service"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.school import School
from app.repositories.school_repository import SchoolRepository
from app.schemas.school import SchoolCreate, SchoolCreateResponse, SchoolResponse
from app.services.base import BaseService
from app.services.validation import validate_contact, validate_email, validate_image_url


class SchoolService(BaseService):
    """Register and list schools"""

    def __init__(self, session: AsyncSession):
        super().__init__()
        self.session = session
        self.school_repo = SchoolRepository(session)

    async def create_school(self, payload: SchoolCreate) -> SchoolCreateResponse:
        self._log_start("create_school", name=payload.name, city=payload.city)

        validate_email(payload.email_id)
        validate_contact(payload.contact)
        image = validate_image_url(payload.image)

        school = await self.school_repo.create(
            School(
                name=payload.name,
                address=payload.address,
                city=payload.city,
                state=payload.state,
                contact=payload.contact,
                email_id=payload.email_id,
                image=image,
            )
        )

        self._log_success("create_school", school_id=school.id)
        return SchoolCreateResponse(
            message="School added successfully!",
            school=SchoolResponse.model_validate(school),
        )

    async def list_schools(self) -> list[SchoolResponse]:
        schools = await self.school_repo.list_by_name()
        self.logger.debug("schools_listed", count=len(schools))
        return [SchoolResponse.model_validate(school) for school in schools]
