"""School registry schemas"""

from datetime import datetime

from pydantic import Field

from app.schemas.base import BaseSchema


class SchoolBase(BaseSchema):
    name: str = Field(min_length=1, max_length=255)
    address: str = Field(min_length=1)
    city: str = Field(min_length=1, max_length=100)
    state: str = Field(min_length=1, max_length=100)
    contact: str = Field(min_length=1, max_length=32)
    email_id: str = Field(min_length=1, max_length=255)
    image: str | None = Field(default=None, description="Public image URL")


class SchoolCreate(SchoolBase):
    pass


class SchoolResponse(SchoolBase):
    id: int
    created_at: datetime | None = None


class SchoolCreateResponse(BaseSchema):
    message: str
    school: SchoolResponse
