from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from alumnet.schemas.base import BaseSchema
from alumnet.schemas.enums import JobType


class JobCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    company: str = Field(..., min_length=1)
    location: Optional[str] = None
    job_type: JobType = JobType.full_time
    application_url: Optional[str] = None


class PosterName(BaseSchema):
    first_name: str
    last_name: str


class JobOut(BaseSchema):
    id: int
    created_at: datetime
    updated_at: datetime
    posted_by: str
    title: str
    description: str
    company: str
    location: Optional[str] = None
    job_type: JobType
    application_url: Optional[str] = None
    is_active: bool
    poster: Optional[PosterName] = None
