from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from alumnet.schemas.base import BaseSchema
from alumnet.schemas.enums import Role, Visibility


class ProfileOut(BaseSchema):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    first_name: str
    last_name: str
    # masked to None when the viewer may not see them
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None

    photo_url: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    role: Role

    graduation_year: Optional[int] = None
    degree: str = ""
    department: str = ""
    roll_number: Optional[str] = None
    cgpa: Optional[float] = None

    job_title: Optional[str] = None
    company: Optional[str] = None
    industry: Optional[str] = None
    experience_years: Optional[int] = None
    linkedin_url: Optional[str] = None

    bio: Optional[str] = None
    achievements: Optional[List[str]] = None
    skills: Optional[List[str]] = None
    hobbies: Optional[List[str]] = None

    phone_visibility: Visibility
    email_visibility: Visibility
    location_visibility: Visibility
    hidden_from_search: bool


class ProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    photo_url: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    role: Optional[Role] = None

    graduation_year: Optional[int] = Field(None, ge=1900, le=2100)
    degree: Optional[str] = None
    department: Optional[str] = None
    roll_number: Optional[str] = None
    cgpa: Optional[float] = Field(None, ge=0, le=10)

    job_title: Optional[str] = None
    company: Optional[str] = None
    industry: Optional[str] = None
    location: Optional[str] = None
    experience_years: Optional[int] = Field(None, ge=0)
    linkedin_url: Optional[str] = None

    bio: Optional[str] = None
    achievements: Optional[List[str]] = None
    skills: Optional[List[str]] = None
    hobbies: Optional[List[str]] = None

    phone_visibility: Optional[Visibility] = None
    email_visibility: Optional[Visibility] = None
    location_visibility: Optional[Visibility] = None
    hidden_from_search: Optional[bool] = None


class DashboardStats(BaseModel):
    total_alumni: int
    active_jobs: int
    recent_joins: int
