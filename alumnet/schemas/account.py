from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from alumnet.schemas.enums import Role


# ---------- register ----------
class RegisterRequest(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    role: Role

    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    degree: str = ""
    department: str = ""

    # student only
    roll_number: Optional[str] = None

    # alumni only
    graduation_year: Optional[int] = Field(None, ge=1900, le=2100)
    job_title: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None


# ---------- login ----------
class LoginRequest(BaseModel):
    email: str
    password: str


class TokenOut(BaseModel):
    user_id: str
    access_token: str
    refresh_token: str
    expires_at: Optional[int] = None


class RegisterOut(BaseModel):
    user_id: str
    # None while the email address awaits confirmation
    session: Optional[TokenOut] = None


class PasswordResetRequest(BaseModel):
    email: str
