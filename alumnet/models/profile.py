from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    Integer,
    JSON,
    String,
    Text,
    func,
)
from alumnet.core.db import Base
from alumnet.schemas.enums import Role, Visibility


def _visibility_column():
    return Column(
        Enum(Visibility, name="visibility_enum", native_enum=False),
        nullable=False,
        default=Visibility.alumni,
    )


class Profile(Base):
    __tablename__ = "profiles"

    # same id as the Supabase auth user
    id = Column(String, primary_key=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    # personal
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, nullable=False, index=True)
    phone = Column(String, nullable=True)
    photo_url = Column(String, nullable=True)
    date_of_birth = Column(Date, nullable=True)
    gender = Column(String, nullable=True)
    role = Column(
        Enum(Role, name="role_enum", native_enum=False),
        nullable=False,
        default=Role.alumni,
    )

    # academic
    graduation_year = Column(Integer, nullable=True, index=True)
    degree = Column(String, nullable=False, default="")
    department = Column(String, nullable=False, default="")
    roll_number = Column(String, nullable=True)
    cgpa = Column(Float, nullable=True)

    # professional
    job_title = Column(String, nullable=True)
    company = Column(String, nullable=True)
    industry = Column(String, nullable=True)
    location = Column(String, nullable=True)
    experience_years = Column(Integer, nullable=True)
    linkedin_url = Column(String, nullable=True)

    # extra, lists stored as JSON: ["python", "ml"]
    bio = Column(Text, nullable=True)
    achievements = Column(JSON, nullable=True)
    skills = Column(JSON, nullable=True)
    hobbies = Column(JSON, nullable=True)

    # privacy
    phone_visibility = _visibility_column()
    email_visibility = _visibility_column()
    location_visibility = _visibility_column()
    hidden_from_search = Column(Boolean, nullable=False, default=False)
