from datetime import datetime, timedelta, timezone
from typing import Optional

from loguru import logger
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from alumnet.core.config import RECENT_JOINS_DAYS
from alumnet.core.db import commit_or_raise
from alumnet.core.errors import NotFound, ValidationFailed
from alumnet.models.job import Job
from alumnet.models.profile import Profile
from alumnet.schemas.enums import DirectorySort, Visibility
from alumnet.schemas.profile import DashboardStats, ProfileOut, ProfileUpdate

# field -> the visibility column guarding it
GUARDED_FIELDS = {
    "email": "email_visibility",
    "phone": "phone_visibility",
    "location": "location_visibility",
}


def can_see_field(visibility: Visibility, viewer_id: Optional[str], owner_id: str) -> bool:
    if viewer_id is not None and viewer_id == owner_id:
        return True
    if visibility == Visibility.public:
        return True
    if visibility == Visibility.alumni and viewer_id is not None:
        return True
    return False


def visible_profile(profile: Profile, viewer_id: Optional[str]) -> ProfileOut:
    out = ProfileOut.model_validate(profile)
    masked = {
        field: None
        for field, guard in GUARDED_FIELDS.items()
        if not can_see_field(getattr(profile, guard), viewer_id, profile.id)
    }
    return out.model_copy(update=masked) if masked else out


def get_profile(db: Session, profile_id: str) -> Profile:
    profile = db.get(Profile, profile_id)
    if profile is None:
        raise NotFound("Profile not found")
    return profile


def update_profile(db: Session, user_id: str, payload: ProfileUpdate) -> Profile:
    profile = get_profile(db, user_id)

    changes = payload.model_dump(exclude_unset=True)
    for key, value in changes.items():
        setattr(profile, key, value)

    try:
        commit_or_raise(db, "updating profile")
    except IntegrityError:
        raise ValidationFailed("Profile update violates a required field")
    db.refresh(profile)
    logger.info(f"[profiles] updated | user={user_id} fields={sorted(changes)}")
    return profile


def _icontains(column, value: str):
    return func.lower(column).contains(value.lower(), autoescape=True)


def search_directory(
    db: Session,
    search: Optional[str] = None,
    graduation_year: Optional[int] = None,
    department: Optional[str] = None,
    company: Optional[str] = None,
    location: Optional[str] = None,
    sort_by: DirectorySort = DirectorySort.name,
) -> list[Profile]:
    """
    Alumni directory. Profiles hidden from search never appear; every
    text filter is a case-insensitive substring match.
    """
    q = db.query(Profile).filter(Profile.hidden_from_search.is_(False))

    if search:
        q = q.filter(
            _icontains(Profile.first_name, search)
            | _icontains(Profile.last_name, search)
        )
    if graduation_year is not None:
        q = q.filter(Profile.graduation_year == graduation_year)
    if department:
        q = q.filter(_icontains(Profile.department, department))
    if company:
        q = q.filter(_icontains(Profile.company, company))
    if location:
        q = q.filter(_icontains(Profile.location, location))

    if sort_by == DirectorySort.graduation_year:
        q = q.order_by(Profile.graduation_year.desc().nulls_last(), Profile.id)
    elif sort_by == DirectorySort.created_at:
        q = q.order_by(Profile.created_at.desc(), Profile.id)
    else:
        q = q.order_by(Profile.first_name, Profile.last_name, Profile.id)

    return q.all()


def recent_alumni(db: Session, limit: int = 6) -> list[Profile]:
    return (
        db.query(Profile)
        .filter(Profile.hidden_from_search.is_(False))
        .order_by(Profile.created_at.desc(), Profile.id)
        .limit(limit)
        .all()
    )


def dashboard_stats(db: Session, now: Optional[datetime] = None) -> DashboardStats:
    now = now or datetime.now(timezone.utc).replace(tzinfo=None)
    since = now - timedelta(days=RECENT_JOINS_DAYS)

    total_alumni = (
        db.query(func.count(Profile.id))
        .filter(Profile.hidden_from_search.is_(False))
        .scalar()
    )
    active_jobs = (
        db.query(func.count(Job.id))
        .filter(Job.is_active.is_(True))
        .scalar()
    )
    recent_joins = (
        db.query(func.count(Profile.id))
        .filter(Profile.created_at >= since)
        .scalar()
    )

    return DashboardStats(
        total_alumni=total_alumni or 0,
        active_jobs=active_jobs or 0,
        recent_joins=recent_joins or 0,
    )
