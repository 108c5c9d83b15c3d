from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from alumnet.api.deps import get_current_user_id, get_optional_user_id
from alumnet.core.db import get_db
from alumnet.core.errors import AlumnetError, to_http
from alumnet.models.profile import Profile
from alumnet.modules.jobs.service import list_active_jobs
from alumnet.schemas.enums import DirectorySort
from alumnet.schemas.profile import ProfileOut, ProfileUpdate
from . import service

router = APIRouter(tags=["profiles"])


@router.get("/profiles/{profile_id}", response_model=ProfileOut)
def read_profile(
    profile_id: str,
    db: Session = Depends(get_db),
    viewer_id: Optional[str] = Depends(get_optional_user_id),
):
    try:
        profile = service.get_profile(db, profile_id)
    except AlumnetError as e:
        raise to_http(e)
    return service.visible_profile(profile, viewer_id)


@router.patch("/profiles/me", response_model=ProfileOut)
def edit_my_profile(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        profile = service.update_profile(db, user_id, payload)
    except AlumnetError as e:
        raise to_http(e)
    return service.visible_profile(profile, user_id)


@router.get("/directory", response_model=List[ProfileOut])
def directory(
    search: Optional[str] = None,
    graduation_year: Optional[int] = None,
    department: Optional[str] = None,
    company: Optional[str] = None,
    location: Optional[str] = None,
    sort_by: DirectorySort = DirectorySort.name,
    db: Session = Depends(get_db),
    viewer_id: Optional[str] = Depends(get_optional_user_id),
):
    profiles = service.search_directory(
        db,
        search=search,
        graduation_year=graduation_year,
        department=department,
        company=company,
        location=location,
        sort_by=sort_by,
    )
    return [service.visible_profile(p, viewer_id) for p in profiles]


@router.get("/dashboard")
def dashboard(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    me = db.get(Profile, user_id)
    return {
        "profile": service.visible_profile(me, user_id) if me else None,
        "recent_alumni": [
            service.visible_profile(p, user_id) for p in service.recent_alumni(db)
        ],
        "recent_jobs": list_active_jobs(db, limit=5),
        "stats": service.dashboard_stats(db),
    }
