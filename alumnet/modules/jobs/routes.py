from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from alumnet.api.deps import get_current_user_id
from alumnet.core.db import get_db
from alumnet.core.errors import AlumnetError, to_http
from alumnet.schemas.job import JobCreate, JobOut
from .service import create_job, deactivate_job, list_active_jobs, list_jobs_by

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("", response_model=List[JobOut])
def jobs_board(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return list_active_jobs(db)


@router.get("/by/{poster_id}", response_model=List[JobOut])
def jobs_by_poster(
    poster_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return list_jobs_by(db, poster_id)


@router.post("", response_model=JobOut, status_code=201)
def post_job(
    payload: JobCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        return create_job(db, user_id, payload)
    except AlumnetError as e:
        raise to_http(e)


@router.delete("/{job_id}", response_model=JobOut)
def remove_job(
    job_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        return deactivate_job(db, user_id, job_id)
    except AlumnetError as e:
        raise to_http(e)
