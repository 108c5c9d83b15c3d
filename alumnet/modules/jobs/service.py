from typing import Optional

from loguru import logger
from sqlalchemy.orm import Session

from alumnet.core.db import commit_or_raise
from alumnet.core.errors import NotFound, Unauthorized
from alumnet.models.job import Job
from alumnet.models.profile import Profile
from alumnet.schemas.job import JobCreate, JobOut, PosterName


def _with_poster(rows) -> list[JobOut]:
    out = []
    for job, poster in rows:
        item = JobOut.model_validate(job)
        if poster is not None:
            item.poster = PosterName.model_validate(poster)
        out.append(item)
    return out


def list_active_jobs(db: Session, limit: Optional[int] = None) -> list[JobOut]:
    q = (
        db.query(Job, Profile)
        .outerjoin(Profile, Profile.id == Job.posted_by)
        .filter(Job.is_active.is_(True))
        .order_by(Job.created_at.desc(), Job.id.desc())
    )
    if limit is not None:
        q = q.limit(limit)
    return _with_poster(q.all())


def list_jobs_by(db: Session, user_id: str) -> list[JobOut]:
    rows = (
        db.query(Job, Profile)
        .outerjoin(Profile, Profile.id == Job.posted_by)
        .filter(Job.posted_by == user_id, Job.is_active.is_(True))
        .order_by(Job.created_at.desc(), Job.id.desc())
        .all()
    )
    return _with_poster(rows)


def create_job(db: Session, user_id: str, payload: JobCreate) -> Job:
    if db.get(Profile, user_id) is None:
        raise NotFound("Create your profile before posting jobs")

    job = Job(posted_by=user_id, is_active=True, **payload.model_dump())
    db.add(job)
    commit_or_raise(db, "creating job")
    db.refresh(job)

    logger.info(f"[jobs] created | job={job.id} user={user_id}")
    return job


def deactivate_job(db: Session, user_id: str, job_id: int) -> Job:
    job = db.get(Job, job_id)
    if job is None or not job.is_active:
        raise NotFound("Job not found")

    if job.posted_by != user_id:
        raise Unauthorized("Only the poster can remove this job")

    job.is_active = False
    commit_or_raise(db, "removing job")
    db.refresh(job)

    logger.info(f"[jobs] deactivated | job={job_id} user={user_id}")
    return job
