from fastapi import APIRouter, Depends, Query
from pydantic.alias_generators import to_camel
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..auth import require_admin
from ..db import get_db
from ..errors import NotFoundError, ValidationError
from ..invalidation import invalidates
from ..models import Job, User
from ..schemas import JobCreate, JobOut, JobUpdate

router = APIRouter()

NULLABLE_JOB_FIELDS = ("benefits",)


def job_to_out(job: Job) -> JobOut:
    return JobOut.model_validate(job)


def apply_common_filters(
    query,
    q: str | None,
    type: str | None,
    location: str | None,
    company: str | None,
):
    if q:
        ql = f"%{q.lower()}%"
        query = query.filter(
            or_(
                Job.title.ilike(ql),
                Job.company.ilike(ql),
                Job.location.ilike(ql),
                Job.description.ilike(ql),
                Job.requirements.ilike(ql),
            )
        )

    if type:
        query = query.filter(Job.type.ilike(f"%{type}%"))

    if location:
        query = query.filter(Job.location.ilike(f"%{location}%"))

    if company:
        query = query.filter(Job.company.ilike(f"%{company}%"))

    return query


@router.get("", response_model=list[JobOut])
def list_jobs(
    q: str | None = Query(None),
    type: str | None = Query(None, description="Job type contains"),
    location: str | None = Query(None, description="Location contains"),
    company: str | None = Query(None, description="Company name contains"),
    include_archived: bool = Query(False, description="Also return inactive jobs"),
    db: Session = Depends(get_db),
):
    query_db = db.query(Job).filter(Job.published.is_(True))
    if not include_archived:
        query_db = query_db.filter(Job.is_active.is_(True))

    query_db = apply_common_filters(query_db, q=q, type=type, location=location, company=company)

    jobs = query_db.order_by(Job.created_at.desc(), Job.id.desc()).all()
    return [job_to_out(j) for j in jobs]


@router.get("/{job_id}", response_model=JobOut)
def get_job(job_id: int, db: Session = Depends(get_db)):
    job = db.get(Job, job_id)
    if not job or not job.published:
        raise NotFoundError("Job not found")
    return job_to_out(job)


@router.post("", response_model=JobOut, status_code=201, dependencies=[invalidates("job_write")])
def create_job(
    payload: JobCreate,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    job = Job(**payload.model_dump())
    db.add(job)
    db.commit()
    db.refresh(job)
    return job_to_out(job)


@router.patch("/{job_id}", response_model=JobOut, dependencies=[invalidates("job_write")])
def update_job(
    job_id: int,
    payload: JobUpdate,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    job = db.get(Job, job_id)
    if not job:
        raise NotFoundError("Job not found")

    changes = payload.model_dump(exclude_unset=True)
    for field, value in changes.items():
        if value is None and field not in NULLABLE_JOB_FIELDS:
            raise ValidationError.for_field(to_camel(field), "May not be null")
    for field, value in changes.items():
        setattr(job, field, value)

    db.commit()
    db.refresh(job)
    return job_to_out(job)
