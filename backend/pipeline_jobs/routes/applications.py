from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..applications import apply_to_job, list_user_applications, withdraw_application
from ..auth import get_current_user
from ..db import get_db
from ..invalidation import invalidates
from ..lifecycle import group_by_status
from ..models import Job, User
from ..schemas import ApplicationCreate, ApplicationOut

router = APIRouter()


@router.get("", response_model=list[ApplicationOut])
def list_applications(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return list_user_applications(db, user.id)


@router.post("", response_model=ApplicationOut, status_code=201, dependencies=[invalidates("apply")])
def create_application(
    payload: ApplicationCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return apply_to_job(db, user, payload)


@router.get("/grouped", response_model=dict[str, list[ApplicationOut]])
def grouped_applications(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    apps = list_user_applications(db, user.id)
    job_ids = {a.job_id for a in apps}
    jobs = db.query(Job).filter(Job.id.in_(job_ids)).all() if job_ids else []
    return group_by_status(apps, jobs)


@router.post("/{app_id}/withdraw", response_model=ApplicationOut, dependencies=[invalidates("withdraw")])
def withdraw(
    app_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return withdraw_application(db, user, app_id)
