from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..applications import list_all_applications, update_application_status
from ..auth import require_admin
from ..credits import adjust_banked_credits
from ..db import get_db
from ..invalidation import invalidates
from ..models import Job, User
from ..schemas import (
    ApplicationOut,
    ApplicationStatusUpdate,
    ApplicationWithJob,
    CreditAdjustment,
    JobOut,
    UserOut,
)

router = APIRouter()


@router.get("/users", response_model=list[UserOut])
def list_users(
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    return db.query(User).order_by(User.id).all()


@router.post("/users/{user_id}/credits", response_model=UserOut, dependencies=[invalidates("credit_adjust")])
def adjust_credits(
    user_id: int,
    payload: CreditAdjustment,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    return adjust_banked_credits(db, user_id, payload.amount)


@router.get("/applications", response_model=list[ApplicationWithJob])
def list_applications(
    status: str | None = Query(None),
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    apps = list_all_applications(db, status)

    job_ids = {a.job_id for a in apps}
    jobs = db.query(Job).filter(Job.id.in_(job_ids)).all() if job_ids else []
    job_by_id = {j.id: j for j in jobs}

    out = []
    for a in apps:
        j = job_by_id.get(a.job_id)
        row = ApplicationWithJob.model_validate(
            {**ApplicationOut.model_validate(a).model_dump(), "job": JobOut.model_validate(j) if j else None}
        )
        out.append(row)
    return out


@router.patch("/applications/{app_id}", response_model=ApplicationOut, dependencies=[invalidates("application_status")])
def update_application(
    app_id: int,
    payload: ApplicationStatusUpdate,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    return update_application_status(db, app_id, payload)
