from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import get_current_user, require_admin
from ..db import get_db
from ..invalidation import invalidates
from ..models import ReportedJob, ReportStatus, User
from ..reports import delete_report, list_reports, review_report, submit_report
from ..schemas import ReportCreate, ReportDetailOut, ReportOut, ReportUpdate

router = APIRouter()


def report_with_details(r: ReportedJob) -> ReportDetailOut:
    # `reporter` on the row is the User relationship, not the username
    return ReportDetailOut(
        **ReportOut.model_validate(r).model_dump(),
        job_title=r.job.title if r.job else None,
        company=r.job.company if r.job else None,
        reporter=r.reporter.username if r.reporter else None,
    )


@router.post("", response_model=ReportOut, status_code=201, dependencies=[invalidates("report_submit")])
def create_report(
    payload: ReportCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return submit_report(db, user, payload.job_id, payload.reason, payload.comments)


@router.get("", response_model=list[ReportDetailOut])
def read_reports(
    status: ReportStatus | None = Query(None),
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    return [report_with_details(r) for r in list_reports(db, status)]


@router.patch("/{report_id}", response_model=ReportOut, dependencies=[invalidates("report_review")])
def update_report(
    report_id: int,
    payload: ReportUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return review_report(db, report_id, admin, payload.status, payload.admin_notes)


@router.delete("/{report_id}", dependencies=[invalidates("report_review")])
def remove_report(
    report_id: int,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    delete_report(db, report_id)
    return {"message": "Report deleted successfully"}
