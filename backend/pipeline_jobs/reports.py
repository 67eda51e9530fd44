import logging

from sqlalchemy.orm import Session, joinedload

from .errors import NotFoundError, ValidationError
from .models import Job, ReportedJob, ReportReason, ReportStatus, User, utcnow

logger = logging.getLogger(__name__)

COMMENT_MIN = 5
COMMENT_MAX = 500


def validate_report(reason: str | None, comments: str | None) -> tuple[ReportReason, str]:
    errors: dict[str, str] = {}

    parsed_reason = None
    if not reason:
        errors["reason"] = "Please select a reason for reporting this job"
    else:
        try:
            parsed_reason = ReportReason(reason)
        except ValueError:
            allowed = ", ".join(r.value for r in ReportReason)
            errors["reason"] = f"Reason must be one of: {allowed}"

    text = (comments or "").strip()
    if len(text) < COMMENT_MIN:
        errors["comments"] = f"Please provide at least {COMMENT_MIN} characters of detail"
    elif len(text) > COMMENT_MAX:
        errors["comments"] = f"Comments must be at most {COMMENT_MAX} characters"

    if errors:
        raise ValidationError("Invalid request data", errors=errors)
    return parsed_reason, text


def submit_report(
    db: Session,
    user: User,
    job_id: int,
    reason: str | None,
    comments: str | None,
) -> ReportedJob:
    parsed_reason, text = validate_report(reason, comments)

    if db.get(Job, job_id) is None:
        raise NotFoundError("Job not found")

    # repeated reports of the same job by the same user are kept
    report = ReportedJob(
        user_id=user.id,
        job_id=job_id,
        reason=parsed_reason.value,
        comments=text,
        status=ReportStatus.PENDING.value,
    )
    db.add(report)
    db.commit()
    db.refresh(report)
    logger.info("User %s reported job %s (%s)", user.id, job_id, parsed_reason.value)
    return report


def list_reports(db: Session, status: ReportStatus | None = None) -> list[ReportedJob]:
    q = db.query(ReportedJob).options(
        joinedload(ReportedJob.job), joinedload(ReportedJob.reporter)
    )
    if status is not None:
        q = q.filter(ReportedJob.status == status.value)
    return q.order_by(ReportedJob.created_at.desc(), ReportedJob.id.desc()).all()


def review_report(
    db: Session,
    report_id: int,
    admin: User,
    status: ReportStatus,
    admin_notes: str | None = None,
) -> ReportedJob:
    report = db.get(ReportedJob, report_id)
    if report is None:
        raise NotFoundError("Reported job not found")

    report.status = status.value
    if admin_notes is not None:
        report.admin_notes = admin_notes
    if status != ReportStatus.PENDING:
        report.reviewed_at = utcnow()
        report.reviewed_by = admin.id
    else:
        report.reviewed_at = None
        report.reviewed_by = None

    db.commit()
    db.refresh(report)
    return report


def delete_report(db: Session, report_id: int) -> None:
    report = db.get(ReportedJob, report_id)
    if report is None:
        raise NotFoundError("Reported job not found")
    db.delete(report)
    db.commit()
