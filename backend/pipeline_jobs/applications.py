"""Applying, withdrawing and admin status changes."""

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from .lifecycle import can_transition, status_key
from .models import Application, ApplicationStatus, Job, User, utcnow
from .notifications import notify
from .profiles import get_profile_for_user
from .quota import reserve_daily_credit
from .schemas import ApplicationCreate, ApplicationStatusUpdate

logger = logging.getLogger(__name__)


def apply_to_job(
    db: Session,
    user: User,
    payload: ApplicationCreate,
    now: datetime | None = None,
) -> Application:
    """Create the application and charge one daily credit, atomically."""
    now = now or utcnow()

    if payload.status != ApplicationStatus.APPLIED:
        raise ValidationError.for_field("status", "New applications must have status 'applied'")

    job = db.get(Job, payload.job_id)
    if not job or not job.published:
        raise NotFoundError("Job not found")
    if not job.is_active:
        raise ValidationError.for_field("jobId", "This job is no longer accepting applications")

    exists = db.query(Application).filter(
        Application.job_id == payload.job_id,
        Application.user_id == user.id,
    ).first()
    if exists:
        raise ConflictError("You have already applied to this job")

    profile = get_profile_for_user(db, user.id)

    try:
        reserve_daily_credit(db, user, now)

        a = Application(
            job_id=job.id,
            user_id=user.id,
            profile_id=profile.id if profile else None,
            status=ApplicationStatus.APPLIED.value,
            applied_at=now,
            cover_letter=payload.cover_letter,
            application_data=payload.application_data,
            last_status_update=now,
        )
        db.add(a)
        notify(
            db,
            user.id,
            "application_submitted",
            "Application submitted",
            f"Your application for {job.title} at {job.company} was submitted.",
            {"jobId": job.id},
        )
        db.flush()
    except IntegrityError:
        # lost a race against a concurrent apply to the same job
        db.rollback()
        raise ConflictError("You have already applied to this job")

    db.commit()
    db.refresh(a)
    logger.info("User %s applied to job %s", user.id, job.id)
    return a


def list_user_applications(db: Session, user_id: int) -> list[Application]:
    return (
        db.query(Application)
        .filter(Application.user_id == user_id)
        .order_by(Application.applied_at.desc(), Application.id.desc())
        .all()
    )


def withdraw_application(db: Session, user: User, app_id: int) -> Application:
    a = db.get(Application, app_id)
    if a is None:
        raise NotFoundError("Application not found")
    if a.user_id != user.id:
        raise ForbiddenError("Forbidden")

    key = status_key(a.status)
    if key == ApplicationStatus.WITHDRAWN.value:
        return a
    if key in (ApplicationStatus.ACCEPTED.value, ApplicationStatus.REJECTED.value):
        raise ConflictError(f"Cannot withdraw an application that was {key}")

    # marked, never deleted; the credit it used stays spent
    a.status = ApplicationStatus.WITHDRAWN.value
    a.last_status_update = utcnow()
    job = db.get(Job, a.job_id)
    notify(
        db,
        user.id,
        "application_withdrawn",
        "Application withdrawn",
        f"You withdrew your application for {job.title} at {job.company}."
        if job
        else "You withdrew your application.",
        {"applicationId": a.id, "status": a.status, "jobId": a.job_id},
    )
    db.commit()
    db.refresh(a)
    return a


def update_application_status(
    db: Session,
    app_id: int,
    payload: ApplicationStatusUpdate,
) -> Application:
    a = db.get(Application, app_id)
    if a is None:
        raise NotFoundError("Application not found")

    if payload.notes is not None:
        a.notes = payload.notes

    target = payload.status
    if target is not None and status_key(a.status) != target.value:
        if not can_transition(a.status, target):
            raise ValidationError.for_field(
                "status", f"Cannot move an application from '{a.status}' to '{target.value}'"
            )
        a.status = target.value
        a.last_status_update = utcnow()
        notify(
            db,
            a.user_id,
            "status_change",
            "Application Status Updated",
            f"Your application status has been updated to {target.value.capitalize()}.",
            {"applicationId": a.id, "status": target.value, "jobId": a.job_id},
        )

    db.commit()
    db.refresh(a)
    return a


def list_all_applications(db: Session, status: str | None = None) -> list[Application]:
    q = db.query(Application)
    if status:
        q = q.filter(Application.status == status.strip().lower())
    return q.order_by(Application.applied_at.desc(), Application.id.desc()).all()
