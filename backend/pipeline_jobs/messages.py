"""Per-application message threads between an applicant and the admins.

Admins write as the company (``is_from_admin``); the applicant is told about
each admin message through a notification. A message counts as unread until
someone on the other side of the thread marks it read.
"""

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from .errors import ForbiddenError, NotFoundError
from .models import Application, ApplicationMessage, Job, User
from .notifications import notify

logger = logging.getLogger(__name__)


def _thread(db: Session, user: User, application_id: int) -> Application:
    a = db.get(Application, application_id)
    if a is None:
        raise NotFoundError("Application not found")
    if a.user_id != user.id and not user.is_admin:
        raise ForbiddenError("Forbidden")
    return a


def _writes_as_admin(user: User, a: Application) -> bool:
    return user.is_admin and user.id != a.user_id


def list_messages(db: Session, user: User, application_id: int) -> list[ApplicationMessage]:
    _thread(db, user, application_id)
    return (
        db.query(ApplicationMessage)
        .filter(ApplicationMessage.application_id == application_id)
        .order_by(ApplicationMessage.created_at, ApplicationMessage.id)
        .all()
    )


def unread_messages(db: Session, user: User, application_id: int) -> int:
    a = _thread(db, user, application_id)
    # unread means written by the other side
    from_admin = not _writes_as_admin(user, a)
    return (
        db.query(func.count(ApplicationMessage.id))
        .filter(
            ApplicationMessage.application_id == application_id,
            ApplicationMessage.is_from_admin.is_(from_admin),
            ApplicationMessage.read.is_(False),
        )
        .scalar()
    ) or 0


def send_message(db: Session, user: User, application_id: int, content: str) -> ApplicationMessage:
    a = _thread(db, user, application_id)
    as_admin = _writes_as_admin(user, a)

    msg = ApplicationMessage(
        application_id=a.id,
        sender_id=user.id,
        is_from_admin=as_admin,
        content=content,
        read=False,
    )
    db.add(msg)

    if as_admin:
        job = db.get(Job, a.job_id)
        where = f" about {job.title} at {job.company}" if job else ""
        notify(
            db,
            a.user_id,
            "new_message",
            "New message",
            f"You have a new message{where}.",
            {"applicationId": a.id, "jobId": a.job_id},
        )

    db.commit()
    db.refresh(msg)
    logger.info("User %s wrote on application %s (admin=%s)", user.id, a.id, as_admin)
    return msg


def mark_message_read(db: Session, user: User, message_id: int) -> ApplicationMessage:
    msg = db.get(ApplicationMessage, message_id)
    if msg is None:
        raise NotFoundError("Message not found")
    a = _thread(db, user, msg.application_id)

    # only the recipient's read counts; a sender re-reading their own message is a no-op
    if not msg.read and msg.is_from_admin != _writes_as_admin(user, a):
        msg.read = True
        db.commit()
    return msg
