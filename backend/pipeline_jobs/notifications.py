import logging

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from .errors import NotFoundError
from .models import Notification

logger = logging.getLogger(__name__)


def notify(
    db: Session,
    user_id: int,
    type: str,
    title: str,
    message: str,
    payload: dict | None = None,
) -> Notification:
    """Queue a notification row on the caller's transaction (no commit)."""
    n = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        payload=payload or {},
        read=False,
    )
    db.add(n)
    return n


def list_notifications(db: Session, user_id: int) -> list[Notification]:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .all()
    )


def unread_count(db: Session, user_id: int) -> int:
    return (
        db.query(func.count(Notification.id))
        .filter(Notification.user_id == user_id, Notification.read.is_(False))
        .scalar()
    ) or 0


def _get_owned(db: Session, user_id: int, notification_id: int) -> Notification:
    n = db.get(Notification, notification_id)
    if n is None or n.user_id != user_id:
        raise NotFoundError("Notification not found")
    return n


def mark_read(db: Session, user_id: int, notification_id: int) -> Notification:
    n = _get_owned(db, user_id, notification_id)
    if not n.read:
        n.read = True
        db.commit()
    return n


def mark_all_read(db: Session, user_id: int) -> int:
    result = db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.read.is_(False))
        .values(read=True)
    )
    db.commit()
    logger.debug("Marked %d notifications read for user %s", result.rowcount, user_id)
    return result.rowcount


def delete_notification(db: Session, user_id: int, notification_id: int) -> None:
    n = _get_owned(db, user_id, notification_id)
    db.delete(n)
    db.commit()
