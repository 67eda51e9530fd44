from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import notifications as feed
from ..auth import get_current_user
from ..db import get_db
from ..invalidation import invalidates
from ..models import Notification, User
from ..schemas import NotificationOut

router = APIRouter()


def notification_to_out(n: Notification) -> NotificationOut:
    return NotificationOut(
        id=n.id,
        user_id=n.user_id,
        type=n.type,
        title=n.title,
        message=n.message,
        payload=n.payload or {},
        read=n.read,
        created_at=n.created_at,
    )


@router.get("", response_model=list[NotificationOut])
def list_notifications(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return [notification_to_out(n) for n in feed.list_notifications(db, user.id)]


@router.get("/unread-count", response_model=int)
def unread_count(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return feed.unread_count(db, user.id)


@router.post("/mark-all-read", dependencies=[invalidates("notification_read")])
def mark_all_read(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    updated = feed.mark_all_read(db, user.id)
    return {"success": True, "updated": updated}


@router.post("/{notification_id}/mark-read", response_model=NotificationOut, dependencies=[invalidates("notification_read")])
def mark_read(
    notification_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return notification_to_out(feed.mark_read(db, user.id, notification_id))


@router.delete("/{notification_id}", dependencies=[invalidates("notification_delete")])
def delete_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    feed.delete_notification(db, user.id, notification_id)
    return {"success": True}
