from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import messages as threads
from ..auth import get_current_user
from ..db import get_db
from ..invalidation import invalidates
from ..models import ApplicationMessage, User
from ..schemas import MessageCreate, MessageOut, ThreadMessageCreate

router = APIRouter()


def message_to_out(m: ApplicationMessage) -> MessageOut:
    return MessageOut(
        id=m.id,
        application_id=m.application_id,
        sender_id=m.sender_id,
        sender=m.sender.username if m.sender else "",
        is_from_admin=m.is_from_admin,
        content=m.content,
        read=m.read,
        created_at=m.created_at,
    )


# -----------------------------
# Thread of one application
# -----------------------------
@router.get("/applications/{application_id}/messages", response_model=list[MessageOut])
def list_thread(
    application_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return [message_to_out(m) for m in threads.list_messages(db, user, application_id)]


@router.get("/applications/{application_id}/messages/unread", response_model=int)
def unread_in_thread(
    application_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return threads.unread_messages(db, user, application_id)


@router.post(
    "/applications/{application_id}/messages",
    response_model=MessageOut,
    status_code=201,
    dependencies=[invalidates("message_send")],
)
def write_to_thread(
    application_id: int,
    payload: MessageCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return message_to_out(threads.send_message(db, user, application_id, payload.content))


# -----------------------------
# Admin dialog endpoints
# -----------------------------
@router.get("/messages/{application_id}", response_model=list[MessageOut])
def list_thread_by_application(
    application_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return list_thread(application_id, db, user)


@router.post("/messages", response_model=MessageOut, status_code=201, dependencies=[invalidates("message_send")])
def write_message(
    payload: ThreadMessageCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return message_to_out(threads.send_message(db, user, payload.application_id, payload.content))


@router.post("/messages/{message_id}/read", response_model=MessageOut, dependencies=[invalidates("message_read")])
def read_message(
    message_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return message_to_out(threads.mark_message_read(db, user, message_id))
