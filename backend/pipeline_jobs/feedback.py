from sqlalchemy.orm import Session

from .errors import NotFoundError
from .models import Feedback, FeedbackStatus, User
from .schemas import FeedbackCreate, FeedbackUpdate


def create_feedback(db: Session, payload: FeedbackCreate, user: User | None) -> Feedback:
    fb = Feedback(
        user_id=user.id if user else None,
        rating=payload.rating,
        subject=payload.subject,
        category=payload.category.value,
        comment=payload.comment,
        status=FeedbackStatus.RECEIVED.value,
    )
    db.add(fb)
    db.commit()
    db.refresh(fb)
    return fb


def list_feedback(db: Session) -> list[Feedback]:
    return db.query(Feedback).order_by(Feedback.created_at.desc(), Feedback.id.desc()).all()


def update_feedback(db: Session, feedback_id: int, payload: FeedbackUpdate) -> Feedback:
    fb = db.get(Feedback, feedback_id)
    if fb is None:
        raise NotFoundError("Feedback not found")

    fb.status = payload.status.value
    if payload.admin_response is not None:
        fb.admin_response = payload.admin_response

    db.commit()
    db.refresh(fb)
    return fb
