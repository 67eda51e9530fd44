from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_optional_user, require_admin
from ..db import get_db
from ..feedback import create_feedback, list_feedback, update_feedback
from ..invalidation import invalidates
from ..models import User
from ..schemas import FeedbackCreate, FeedbackOut, FeedbackUpdate

router = APIRouter()


@router.post("", response_model=FeedbackOut, status_code=201, dependencies=[invalidates("feedback_write")])
def submit_feedback(
    payload: FeedbackCreate,
    db: Session = Depends(get_db),
    user: User | None = Depends(get_optional_user),
):
    return create_feedback(db, payload, user)


@router.get("", response_model=list[FeedbackOut])
def read_feedback(
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    return list_feedback(db)


@router.patch("/{feedback_id}", response_model=FeedbackOut, dependencies=[invalidates("feedback_write")])
def respond_to_feedback(
    feedback_id: int,
    payload: FeedbackUpdate,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
):
    return update_feedback(db, feedback_id, payload)
