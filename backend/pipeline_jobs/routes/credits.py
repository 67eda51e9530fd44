from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..applications import list_user_applications
from ..auth import get_current_user
from ..db import get_db
from ..models import User, utcnow
from ..quota import compute_remaining_credits
from ..schemas import CreditsOut

router = APIRouter()


@router.get("", response_model=CreditsOut)
def get_credits(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Daily credit display. Clients poll this; enforcement happens on apply."""
    window = compute_remaining_credits(user, list_user_applications(db, user.id), utcnow())
    return CreditsOut(
        remaining=window.remaining,
        used=window.used,
        limit=window.limit,
        day=window.day,
        reset_at=window.reset_at,
        reset_in_seconds=int(window.reset_in.total_seconds()),
        banked_credits=user.banked_credits,
    )
