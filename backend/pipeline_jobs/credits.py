import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from .errors import InsufficientCreditsError, NotFoundError, ValidationError
from .models import User

logger = logging.getLogger(__name__)


def adjust_banked_credits(db: Session, user_id: int, delta: int) -> User:
    """Add (or remove, for a negative delta) banked credits.

    The balance never goes below zero: the guard lives in the UPDATE itself,
    so concurrent adjustments serialise on the row and cannot lose updates.
    """
    if delta == 0:
        raise ValidationError.for_field("amount", "Amount must be non-zero")

    result = db.execute(
        update(User)
        .where(User.id == user_id, User.banked_credits + delta >= 0)
        .values(banked_credits=User.banked_credits + delta)
        .execution_options(synchronize_session=False)
    )

    if result.rowcount == 0:
        db.rollback()
        user = db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        raise InsufficientCreditsError(
            f"Cannot remove {-delta} credits: user only has {user.banked_credits}"
        )

    db.commit()
    user = db.get(User, user_id)
    db.refresh(user)
    logger.info("Adjusted banked credits for user %s by %+d -> %d", user_id, delta, user.banked_credits)
    return user
