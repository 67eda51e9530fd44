"""Referral codes: one per user, unique, immutable once issued.

A code supplied at registration awards ``REFERRAL_BONUS`` banked credits to
both the referrer and the new user, inside the registration transaction.
"""

import logging
import secrets
import string

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .config import settings
from .errors import ConflictError, NotFoundError
from .models import ReferralCode, User
from .notifications import notify

logger = logging.getLogger(__name__)

ALPHABET = string.ascii_uppercase + string.digits


def generate_code(length: int | None = None) -> str:
    length = length or settings.REFERRAL_CODE_LENGTH
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


def referral_link(code: str) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/auth/register?ref={code}"


def get_referral_code(db: Session, user_id: int) -> ReferralCode | None:
    return db.query(ReferralCode).filter(ReferralCode.user_id == user_id).first()


def ensure_referral_code(db: Session, user_id: int, generate=generate_code) -> ReferralCode:
    """Return the user's code, creating it on first use.

    Uniqueness is left to the constraints: a clash on ``code`` retries with a
    fresh code, a clash on ``user_id`` means a concurrent request already
    issued one, which is returned instead.
    """
    existing = get_referral_code(db, user_id)
    if existing:
        return existing

    if db.get(User, user_id) is None:
        raise NotFoundError("User not found")

    for attempt in range(1, settings.REFERRAL_CODE_ATTEMPTS + 1):
        row = ReferralCode(user_id=user_id, code=generate(), usage_count=0)
        try:
            with db.begin_nested():
                db.add(row)
        except IntegrityError:
            winner = get_referral_code(db, user_id)
            if winner:
                logger.info("Referral code for user %s issued concurrently", user_id)
                db.commit()
                return winner
            logger.info("Referral code collision for user %s (attempt %d)", user_id, attempt)
            continue

        db.commit()
        db.refresh(row)
        logger.info("Issued referral code for user %s", user_id)
        return row

    # only reached when every attempt collided on ``code``
    raise ConflictError(
        f"Could not allocate a unique referral code after "
        f"{settings.REFERRAL_CODE_ATTEMPTS} attempts; please retry"
    )


def lookup_referrer(db: Session, code: str) -> User:
    row = db.query(ReferralCode).filter(ReferralCode.code == code.strip().upper()).first()
    if row is None:
        raise NotFoundError("Referral code not found")
    return row.user


def redeem_referral(db: Session, new_user: User, code: str) -> bool:
    """Apply a referral at registration. Unknown codes are ignored.

    Caller owns the transaction; nothing here commits.
    """
    code = code.strip().upper()
    row = db.query(ReferralCode).filter(ReferralCode.code == code).first()
    if row is None or row.user_id == new_user.id:
        logger.info("Ignoring referral code '%s' for user %s: unknown or own code", code, new_user.id)
        return False

    bonus = settings.REFERRAL_BONUS
    db.execute(
        update(ReferralCode)
        .where(ReferralCode.id == row.id)
        .values(usage_count=ReferralCode.usage_count + 1)
    )
    db.execute(
        update(User)
        .where(User.id.in_([row.user_id, new_user.id]))
        .values(banked_credits=User.banked_credits + bonus)
    )
    notify(
        db,
        row.user_id,
        "referral_bonus",
        "Referral bonus",
        f"{new_user.username} joined with your referral link. You earned {bonus} credits!",
        {"referredUserId": new_user.id, "credits": bonus},
    )
    logger.info("Referral %s redeemed by user %s", code, new_user.id)
    return True
