from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import ensure_self_or_admin, get_current_user
from ..db import get_db
from ..invalidation import invalidates
from ..models import User
from ..referrals import ensure_referral_code, get_referral_code, lookup_referrer, referral_link
from ..schemas import ReferralCodeOut, ReferrerOut

router = APIRouter()


def referral_to_out(row) -> ReferralCodeOut:
    if row is None:
        return ReferralCodeOut(referral_code=None)
    return ReferralCodeOut(
        referral_code=row.code,
        referral_link=referral_link(row.code),
        usage_count=row.usage_count,
    )


@router.get("/users/{user_id}/referral-code", response_model=ReferralCodeOut)
def read_referral_code(
    user_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    ensure_self_or_admin(user, user_id)
    return referral_to_out(get_referral_code(db, user_id))


@router.post("/users/{user_id}/referral-code", response_model=ReferralCodeOut, dependencies=[invalidates("referral_issue")])
def issue_referral_code(
    user_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    ensure_self_or_admin(user, user_id)
    return referral_to_out(ensure_referral_code(db, user_id))


@router.get("/referral/{code}", response_model=ReferrerOut)
def read_referrer(code: str, db: Session = Depends(get_db)):
    """Public: who invited the visitor, for the registration page."""
    return ReferrerOut(username=lookup_referrer(db, code).username)
