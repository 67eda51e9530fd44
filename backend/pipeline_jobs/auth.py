"""Session-cookie authentication.

Passwords are stored as ``<scrypt hex>.<salt hex>``. The session (signed
cookie, see ``SessionMiddleware`` in main.py) only carries the user id.
"""

import hashlib
import hmac
import logging
import secrets

from dateutil import tz
from fastapi import Depends, Request
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .db import get_db
from .errors import ConflictError, ForbiddenError, UnauthorizedError, ValidationError
from .models import User
from .referrals import redeem_referral
from .schemas import RegisterRequest

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user_id"


def hash_password(password: str) -> str:
    salt = secrets.token_hex(16)
    digest = hashlib.scrypt(password.encode("utf-8"), salt=salt.encode("utf-8"), n=16384, r=8, p=1, dklen=64)
    return f"{digest.hex()}.{salt}"


def verify_password(supplied: str, stored: str) -> bool:
    try:
        hashed, salt = stored.split(".")
    except ValueError:
        return False
    digest = hashlib.scrypt(supplied.encode("utf-8"), salt=salt.encode("utf-8"), n=16384, r=8, p=1, dklen=64)
    return hmac.compare_digest(digest.hex(), hashed)


def register_user(db: Session, payload: RegisterRequest) -> User:
    """Create the account and redeem its referral code in one transaction."""
    if db.query(User).filter(func.lower(User.username) == payload.username.lower()).first():
        raise ValidationError.for_field("username", "Username already exists")
    if db.query(User).filter(User.email == payload.email).first():
        raise ValidationError.for_field("email", "Email already registered")

    if payload.timezone and tz.gettz(payload.timezone) is None:
        raise ValidationError.for_field("timezone", "Unknown timezone")

    user = User(
        username=payload.username,
        email=payload.email,
        password_hash=hash_password(payload.password),
        timezone=payload.timezone or None,
        banked_credits=0,
    )
    db.add(user)
    try:
        db.flush()
        if payload.referred_by:
            redeem_referral(db, user, payload.referred_by)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Username or email already registered")

    db.refresh(user)
    logger.info("Registered user %s (%s)", user.id, user.username)
    return user


def authenticate(db: Session, username: str, password: str) -> User:
    user = db.query(User).filter(User.username == username).first()
    if not user or not verify_password(password, user.password_hash):
        raise UnauthorizedError("Invalid username or password")
    return user


def login_session(request: Request, user: User) -> None:
    request.session.clear()
    request.session[SESSION_USER_KEY] = user.id


def logout_session(request: Request) -> None:
    request.session.clear()


# -----------------------------
# Dependencies
# -----------------------------
def get_optional_user(request: Request, db: Session = Depends(get_db)) -> User | None:
    user_id = request.session.get(SESSION_USER_KEY)
    if user_id is None:
        return None
    user = db.get(User, user_id)
    if user is None:
        # account removed while the cookie was alive
        request.session.clear()
    return user


def get_current_user(user: User | None = Depends(get_optional_user)) -> User:
    if user is None:
        raise UnauthorizedError()
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise ForbiddenError()
    return user


def ensure_self_or_admin(user: User, user_id: int) -> None:
    if user.id != user_id and not user.is_admin:
        raise ForbiddenError("Forbidden")
