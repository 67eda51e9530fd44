import logging

from pydantic.alias_generators import to_camel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from .models import Profile, User, utcnow
from .schemas import ProfileCreate, ProfileUpdate

logger = logging.getLogger(__name__)

# may be cleared with null; null for any other field is rejected
CLEARABLE_FIELDS = ("resume_url", "linkedin_url", "portfolio_url", "github_url", "salary_expectation")


def get_profile_for_user(db: Session, user_id: int) -> Profile | None:
    return db.query(Profile).filter(Profile.user_id == user_id).first()


def get_profile(db: Session, user: User, profile_id: int) -> Profile:
    profile = db.get(Profile, profile_id)
    if profile is None:
        raise NotFoundError("Profile not found")
    if profile.user_id != user.id and not user.is_admin:
        raise ForbiddenError("Forbidden")
    return profile


def list_profiles(db: Session, user: User) -> list[Profile]:
    q = db.query(Profile)
    if not user.is_admin:
        q = q.filter(Profile.user_id == user.id)
    return q.order_by(Profile.id).all()


def create_profile(db: Session, user: User, payload: ProfileCreate) -> Profile:
    if get_profile_for_user(db, user.id):
        raise ConflictError("Profile already exists")

    profile = Profile(user_id=user.id, **payload.model_dump())
    db.add(profile)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Profile already exists")

    db.refresh(profile)
    logger.info("Created profile %s for user %s", profile.id, user.id)
    return profile


def update_profile(db: Session, user: User, profile_id: int, payload: ProfileUpdate) -> Profile:
    profile = get_profile(db, user, profile_id)

    changes = payload.model_dump(exclude_unset=True)
    for field, value in changes.items():
        if value is None and field not in CLEARABLE_FIELDS:
            raise ValidationError.for_field(to_camel(field), "May not be null")
    for field, value in changes.items():
        setattr(profile, field, value)

    profile.updated_at = utcnow()
    db.commit()
    db.refresh(profile)
    return profile
