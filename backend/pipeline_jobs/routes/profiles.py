from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..db import get_db
from ..invalidation import invalidates
from ..models import User
from ..profiles import create_profile, get_profile, list_profiles, update_profile
from ..schemas import ProfileCreate, ProfileOut, ProfileUpdate

router = APIRouter()


@router.get("", response_model=list[ProfileOut])
def read_profiles(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """The caller's own profile, or every profile for an admin."""
    return list_profiles(db, user)


@router.post("", response_model=ProfileOut, status_code=201, dependencies=[invalidates("profile_write")])
def new_profile(
    payload: ProfileCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return create_profile(db, user, payload)


@router.get("/{profile_id}", response_model=ProfileOut)
def read_profile(
    profile_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return get_profile(db, user, profile_id)


@router.patch("/{profile_id}", response_model=ProfileOut, dependencies=[invalidates("profile_write")])
def edit_profile(
    profile_id: int,
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return update_profile(db, user, profile_id, payload)
