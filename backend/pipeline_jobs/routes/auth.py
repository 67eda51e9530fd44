from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..auth import authenticate, get_current_user, login_session, logout_session, register_user
from ..db import get_db
from ..invalidation import invalidates
from ..models import User
from ..schemas import LoginRequest, RegisterRequest, UserOut

router = APIRouter()


@router.post("/register", response_model=UserOut, status_code=201, dependencies=[invalidates("register")])
def register(payload: RegisterRequest, request: Request, db: Session = Depends(get_db)):
    user = register_user(db, payload)
    login_session(request, user)
    return user


@router.post("/login", response_model=UserOut, dependencies=[invalidates("session")])
def login(payload: LoginRequest, request: Request, db: Session = Depends(get_db)):
    user = authenticate(db, payload.username, payload.password)
    login_session(request, user)
    return user


@router.post("/logout", dependencies=[invalidates("session")])
def logout(request: Request):
    # never 401: a stale cookie on logout is not an error worth surfacing
    logout_session(request)
    return {"message": "Logged out successfully"}


@router.get("/user", response_model=UserOut)
def current_user(user: User = Depends(get_current_user)):
    return user
