import logging

from fastapi import APIRouter, Depends
from sqlmodel import Session, select
from api.db.session import get_session
from api.errors import InvalidInput, Unauthenticated
from api.responses import api_response
from .models import UserCreate, UserLogin
from api.db.models import User
from .utils import (
    hash_password,
    verify_password,
    create_access_token,
    get_current_user,
)

logger = logging.getLogger("auth")

router = APIRouter(tags=["auth"])


@router.post("/signup")
def signup(user: UserCreate, db: Session = Depends(get_session)):
    existing = db.exec(
        select(User).where(
            (User.username == user.username) | (User.email == user.email)
        )
    ).first()
    if existing:
        raise InvalidInput("Username or email already registered")

    db_user = User(
        username=user.username,
        email=user.email,
        full_name=user.full_name or "",
        avatar=user.avatar,
        hashed_password=hash_password(user.password),
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    logger.info(f"Registered user {db_user.id}")
    token = create_access_token({"sub": db_user.id})
    return api_response(
        {"access_token": token, "token_type": "bearer", "user": db_user.public_profile()},
        "User registered successfully",
        status_code=201,
    )


@router.post("/login")
def login(user: UserLogin, db: Session = Depends(get_session)):
    db_user = db.exec(select(User).where(User.username == user.username)).first()
    if not db_user or not verify_password(user.password, db_user.hashed_password):
        raise Unauthenticated("Invalid credentials")
    token = create_access_token({"sub": db_user.id})
    return api_response({"access_token": token, "token_type": "bearer"}, "Logged in successfully")


@router.get("/me")
def get_me(current_user: User = Depends(get_current_user)):
    return api_response(
        {**current_user.public_profile(), "email": current_user.email},
        "Current user fetched successfully",
    )
