"""
Authentication endpoints for user registration and login.
"""
import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.dependencies import get_current_active_user
from app.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    get_password_hash,
    verify_password,
)
from app.db.base import get_db
from app.models.user import User, UserStats
from app.schemas.common import DataResponse, Message
from app.schemas.user import (
    AuthResponse,
    PasswordUpdate,
    RefreshRequest,
    Token,
    User as UserSchema,
    UserCreate,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _token_pair(user: User) -> dict:
    return {
        "access_token": create_access_token(subject=user.id),
        "refresh_token": create_refresh_token(subject=user.id),
        "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        "token_type": "bearer",
    }


@router.post(
    "/register",
    response_model=DataResponse[AuthResponse],
    status_code=status.HTTP_201_CREATED,
)
def register(user_in: UserCreate, db: Session = Depends(get_db)) -> Any:
    """
    Register a new user.

    Args:
        user_in: User registration data
        db: Database session

    Returns:
        Token pair and the created user

    Raises:
        HTTPException: If email or username already exists
    """
    # Check if user exists
    user = db.query(User).filter(User.email == user_in.email).first()
    if user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    user = db.query(User).filter(User.username == user_in.username).first()
    if user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already taken",
        )

    # Create new user with an empty stats snapshot
    user = User(
        email=user_in.email,
        username=user_in.username,
        full_name=user_in.full_name,
        hashed_password=get_password_hash(user_in.password),
        role="student",
        is_active=True,
    )
    user.stats = UserStats()
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"Registered user {user.id} ({user.username})")

    return {
        "message": "Registration successful",
        "data": {**_token_pair(user), "user": UserSchema.model_validate(user)},
    }


@router.post("/login", response_model=DataResponse[AuthResponse])
def login(
    db: Session = Depends(get_db), form_data: OAuth2PasswordRequestForm = Depends()
) -> Any:
    """
    Login user and return a JWT token pair.

    Args:
        db: Database session
        form_data: OAuth2 form data (username and password)

    Returns:
        Token pair and the user

    Raises:
        HTTPException: If credentials are invalid or the account is deactivated
    """
    # Authenticate user (username can be email or username)
    identifier = form_data.username.strip().lower()
    user = db.query(User).filter(
        or_(User.email == identifier, User.username == identifier)
    ).first()

    if not user or not verify_password(form_data.password, user.hashed_password):  # type: ignore
        logger.warning(f"Failed login for '{identifier}'")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email/username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:  # type: ignore
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is deactivated",
        )

    user.last_login = datetime.now()  # type: ignore
    db.commit()
    db.refresh(user)

    logger.info(f"User {user.id} logged in")

    return {
        "message": "Login successful",
        "data": {**_token_pair(user), "user": UserSchema.model_validate(user)},
    }


@router.post("/refresh", response_model=DataResponse[Token])
def refresh_token(body: RefreshRequest, db: Session = Depends(get_db)) -> Any:
    """
    Exchange a refresh token for a new token pair.

    Raises:
        HTTPException: 401 if the refresh token is invalid or the user is gone
    """
    payload = decode_token(body.refresh_token, expected_type="refresh")
    user = None
    if payload and payload.get("sub"):
        user = db.query(User).filter(User.id == int(payload["sub"])).first()

    if user is None or not user.is_active:  # type: ignore
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return {"data": _token_pair(user)}


@router.get("/me", response_model=DataResponse[UserSchema])
def read_current_user(current_user: User = Depends(get_current_active_user)) -> Any:
    """
    Get current authenticated user with stats.

    Args:
        current_user: Current authenticated user

    Returns:
        Current user data
    """
    return {"data": UserSchema.model_validate(current_user)}


@router.put("/update-password", response_model=Message)
def update_password(
    body: PasswordUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> Any:
    """
    Change the current user's password.

    Raises:
        HTTPException: 400 if the current password is wrong
    """
    if not verify_password(body.current_password, current_user.hashed_password):  # type: ignore
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect",
        )

    current_user.hashed_password = get_password_hash(body.new_password)  # type: ignore
    db.commit()

    logger.info(f"User {current_user.id} changed password")
    return {"message": "Password updated successfully"}
