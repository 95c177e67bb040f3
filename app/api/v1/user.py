from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import logging
from datetime import datetime
from app.core.dependencies import get_current_active_user
from app.db.base import get_db
from app.schemas.common import DataResponse, Message
from app.schemas.user import PreferencesUpdate, PublicProfile, User as UserSchema, UserPreferences, UserUpdate
from app.models.user import User
from app.services.aggregation import get_recent_activity

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/profile", response_model=DataResponse[UserSchema], status_code=status.HTTP_200_OK)
def view_profile(current_user: User = Depends(get_current_active_user)):
    """
    Endpoint to view the profile of the currently authenticated user.

    Args:
        current_user: The currently authenticated user (injected by dependency)

    Returns:
        The profile information of the current user, with stats
    """
    return {"data": UserSchema.model_validate(current_user)}


@router.put("/profile", response_model=DataResponse[UserSchema], status_code=status.HTTP_200_OK)
def update_profile(
    updated_user: UserUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Endpoint to update the profile of the currently authenticated user.

    Only the fields sent are changed. Email and username must stay unique.

    Args:
        updated_user: The updated user information

    Returns:
        The updated profile information of the current user
    """
    if updated_user.email and updated_user.email != current_user.email:
        taken = db.query(User).filter(User.email == updated_user.email, User.id != current_user.id).first()
        if taken:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")
        current_user.email = updated_user.email  # type: ignore

    if updated_user.username and updated_user.username != current_user.username:
        taken = db.query(User).filter(User.username == updated_user.username, User.id != current_user.id).first()
        if taken:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already taken")
        current_user.username = updated_user.username  # type: ignore

    if updated_user.full_name is not None:
        current_user.full_name = updated_user.full_name  # type: ignore

    db.commit()
    db.refresh(current_user)

    return {"message": "Profile updated successfully", "data": UserSchema.model_validate(current_user)}


@router.put("/preferences", response_model=DataResponse[UserPreferences], status_code=status.HTTP_200_OK)
def update_preferences(
    body: PreferencesUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """Merge the sent preference fields into the stored preferences."""
    preferences = UserPreferences.model_validate(current_user.preferences or {})
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    preferences = preferences.model_copy(update=changes)

    # Reassign so the JSON column is flagged dirty
    current_user.preferences = preferences.model_dump(by_alias=True)  # type: ignore
    db.commit()
    db.refresh(current_user)

    return {"message": "Preferences updated successfully", "data": preferences}


@router.delete("/account", response_model=Message, status_code=status.HTTP_200_OK)
def delete_account(
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db)
):
    """
    Soft-delete the current account.

    The user is deactivated and their email and username are mangled so
    both can be registered again. Progress and stats are kept.
    """
    stamp = int(datetime.now().timestamp())
    current_user.is_active = False  # type: ignore
    current_user.email = f"deleted_{current_user.id}_{stamp}_{current_user.email}"  # type: ignore
    current_user.username = f"deleted_{current_user.id}_{stamp}_{current_user.username}"  # type: ignore
    db.commit()

    logger.info(f"User {current_user.id} deleted their account")
    return {"message": "Account deleted successfully"}


@router.get("/{username}", response_model=DataResponse[PublicProfile], status_code=status.HTTP_200_OK)
def public_profile(username: str, db: Session = Depends(get_db)):
    """Public profile of an active user with stats and the 5 most recent activities."""
    user = db.query(User).filter(User.username == username.lower(), User.is_active == True).first()  # noqa: E712
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    return {
        "data": {
            "username": user.username,
            "full_name": user.full_name,
            "avatar_url": user.avatar_url,
            "created_at": user.created_at,
            "stats": user.stats,
            "recent_activity": get_recent_activity(db, int(user.id), limit=5),  # type: ignore
        }
    }
