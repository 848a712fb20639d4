"""
Self-service account endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bookclub.core.database import get_db
from bookclub.models.user import User
from bookclub.schemas.auth import UserResponse
from bookclub.schemas.rating import RatingHistoryItem
from bookclub.schemas.user import EmailUpdate, PasswordChange
from bookclub.services import auth_service, user_service

router = APIRouter()


@router.put("/email", response_model=UserResponse)
async def update_email(
    data: EmailUpdate,
    current_user: User = Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    return user_service.update_email(db, current_user, data.email)


@router.put("/password")
async def change_password(
    data: PasswordChange,
    current_user: User = Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    """Change password; the current password must be confirmed."""
    user_service.change_password(db, current_user, data.current_password, data.new_password)
    return {"message": "Password updated"}


@router.get("/ratings", response_model=list[RatingHistoryItem])
async def my_ratings(
    current_user: User = Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    """Everything the current member has rated, newest first."""
    return user_service.get_rating_history(db, current_user.id)
