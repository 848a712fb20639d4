from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from bookclub.core.database import get_db
from bookclub.models.user import User
from bookclub.schemas.rating import RatingCreate, RatingResponse
from bookclub.services import auth_service, rating_service

router = APIRouter()


@router.post("/", response_model=RatingResponse)
async def rate_book(
    data: RatingCreate,
    current_user: User = Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    """Rate a book from 0.5 to 5. Rating it again replaces the old value."""
    return rating_service.rate_book(db, current_user, data.book_id, data.rating)


@router.delete("/{rating_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_rating(
    rating_id: int,
    current_user: User = Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    rating_service.delete_rating(db, rating_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
