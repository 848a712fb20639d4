"""
The suggestion poll. Each member holds at most one vote.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bookclub.core.database import get_db
from bookclub.models.user import User
from bookclub.schemas.rating import CurrentVote, VoteCreate, VoteResponse
from bookclub.services import auth_service, rating_service

router = APIRouter()


@router.get("/", response_model=CurrentVote)
async def get_my_vote(
    current_user: User = Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    return {"vote": rating_service.get_vote(db, current_user.id)}


@router.post("/", response_model=VoteResponse)
async def cast_vote(
    data: VoteCreate,
    current_user: User = Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    """Vote for a suggestion, replacing any earlier vote."""
    return rating_service.cast_vote(db, current_user, data.book_id)


@router.delete("/")
async def remove_vote(
    current_user: User = Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    removed = rating_service.remove_vote(db, current_user)
    return {"removed": removed}
