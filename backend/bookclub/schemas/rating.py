from datetime import datetime

from pydantic import BaseModel

from bookclub.schemas.auth import UserSummary
from bookclub.schemas.book import BookSummary


class RatingCreate(BaseModel):
    book_id: int
    rating: float


class RatingResponse(BaseModel):
    id: int
    user_id: int
    book_id: int
    rating: float
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RatedBook(BookSummary):
    cover_url: str | None


class RatingHistoryItem(BaseModel):
    """One of the current member's ratings, newest first."""

    id: int
    rating: float
    created_at: datetime
    book: RatedBook

    class Config:
        from_attributes = True


class RecentRating(BaseModel):
    """Activity feed entry: who rated what."""

    id: int
    rating: float
    created_at: datetime
    user: UserSummary
    book: BookSummary

    class Config:
        from_attributes = True


class VoteCreate(BaseModel):
    book_id: int


class VoteResponse(BaseModel):
    id: int
    book_id: int
    created_at: datetime
    book: BookSummary

    class Config:
        from_attributes = True


class CurrentVote(BaseModel):
    vote: VoteResponse | None
