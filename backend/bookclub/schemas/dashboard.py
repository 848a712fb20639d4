from datetime import datetime

from pydantic import BaseModel

from bookclub.schemas.auth import UserSummary
from bookclub.schemas.book import BookResponse
from bookclub.schemas.rating import RecentRating


class CurrentBook(BookResponse):
    user_rating: float | None = None


class RankedSuggestion(BaseModel):
    id: int
    title: str
    author: str
    cover_url: str | None
    added_at: datetime
    added_by: UserSummary | None
    vote_count: int


class DashboardStats(BaseModel):
    total_books: int
    completed_books: int
    total_ratings: int


class DashboardResponse(BaseModel):
    current_books: list[CurrentBook]
    suggestions: list[RankedSuggestion]
    user_vote_book_id: int | None
    recent_ratings: list[RecentRating]
    stats: DashboardStats
