from sqlalchemy.orm import Session, joinedload

from bookclub.models.book import Book, BookStatus
from bookclub.models.rating import Rating, Vote
from bookclub.models.user import User
from bookclub.schemas.auth import UserSummary
from bookclub.schemas.dashboard import (
    CurrentBook,
    DashboardResponse,
    DashboardStats,
    RankedSuggestion,
)
from bookclub.schemas.rating import RecentRating
from bookclub.services import rating_service

RECENT_RATINGS_LIMIT = 10


def rank_suggestions(suggestions: list[Book], tallies: dict[int, int]) -> list[Book]:
    """Most votes first; ties go to the most recently added."""
    by_recency = sorted(suggestions, key=lambda b: (b.added_at, b.id), reverse=True)
    return sorted(by_recency, key=lambda b: tallies.get(b.id, 0), reverse=True)


def _current_books(db: Session, user: User) -> list[CurrentBook]:
    books = (
        db.query(Book)
        .options(joinedload(Book.added_by))
        .filter(Book.status == BookStatus.CURRENT)
        .order_by(Book.added_at.desc(), Book.id.desc())
        .all()
    )
    book_ids = [book.id for book in books]
    summaries = rating_service.rating_summaries(db, book_ids)

    own_ratings = {}
    if book_ids:
        own_ratings = dict(
            db.query(Rating.book_id, Rating.rating)
            .filter(Rating.user_id == user.id, Rating.book_id.in_(book_ids))
            .all()
        )

    current = []
    for book in books:
        entry = CurrentBook.model_validate(book)
        entry.average_rating, entry.rating_count = summaries[book.id]
        entry.user_rating = own_ratings.get(book.id)
        current.append(entry)
    return current


def _suggestions(db: Session) -> list[RankedSuggestion]:
    books = (
        db.query(Book)
        .options(joinedload(Book.added_by))
        .filter(Book.status == BookStatus.SUGGESTION)
        .all()
    )
    tallies = rating_service.vote_tallies(db)

    return [
        RankedSuggestion(
            id=book.id,
            title=book.title,
            author=book.author,
            cover_url=book.cover_url,
            added_at=book.added_at,
            added_by=UserSummary.model_validate(book.added_by) if book.added_by else None,
            vote_count=tallies.get(book.id, 0),
        )
        for book in rank_suggestions(books, tallies)
    ]


def get_stats(db: Session) -> DashboardStats:
    return DashboardStats(
        total_books=db.query(Book).count(),
        completed_books=db.query(Book).filter(Book.status == BookStatus.COMPLETED).count(),
        total_ratings=db.query(Rating).count(),
    )


def get_dashboard(db: Session, user: User) -> DashboardResponse:
    """
    Home page summary for a member.

    Current reads with averages and the member's own rating, the ranked
    suggestion poll with the member's vote, recent club ratings and totals.
    """
    user_vote = db.query(Vote.book_id).filter(Vote.user_id == user.id).first()

    return DashboardResponse(
        current_books=_current_books(db, user),
        suggestions=_suggestions(db),
        user_vote_book_id=user_vote.book_id if user_vote else None,
        recent_ratings=[
            RecentRating.model_validate(r)
            for r in rating_service.recent_ratings(db, RECENT_RATINGS_LIMIT)
        ],
        stats=get_stats(db),
    )
