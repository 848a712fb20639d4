"""
Ratings, votes and the aggregates derived from them.
"""

from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from bookclub.core.exceptions import Forbidden, InvalidStateError, NotFound, ValidationError
from bookclub.models.book import Book, BookStatus
from bookclub.models.rating import Rating, Vote
from bookclub.models.user import User

MIN_RATING = 0.5
MAX_RATING = 5.0


def validate_rating(value: float) -> float:
    """Ratings run from 0.5 to 5 in half-point steps."""
    if value < MIN_RATING or value > MAX_RATING or (value * 2) % 1 != 0:
        raise ValidationError("Rating must be between 0.5 and 5, in 0.5 increments")
    return float(value)


def average(values: list[float]) -> float | None:
    """Arithmetic mean, or None when there is nothing to average."""
    if not values:
        return None
    return sum(values) / len(values)


def rating_summaries(db: Session, book_ids: list[int]) -> dict[int, tuple[float | None, int]]:
    """
    Average rating and rating count per book.

    Books with no ratings map to (None, 0).
    """
    summaries: dict[int, tuple[float | None, int]] = {book_id: (None, 0) for book_id in book_ids}
    if not book_ids:
        return summaries

    rows = (
        db.query(Rating.book_id, func.avg(Rating.rating), func.count(Rating.id))
        .filter(Rating.book_id.in_(book_ids))
        .group_by(Rating.book_id)
        .all()
    )
    for book_id, avg_rating, count in rows:
        summaries[book_id] = (float(avg_rating) if count else None, count)
    return summaries


def rate_book(db: Session, user: User, book_id: int, value: float) -> Rating:
    """Create or replace the member's rating for a book."""
    value = validate_rating(value)

    book = db.query(Book).filter(Book.id == book_id).first()
    if not book:
        raise NotFound("Book not found")

    rating = (
        db.query(Rating)
        .filter(Rating.user_id == user.id, Rating.book_id == book_id)
        .first()
    )
    if rating:
        rating.rating = value
    else:
        rating = Rating(user_id=user.id, book_id=book_id, rating=value)
        db.add(rating)

    db.commit()
    db.refresh(rating)
    return rating


def delete_rating(db: Session, rating_id: int, user: User) -> None:
    rating = db.query(Rating).filter(Rating.id == rating_id).first()
    if not rating:
        raise NotFound("Rating not found")

    if rating.user_id != user.id and not user.is_admin:
        raise Forbidden("You can only delete your own ratings")

    db.delete(rating)
    db.commit()


def recent_ratings(db: Session, limit: int = 10) -> list[Rating]:
    return (
        db.query(Rating)
        .options(joinedload(Rating.user), joinedload(Rating.book))
        .order_by(Rating.created_at.desc(), Rating.id.desc())
        .limit(limit)
        .all()
    )


# ============== Votes ==============


def get_vote(db: Session, user_id: int) -> Vote | None:
    return (
        db.query(Vote)
        .options(joinedload(Vote.book))
        .filter(Vote.user_id == user_id)
        .first()
    )


def cast_vote(db: Session, user: User, book_id: int) -> Vote:
    """
    Point the member's single vote at a suggestion.

    Raises:
        NotFound: No such book
        InvalidStateError: Book is not a suggestion
    """
    book = db.query(Book).filter(Book.id == book_id).first()
    if not book:
        raise NotFound("Book not found")

    if book.status != BookStatus.SUGGESTION:
        raise InvalidStateError("Can only vote for suggestions")

    vote = db.query(Vote).filter(Vote.user_id == user.id).first()
    if vote:
        vote.book_id = book_id
        vote.created_at = datetime.utcnow()
    else:
        vote = Vote(user_id=user.id, book_id=book_id)
        db.add(vote)

    db.commit()
    return get_vote(db, user.id)


def remove_vote(db: Session, user: User) -> bool:
    """Withdraw the member's vote. Returns False when there was none."""
    deleted = db.query(Vote).filter(Vote.user_id == user.id).delete(synchronize_session=False)
    db.commit()
    return deleted > 0


def clear_all_votes(db: Session) -> int:
    """Reset the poll. Does not commit; callers fold it into their transaction."""
    return db.query(Vote).delete(synchronize_session=False)


def vote_tallies(db: Session) -> dict[int, int]:
    rows = db.query(Vote.book_id, func.count(Vote.id)).group_by(Vote.book_id).all()
    return {book_id: count for book_id, count in rows}
