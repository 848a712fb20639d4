from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from bookclub.core.exceptions import Forbidden, IntegrityError, NotFound, ValidationError
from bookclub.core.logging import get_logger
from bookclub.models.book import Book, BookStatus
from bookclub.models.rating import Rating
from bookclub.models.user import User
from bookclub.schemas.book import BookCreate, BookDetail, BookResponse, BookUpdate
from bookclub.services import rating_service
from bookclub.services.external_apis import OpenLibraryClient

logger = get_logger(__name__)


def get_book_or_404(db: Session, book_id: int) -> Book:
    book = db.query(Book).filter(Book.id == book_id).first()
    if not book:
        raise NotFound("Book not found")
    return book


def _with_summary(book: Book, summary: tuple[float | None, int]) -> BookResponse:
    response = BookResponse.model_validate(book)
    response.average_rating, response.rating_count = summary
    return response


def list_books(db: Session, status: BookStatus | None = None) -> list[BookResponse]:
    """List books, newest first, with their rating averages."""
    q = db.query(Book).options(joinedload(Book.added_by))
    if status is not None:
        q = q.filter(Book.status == status)

    books = q.order_by(Book.added_at.desc(), Book.id.desc()).all()
    summaries = rating_service.rating_summaries(db, [book.id for book in books])

    return [_with_summary(book, summaries[book.id]) for book in books]


def get_book_response(db: Session, book_id: int) -> BookResponse:
    book = get_book_or_404(db, book_id)
    return _with_summary(book, rating_service.rating_summaries(db, [book_id])[book_id])


async def get_book_detail(
    db: Session, book_id: int, metadata: OpenLibraryClient | None = None
) -> BookDetail:
    """
    Book with its ratings, discussion questions and rating average.

    When the book has no synopsis, a description is looked up on Open
    Library for display only; nothing is written back.
    """
    book = (
        db.query(Book)
        .options(
            joinedload(Book.added_by),
            selectinload(Book.ratings).joinedload(Rating.user),
            selectinload(Book.questions),
        )
        .filter(Book.id == book_id)
        .first()
    )
    if not book:
        raise NotFound("Book not found")

    detail = BookDetail.model_validate(book)
    detail.average_rating = rating_service.average([r.rating for r in book.ratings])
    detail.rating_count = len(book.ratings)

    if not detail.synopsis and metadata is not None:
        description = await metadata.find_description(
            book.open_library_key, book.isbn13 or book.isbn
        )
        if description:
            detail.synopsis = description

    return detail


def create_book(db: Session, data: BookCreate, user: User) -> Book:
    """Add a book. Members can only add suggestions; admins pick any status."""
    title = data.title.strip()
    author = data.author.strip()
    if not title or not author:
        raise ValidationError("Title and author are required")

    status = data.status if user.is_admin else BookStatus.SUGGESTION

    book = Book(
        title=title,
        author=author,
        isbn=data.isbn,
        isbn13=data.isbn13,
        open_library_key=data.open_library_key,
        cover_url=data.cover_url,
        synopsis=data.synopsis,
        page_count=data.page_count,
        publish_year=data.publish_year,
        status=status,
        added_by_id=user.id,
    )
    db.add(book)
    db.commit()
    db.refresh(book)
    return book


def update_book(db: Session, book_id: int, data: BookUpdate, user: User) -> Book:
    """
    Change a book's status and/or synopsis.

    Only admins may change status. Moving any book to CURRENT resets the
    poll: every vote in the club is removed in the same transaction.
    """
    if data.status is not None and not user.is_admin:
        raise Forbidden("Only admins can change book status")

    book = get_book_or_404(db, book_id)
    cleared = 0

    try:
        if data.status is not None:
            book.status = data.status
            if data.status == BookStatus.CURRENT:
                cleared = rating_service.clear_all_votes(db)
        if data.synopsis is not None:
            book.synopsis = data.synopsis
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise IntegrityError("Failed to update book") from e

    if data.status is not None:
        logger.info(
            f"Book {book.id} set to {book.status.value}",
            extra={"extra_fields": {"book_id": book.id, "votes_cleared": cleared}},
        )

    db.refresh(book)
    return book


def delete_book(db: Session, book_id: int, user: User) -> None:
    """Admins delete anything; members only their own open suggestions."""
    book = get_book_or_404(db, book_id)

    is_owner = book.added_by_id == user.id
    is_suggestion = book.status == BookStatus.SUGGESTION
    if not user.is_admin and not (is_owner and is_suggestion):
        raise Forbidden("You can only delete your own suggestions")

    db.delete(book)
    db.commit()
