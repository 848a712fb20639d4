import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookclub.core.database import Base


class BookStatus(str, enum.Enum):
    SUGGESTION = "SUGGESTION"
    CURRENT = "CURRENT"
    COMPLETED = "COMPLETED"


class Book(Base):
    """A book the club has read, is reading, or might read next."""

    __tablename__ = "books"

    id: Mapped[int] = mapped_column(primary_key=True)

    title: Mapped[str] = mapped_column(String(500), index=True)
    author: Mapped[str] = mapped_column(String(255), index=True)

    # External IDs
    isbn: Mapped[str | None] = mapped_column(String(10))
    isbn13: Mapped[str | None] = mapped_column(String(13), index=True)
    open_library_key: Mapped[str | None] = mapped_column(String(50))  # e.g. /works/OL12345W

    # Metadata
    cover_url: Mapped[str | None] = mapped_column(String(500))
    synopsis: Mapped[str | None] = mapped_column(Text)
    page_count: Mapped[int | None] = mapped_column(Integer)
    publish_year: Mapped[int | None] = mapped_column(Integer)

    status: Mapped[BookStatus] = mapped_column(
        Enum(BookStatus, native_enum=False, length=20),
        default=BookStatus.SUGGESTION,
        index=True,
    )

    added_by_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    added_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    added_by: Mapped["User"] = relationship()
    ratings: Mapped[list["Rating"]] = relationship(
        back_populates="book", cascade="all, delete-orphan"
    )
    votes: Mapped[list["Vote"]] = relationship(
        back_populates="book", cascade="all, delete-orphan"
    )
    questions: Mapped[list["DiscussionQuestion"]] = relationship(
        back_populates="book",
        cascade="all, delete-orphan",
        order_by="DiscussionQuestion.sort_order",
    )
    notes: Mapped[list["BookNote"]] = relationship(
        back_populates="book", cascade="all, delete-orphan"
    )


class DiscussionQuestion(Base):
    """
    Discussion prompt for a book.

    Text may contain [bracketed] spoiler spans; they are stored verbatim and
    only interpreted when rendered.
    """

    __tablename__ = "discussion_questions"

    id: Mapped[int] = mapped_column(primary_key=True)
    book_id: Mapped[int] = mapped_column(ForeignKey("books.id", ondelete="CASCADE"), index=True)
    user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), index=True
    )

    question: Mapped[str] = mapped_column(Text)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    book: Mapped["Book"] = relationship(back_populates="questions")
    user: Mapped["User"] = relationship()


# Forward references
from bookclub.models.note import BookNote  # noqa: E402
from bookclub.models.rating import Rating, Vote  # noqa: E402
from bookclub.models.user import User  # noqa: E402
