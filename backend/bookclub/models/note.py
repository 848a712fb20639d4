from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookclub.core.database import Base


class BookNote(Base):
    """Private reading notes, one per member per book."""

    __tablename__ = "book_notes"
    __table_args__ = (UniqueConstraint("user_id", "book_id", name="unique_user_book_note"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    book_id: Mapped[int] = mapped_column(ForeignKey("books.id", ondelete="CASCADE"), index=True)

    content: Mapped[str] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    user: Mapped["User"] = relationship(back_populates="notes")
    book: Mapped["Book"] = relationship(back_populates="notes")


# Forward references
from bookclub.models.book import Book  # noqa: E402
from bookclub.models.user import User  # noqa: E402
