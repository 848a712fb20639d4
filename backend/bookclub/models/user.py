from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookclub.core.database import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Ratings, the vote and notes belong to the member and go with them
    ratings: Mapped[list["Rating"]] = relationship(back_populates="user", cascade="all, delete-orphan")
    vote: Mapped["Vote"] = relationship(
        back_populates="user", cascade="all, delete-orphan", uselist=False
    )
    notes: Mapped[list["BookNote"]] = relationship(back_populates="user", cascade="all, delete-orphan")


class InviteCode(Base):
    """Single-use registration token. Redeemed codes are immutable."""

    __tablename__ = "invite_codes"

    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(String(32), unique=True, index=True)

    created_by_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    used_by_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), index=True)
    used_at: Mapped[datetime | None] = mapped_column(DateTime)
    # Stays set when the redeemer is deleted and used_by_id is nulled
    redeemed: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    created_by: Mapped["User"] = relationship(foreign_keys=[created_by_id])
    used_by: Mapped["User"] = relationship(foreign_keys=[used_by_id])

    @property
    def is_used(self) -> bool:
        return self.redeemed


# Forward references for type hints
from bookclub.models.note import BookNote  # noqa: E402
from bookclub.models.rating import Rating, Vote  # noqa: E402
