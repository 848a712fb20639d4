"""
Meeting announcements, site settings and members' private book notes.
"""

from sqlalchemy import update
from sqlalchemy.orm import Session

from bookclub.core.config import get_settings
from bookclub.core.exceptions import NotFound, ValidationError
from bookclub.core.logging import get_logger
from bookclub.models.book import Book
from bookclub.models.note import BookNote
from bookclub.models.site import Announcement, SiteSetting
from bookclub.models.user import User
from bookclub.schemas.site import AnnouncementCreate

settings = get_settings()
logger = get_logger(__name__)

DEFAULT_ANNOUNCEMENT_TITLE = "Next Book Club Meeting"


# ============== Announcements ==============


def get_active_announcement(db: Session) -> Announcement | None:
    return (
        db.query(Announcement)
        .filter(Announcement.is_active.is_(True))
        .order_by(Announcement.created_at.desc(), Announcement.id.desc())
        .first()
    )


def _deactivate_all(db: Session) -> None:
    db.execute(
        update(Announcement)
        .where(Announcement.is_active.is_(True))
        .values(is_active=False)
        .execution_options(synchronize_session=False)
    )


def publish_announcement(db: Session, data: AnnouncementCreate) -> Announcement:
    """Replace the active announcement with a new one."""
    location = data.location.strip()
    if not location:
        raise ValidationError("Location and date/time are required")

    _deactivate_all(db)
    announcement = Announcement(
        title=(data.title or "").strip() or DEFAULT_ANNOUNCEMENT_TITLE,
        location=location,
        date_time=data.date_time,
        time_zone=data.time_zone or settings.DEFAULT_TIME_ZONE,
        notes=data.notes or None,
        is_active=True,
    )
    db.add(announcement)
    db.commit()
    db.refresh(announcement)
    return announcement


def deactivate_announcement(db: Session) -> None:
    """Take the announcement down. Rows are kept, only marked inactive."""
    _deactivate_all(db)
    db.commit()


# ============== Site settings ==============


def get_setting(db: Session, key: str) -> str | None:
    setting = db.query(SiteSetting).filter(SiteSetting.key == key).first()
    return setting.value if setting else None


def list_settings(db: Session) -> list[SiteSetting]:
    return db.query(SiteSetting).order_by(SiteSetting.key).all()


def put_setting(db: Session, key: str, value: str) -> SiteSetting:
    key = key.strip()
    if not key:
        raise ValidationError("Key is required")

    setting = db.query(SiteSetting).filter(SiteSetting.key == key).first()
    if setting:
        setting.value = value
    else:
        setting = SiteSetting(key=key, value=value)
        db.add(setting)

    db.commit()
    db.refresh(setting)
    logger.info(f"Site setting {key!r} updated")
    return setting


# ============== Book notes ==============


def get_note(db: Session, user: User, book_id: int) -> BookNote | None:
    return (
        db.query(BookNote)
        .filter(BookNote.user_id == user.id, BookNote.book_id == book_id)
        .first()
    )


def save_note(db: Session, user: User, book_id: int, content: str | None) -> BookNote | None:
    """
    Store the member's note for a book.

    Blank content removes the note instead of keeping an empty row.
    """
    content = (content or "").strip()

    if not content:
        db.query(BookNote).filter(
            BookNote.user_id == user.id, BookNote.book_id == book_id
        ).delete(synchronize_session=False)
        db.commit()
        return None

    if not db.query(Book.id).filter(Book.id == book_id).first():
        raise NotFound("Book not found")

    note = get_note(db, user, book_id)
    if note:
        note.content = content
    else:
        note = BookNote(user_id=user.id, book_id=book_id, content=content)
        db.add(note)

    db.commit()
    db.refresh(note)
    return note
