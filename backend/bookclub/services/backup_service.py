"""
Whole-database backup and restore.

Export snapshots every table into one JSON document. Restore replaces the
entire database with the contents of such a document, or changes nothing
at all if any part of it fails.
"""

from datetime import datetime
from typing import Any

import pydantic
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bookclub.core.exceptions import IntegrityError, ValidationError
from bookclub.core.logging import get_logger
from bookclub.models.book import Book, DiscussionQuestion
from bookclub.models.note import BookNote
from bookclub.models.rating import Rating, Vote
from bookclub.models.site import Announcement, SiteSetting
from bookclub.models.user import InviteCode, User
from bookclub.schemas.backup import (
    AnnouncementRecord,
    BackupData,
    BackupDocument,
    BookNoteRecord,
    BookRecord,
    DiscussionQuestionRecord,
    InviteCodeRecord,
    RatingRecord,
    SiteSettingRecord,
    UserRecord,
    VoteRecord,
)

logger = get_logger(__name__)

BACKUP_VERSION = 1

# (BackupData field, model, record schema), parents before dependents.
# Restore inserts in this order and deletes in DELETE_ORDER.
INSERT_ORDER = [
    ("users", User, UserRecord),
    ("books", Book, BookRecord),
    ("ratings", Rating, RatingRecord),
    ("votes", Vote, VoteRecord),
    ("invite_codes", InviteCode, InviteCodeRecord),
    ("discussion_questions", DiscussionQuestion, DiscussionQuestionRecord),
    ("announcements", Announcement, AnnouncementRecord),
    ("site_settings", SiteSetting, SiteSettingRecord),
    ("book_notes", BookNote, BookNoteRecord),
]

DELETE_ORDER = [
    Vote,
    Rating,
    DiscussionQuestion,
    BookNote,
    InviteCode,
    Announcement,
    Book,
    User,
    SiteSetting,
]


def export_backup(db: Session) -> dict[str, Any]:
    """Snapshot every table as a JSON-ready backup document."""
    data = {}
    for field, model, record in INSERT_ORDER:
        rows = db.query(model).all()
        data[field] = [record.model_validate(row) for row in rows]

    document = BackupDocument(
        version=BACKUP_VERSION,
        exported_at=datetime.utcnow(),
        data=BackupData(**data),
    )
    return document.model_dump(mode="json", by_alias=True)


def backup_filename(when: datetime | None = None) -> str:
    when = when or datetime.utcnow()
    return f"bookclub-backup-{when.strftime('%Y-%m-%d')}.json"


def parse_backup(document: Any) -> BackupDocument:
    if not isinstance(document, dict) or not document.get("version") or not document.get("data"):
        raise ValidationError("Invalid backup file")

    try:
        return BackupDocument.model_validate(document)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid backup file: {e.error_count()} invalid field(s)") from e


def _reset_sequences(db: Session) -> None:
    """Move PostgreSQL id sequences past the restored ids."""
    if db.get_bind().dialect.name != "postgresql":
        return

    for _, model, _ in INSERT_ORDER:
        if "id" not in model.__table__.columns:
            continue
        table = model.__tablename__
        db.execute(
            text(
                f"SELECT setval(pg_get_serial_sequence('{table}', 'id'), "
                f"COALESCE((SELECT MAX(id) FROM {table}), 0) + 1, false)"
            )
        )


def restore_backup(db: Session, document: Any) -> dict[str, int]:
    """
    Replace the whole database with a backup document.

    Deletes every row (dependents first) and re-inserts the document's
    records (parents first), keeping ids, timestamps and foreign keys as
    they are in the file. All of it runs in one transaction.

    Args:
        db: Database session
        document: Parsed JSON of a backup file

    Returns:
        Number of restored rows per collection

    Raises:
        ValidationError: Not a backup document
        IntegrityError: The database rejected the restore; nothing changed
    """
    backup = parse_backup(document)

    counts: dict[str, int] = {}
    try:
        for model in DELETE_ORDER:
            db.query(model).delete(synchronize_session=False)
        # Loaded rows (the acting admin among them) would clash with the
        # restored ids.
        db.expunge_all()

        for field, model, _ in INSERT_ORDER:
            records = getattr(backup.data, field)
            db.add_all([model(**record.model_dump()) for record in records])
            db.flush()
            counts[field] = len(records)

        _reset_sequences(db)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Backup restore failed, rolled back: {e}")
        raise IntegrityError("Backup restore failed; no changes were made") from e

    db.expire_all()
    logger.info(
        "Backup restored",
        extra={"extra_fields": {"restored": counts, "backup_version": backup.version}},
    )
    return counts
