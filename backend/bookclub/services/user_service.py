"""
Membership management.

Admin operations on members (listing, password resets, removal) and the
self-service account changes members make to their own profile.
"""

from typing import Callable

from sqlalchemy import delete, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from bookclub.core.config import get_settings
from bookclub.core.exceptions import (
    ConflictError,
    Forbidden,
    IntegrityError,
    NotFound,
    SelfDeletionError,
    ValidationError,
)
from bookclub.core.logging import get_logger
from bookclub.models.book import Book, DiscussionQuestion
from bookclub.models.rating import Rating
from bookclub.models.user import InviteCode, User
from bookclub.services.auth_service import (
    get_password_hash,
    get_user_by_email,
    normalize_email,
    verify_password,
)

settings = get_settings()
logger = get_logger(__name__)


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.created_at.asc(), User.id.asc()).all()


def get_user_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("User not found")
    return user


def _check_password_length(password: str) -> None:
    if len(password) < settings.MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters"
        )


# ============== Member removal ==============
#
# Removing a member rewires everything that points at them before the row
# itself goes. Steps run in this order inside one transaction.


def detach_authored_questions(db: Session, target_id: int, admin_id: int) -> None:
    """Keep the member's discussion questions, without an author."""
    db.execute(
        update(DiscussionQuestion)
        .where(DiscussionQuestion.user_id == target_id)
        .values(user_id=None)
        .execution_options(synchronize_session=False)
    )


def clear_redeemed_codes(db: Session, target_id: int, admin_id: int) -> None:
    """
    Codes the member redeemed lose their redeemer and timestamp.

    They stay redeemed, so the code cannot be registered with again.
    """
    db.execute(
        update(InviteCode)
        .where(InviteCode.used_by_id == target_id)
        .values(used_by_id=None, used_at=None)
        .execution_options(synchronize_session=False)
    )


def delete_unused_created_codes(db: Session, target_id: int, admin_id: int) -> None:
    db.execute(
        delete(InviteCode)
        .where(InviteCode.created_by_id == target_id, InviteCode.redeemed.is_(False))
        .execution_options(synchronize_session=False)
    )


def reassign_created_codes(db: Session, target_id: int, admin_id: int) -> None:
    """Used codes the member issued now belong to the acting admin."""
    db.execute(
        update(InviteCode)
        .where(InviteCode.created_by_id == target_id)
        .values(created_by_id=admin_id)
        .execution_options(synchronize_session=False)
    )


def reassign_submitted_books(db: Session, target_id: int, admin_id: int) -> None:
    db.execute(
        update(Book)
        .where(Book.added_by_id == target_id)
        .values(added_by_id=admin_id)
        .execution_options(synchronize_session=False)
    )


CleanupStep = Callable[[Session, int, int], None]

USER_DELETION_STEPS: list[CleanupStep] = [
    detach_authored_questions,
    clear_redeemed_codes,
    delete_unused_created_codes,
    reassign_created_codes,
    reassign_submitted_books,
]


def delete_user(db: Session, target_id: int, admin: User) -> str:
    """
    Remove a member on behalf of ``admin``.

    Runs every cleanup step, then deletes the user; ratings, the vote and
    notes cascade with it. Either all of it commits or none of it does.

    Raises:
        SelfDeletionError: Admin tried to remove themselves
        NotFound: No such member
        IntegrityError: The database rejected part of the operation
    """
    if target_id == admin.id:
        raise SelfDeletionError()

    user = get_user_or_404(db, target_id)
    name = user.name

    try:
        for step in USER_DELETION_STEPS:
            step(db, target_id, admin.id)
        db.delete(user)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to delete user {target_id}: {e}")
        raise IntegrityError("Failed to delete user") from e

    logger.info(
        f"User {name} deleted by {admin.name}",
        extra={"extra_fields": {"deleted_user_id": target_id}},
    )
    return name


# ============== Passwords and email ==============


def reset_password(db: Session, user_id: int, new_password: str) -> User:
    """Admin-initiated password reset."""
    _check_password_length(new_password)
    user = get_user_or_404(db, user_id)

    user.hashed_password = get_password_hash(new_password)
    db.commit()
    logger.info(f"Password reset for {user.name}")
    return user


def change_password(db: Session, user: User, current_password: str, new_password: str) -> None:
    _check_password_length(new_password)
    if not verify_password(current_password, user.hashed_password):
        raise Forbidden("Current password is incorrect")

    user.hashed_password = get_password_hash(new_password)
    db.commit()


def update_email(db: Session, user: User, email: str) -> User:
    email = normalize_email(email)
    if not email:
        raise ValidationError("Email is required")

    existing = get_user_by_email(db, email)
    if existing and existing.id != user.id:
        raise ConflictError("Email is already in use")

    user.email = email
    db.commit()
    db.refresh(user)
    return user


def get_rating_history(db: Session, user_id: int) -> list[Rating]:
    """A member's ratings, newest first, with the rated book loaded."""
    return (
        db.query(Rating)
        .options(joinedload(Rating.book))
        .filter(Rating.user_id == user_id)
        .order_by(Rating.created_at.desc(), Rating.id.desc())
        .all()
    )
