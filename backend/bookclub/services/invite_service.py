"""
Invite code lifecycle.

A code starts unused, is redeemed exactly once during registration, and is
immutable from then on. Only unused codes can be deleted.
"""

import secrets
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.orm import Session, joinedload

from bookclub.core.config import get_settings
from bookclub.core.exceptions import (
    CodeGenerationExhausted,
    ConflictError,
    InvalidStateError,
    NotFound,
    ValidationError,
)
from bookclub.core.logging import get_logger
from bookclub.models.user import InviteCode, User

settings = get_settings()
logger = get_logger(__name__)


def generate_code() -> str:
    """Eight uppercase hex characters from four random bytes."""
    return secrets.token_hex(4).upper()


def code_exists(db: Session, code: str) -> bool:
    return db.query(InviteCode.id).filter(InviteCode.code == code).first() is not None


def create_invite_code(db: Session, admin: User, max_attempts: int | None = None) -> InviteCode:
    """
    Issue a new unused invite code.

    Collisions are retried with a fresh value, up to ``max_attempts``
    (``INVITE_CODE_MAX_ATTEMPTS`` by default).

    Raises:
        CodeGenerationExhausted: No unused value found within the cap
    """
    attempts = max_attempts or settings.INVITE_CODE_MAX_ATTEMPTS

    for _ in range(attempts):
        code = generate_code()
        if not code_exists(db, code):
            break
    else:
        logger.error(f"No unique invite code after {attempts} attempts")
        raise CodeGenerationExhausted()

    invite = InviteCode(code=code, created_by_id=admin.id)
    db.add(invite)
    db.commit()
    db.refresh(invite)

    logger.info(f"Invite code {invite.code} created by {admin.name}")
    return invite


def list_invite_codes(db: Session) -> list[InviteCode]:
    return (
        db.query(InviteCode)
        .options(joinedload(InviteCode.created_by), joinedload(InviteCode.used_by))
        .order_by(InviteCode.created_at.desc(), InviteCode.id.desc())
        .all()
    )


def delete_invite_code(db: Session, invite_id: int) -> None:
    invite = db.query(InviteCode).filter(InviteCode.id == invite_id).first()
    if not invite:
        raise NotFound("Invite code not found")

    if invite.is_used:
        raise InvalidStateError("Cannot delete a used invite code")

    db.delete(invite)
    db.commit()


def get_redeemable_code(db: Session, code: str) -> InviteCode:
    """
    Find a code that can still be redeemed.

    Raises:
        ValidationError: No such code
        ConflictError: Code already used
    """
    invite = db.query(InviteCode).filter(InviteCode.code == code).first()
    if not invite:
        raise ValidationError("Invalid invite code")
    if invite.is_used:
        raise ConflictError("Invite code has already been used")
    return invite


def redeem(db: Session, invite: InviteCode, user: User) -> None:
    """
    Mark ``invite`` as redeemed by ``user`` inside the caller's transaction.

    The update is conditional on the code still being unused, so two
    registrations racing for the same code cannot both succeed.
    """
    result = db.execute(
        update(InviteCode)
        .where(InviteCode.id == invite.id, InviteCode.redeemed.is_(False))
        .values(used_by_id=user.id, used_at=datetime.utcnow(), redeemed=True)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise ConflictError("Invite code has already been used")

    db.expire(invite)
