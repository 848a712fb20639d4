"""
Database seeding script.

Creates the first admin account (from the ADMIN_* settings) and the
welcome invite code, so a fresh deployment can be logged into and can
invite its first members. Does nothing once an admin exists.

Run with: python -m bookclub.scripts.seed_database
"""

from sqlalchemy.orm import Session

from bookclub.core.config import get_settings
from bookclub.core.database import Base, SessionLocal, engine
from bookclub.core.logging import get_logger
from bookclub.models.user import InviteCode, User
from bookclub.services.auth_service import get_password_hash, normalize_email

settings = get_settings()
logger = get_logger(__name__)


def create_tables():
    """Create all database tables."""
    Base.metadata.create_all(bind=engine)


def seed_admin(db: Session) -> User | None:
    """
    Create the admin and the welcome invite code.

    Returns:
        The new admin, or None when an admin already exists
    """
    if db.query(User).filter(User.is_admin.is_(True)).first():
        return None

    admin = User(
        name=settings.ADMIN_NAME,
        email=normalize_email(settings.ADMIN_EMAIL),
        hashed_password=get_password_hash(settings.ADMIN_PASSWORD),
        is_admin=True,
    )
    db.add(admin)
    db.flush()

    code = settings.WELCOME_INVITE_CODE.strip().upper()
    if code and not db.query(InviteCode).filter(InviteCode.code == code).first():
        db.add(InviteCode(code=code, created_by_id=admin.id))

    db.commit()
    db.refresh(admin)
    logger.info(
        f"Seeded admin {admin.name}",
        extra={"extra_fields": {"admin_email": admin.email, "invite_code": code or None}},
    )
    return admin


def main():
    create_tables()
    db = SessionLocal()
    try:
        seed_admin(db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
