"""
Authentication service.

Password hashing, JWT access tokens, the current-user dependencies and
invite-gated registration.
"""

from datetime import datetime, timedelta

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bookclub.core.config import get_settings
from bookclub.core.database import get_db
from bookclub.core.exceptions import ConflictError, Forbidden, IntegrityError, Unauthenticated
from bookclub.core.logging import get_logger, user_id_var
from bookclub.models.user import User
from bookclub.schemas.auth import RegisterRequest
from bookclub.services import invite_service

settings = get_settings()
logger = get_logger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_PREFIX}/auth/login", auto_error=False
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user(db: Session, user_id: int) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def get_user_by_login(db: Session, login: str) -> User | None:
    """Look a member up by email when the login contains '@', else by name."""
    login = login.strip()
    if "@" in login:
        return get_user_by_email(db, login)
    return db.query(User).filter(User.name == login).first()


def authenticate_user(db: Session, login: str, password: str) -> User | None:
    """Return the user if the credentials match, None otherwise."""
    if not login or not password:
        return None

    user = get_user_by_login(db, login)
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    to_encode = data.copy()
    expire = datetime.utcnow() + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode["exp"] = expire
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


async def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    FastAPI dependency resolving the bearer token to a member.

    Must stay async: a sync dependency runs in a worker thread, and the
    user id set there for logging would not reach the route.
    """
    if not token:
        raise Unauthenticated()

    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        user_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        raise Unauthenticated("Could not validate credentials") from None

    user = get_user(db, user_id)
    if not user:
        raise Unauthenticated("Could not validate credentials")

    user_id_var.set(user.id)
    return user


async def get_current_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise Forbidden("Admin access required")
    return current_user


def register_user(db: Session, data: RegisterRequest) -> User:
    """
    Create a member and redeem their invite code in one transaction.

    Raises:
        ConflictError: Email already registered, or code already used
        ValidationError: Code does not exist
    """
    email = normalize_email(data.email)
    if get_user_by_email(db, email):
        raise ConflictError("Email already registered")

    invite = invite_service.get_redeemable_code(db, data.invite_code.strip())

    user = User(
        name=data.name.strip(),
        email=email,
        hashed_password=get_password_hash(data.password),
        is_admin=False,
    )

    try:
        db.add(user)
        db.flush()
        invite_service.redeem(db, invite, user)
        db.commit()
    except ConflictError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Registration failed for {email}: {e}")
        raise IntegrityError("Registration failed") from e

    db.refresh(user)
    logger.info(
        f"Registered {user.name}",
        extra={"extra_fields": {"new_user_id": user.id, "invite_code_id": invite.id}},
    )
    return user
