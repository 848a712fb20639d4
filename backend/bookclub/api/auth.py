from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from bookclub.core.database import get_db
from bookclub.core.exceptions import Unauthenticated
from bookclub.models.user import User
from bookclub.schemas.auth import RegisterRequest, Token, UserResponse
from bookclub.services import auth_service

router = APIRouter()


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """Register with an unused invite code."""
    return auth_service.register_user(db, data)


@router.post("/login", response_model=Token)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    """
    Authenticate and return a JWT.

    The ``username`` form field takes either an email or a member name.
    """
    user = auth_service.authenticate_user(db, form_data.username, form_data.password)
    if not user:
        raise Unauthenticated("Incorrect email/name or password")

    access_token = auth_service.create_access_token(data={"sub": str(user.id)})
    return {"access_token": access_token, "token_type": "bearer"}


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(auth_service.get_current_user)):
    return current_user
