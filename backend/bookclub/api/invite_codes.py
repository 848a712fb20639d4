from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from bookclub.core.database import get_db
from bookclub.models.user import User
from bookclub.schemas.user import InviteCodeResponse
from bookclub.services import auth_service, invite_service

router = APIRouter()


@router.get("/", response_model=list[InviteCodeResponse])
async def list_invite_codes(
    admin: User = Depends(auth_service.get_current_admin),
    db: Session = Depends(get_db),
):
    return invite_service.list_invite_codes(db)


@router.post("/", response_model=InviteCodeResponse, status_code=status.HTTP_201_CREATED)
async def create_invite_code(
    admin: User = Depends(auth_service.get_current_admin),
    db: Session = Depends(get_db),
):
    return invite_service.create_invite_code(db, admin)


@router.delete("/{invite_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_invite_code(
    invite_id: int,
    admin: User = Depends(auth_service.get_current_admin),
    db: Session = Depends(get_db),
):
    """Delete a code that has not been redeemed yet."""
    invite_service.delete_invite_code(db, invite_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
