"""
Admin endpoints: membership and whole-site backups.
"""

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from bookclub.core.database import get_db
from bookclub.models.user import User
from bookclub.schemas.user import PasswordReset, UserContact
from bookclub.services import auth_service, backup_service, user_service

router = APIRouter()


# ============== Members ==============


@router.get("/users", response_model=list[UserContact])
async def list_users(
    admin: User = Depends(auth_service.get_current_admin),
    db: Session = Depends(get_db),
):
    return user_service.list_users(db)


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: int,
    admin: User = Depends(auth_service.get_current_admin),
    db: Session = Depends(get_db),
):
    """
    Remove a member.

    Their ratings, vote and notes go with them. Books they added and used
    invite codes they issued are handed to the acting admin; their
    discussion questions stay, without an author.
    """
    name = user_service.delete_user(db, user_id, admin)
    return {"message": f"Deleted {name}"}


@router.put("/users/{user_id}/password")
async def reset_password(
    user_id: int,
    data: PasswordReset,
    admin: User = Depends(auth_service.get_current_admin),
    db: Session = Depends(get_db),
):
    user = user_service.reset_password(db, user_id, data.password)
    return {"message": f"Password reset for {user.name}"}


# ============== Backups ==============


@router.get("/backup")
async def download_backup(
    admin: User = Depends(auth_service.get_current_admin),
    db: Session = Depends(get_db),
):
    """Download every table as one JSON file."""
    return JSONResponse(
        content=backup_service.export_backup(db),
        headers={
            "Content-Disposition": f'attachment; filename="{backup_service.backup_filename()}"'
        },
    )


@router.post("/backup")
async def restore_backup(
    document: dict = Body(...),
    admin: User = Depends(auth_service.get_current_admin),
    db: Session = Depends(get_db),
):
    """
    Replace ALL data with the contents of a backup file.

    Runs as a single transaction; on any failure nothing is changed.
    """
    restored = backup_service.restore_backup(db, document)
    return {"message": "Backup restored", "restored": restored}
