from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bookclub.core.database import get_db
from bookclub.models.user import User
from bookclub.schemas.site import ActiveAnnouncement, AnnouncementCreate, AnnouncementResponse
from bookclub.services import auth_service, site_service

router = APIRouter()


@router.get("/", response_model=ActiveAnnouncement)
async def get_announcement(
    current_user: User = Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    """The next meeting, if one has been announced."""
    return {"announcement": site_service.get_active_announcement(db)}


@router.post("/", response_model=AnnouncementResponse)
async def publish_announcement(
    data: AnnouncementCreate,
    admin: User = Depends(auth_service.get_current_admin),
    db: Session = Depends(get_db),
):
    """Publish a meeting announcement, replacing the active one."""
    return site_service.publish_announcement(db, data)


@router.delete("/")
async def take_down_announcement(
    admin: User = Depends(auth_service.get_current_admin),
    db: Session = Depends(get_db),
):
    site_service.deactivate_announcement(db)
    return {"message": "Announcement removed"}
