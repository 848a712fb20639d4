from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bookclub.core.database import get_db
from bookclub.models.user import User
from bookclub.schemas.dashboard import DashboardResponse
from bookclub.services import auth_service, dashboard_service

router = APIRouter()


@router.get("/", response_model=DashboardResponse)
async def get_dashboard(
    current_user: User = Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    """Current reads, the suggestion poll, recent ratings and club totals."""
    return dashboard_service.get_dashboard(db, current_user)
