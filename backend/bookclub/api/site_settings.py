from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bookclub.core.database import get_db
from bookclub.models.user import User
from bookclub.schemas.site import SiteSettingResponse, SiteSettingUpdate, SiteSettingValue
from bookclub.services import auth_service, site_service

router = APIRouter()


@router.get("/", response_model=SiteSettingValue | list[SiteSettingResponse])
async def get_settings(
    key: str | None = Query(None, max_length=100),
    db: Session = Depends(get_db),
):
    """
    Public site settings.

    With ``?key=`` returns that setting's value (null when unset),
    otherwise every setting.
    """
    if key is not None:
        return SiteSettingValue(value=site_service.get_setting(db, key))
    return [SiteSettingResponse.model_validate(s) for s in site_service.list_settings(db)]


@router.put("/", response_model=SiteSettingResponse)
async def put_setting(
    data: SiteSettingUpdate,
    admin: User = Depends(auth_service.get_current_admin),
    db: Session = Depends(get_db),
):
    return site_service.put_setting(db, data.key, data.value)
