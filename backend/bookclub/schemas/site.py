from datetime import datetime

from pydantic import BaseModel, Field


class AnnouncementCreate(BaseModel):
    title: str | None = Field(None, max_length=255)
    location: str = Field(..., max_length=500)
    date_time: datetime
    time_zone: str | None = Field(None, max_length=64)
    notes: str | None = None


class AnnouncementResponse(BaseModel):
    id: int
    title: str
    location: str
    date_time: datetime
    time_zone: str
    notes: str | None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ActiveAnnouncement(BaseModel):
    announcement: AnnouncementResponse | None


class SiteSettingUpdate(BaseModel):
    key: str = Field(..., max_length=100)
    value: str = ""


class SiteSettingResponse(BaseModel):
    key: str
    value: str

    class Config:
        from_attributes = True


class SiteSettingValue(BaseModel):
    value: str | None


class NoteUpdate(BaseModel):
    content: str | None = None


class NoteResponse(BaseModel):
    id: int
    book_id: int
    content: str
    updated_at: datetime

    class Config:
        from_attributes = True


class CurrentNote(BaseModel):
    note: NoteResponse | None
