"""
Backup document shape.

Top-level and collection keys are camelCase (`exportedAt`, `inviteCodes`).
Record fields are snake_case and mirror the table columns, so only files
exported by this service can be restored.
"""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from bookclub.models.book import BookStatus


class _Record(BaseModel):
    class Config:
        from_attributes = True


class UserRecord(_Record):
    id: int
    name: str
    email: str
    hashed_password: str
    is_admin: bool = False
    created_at: datetime


class BookRecord(_Record):
    id: int
    title: str
    author: str
    isbn: str | None = None
    isbn13: str | None = None
    open_library_key: str | None = None
    cover_url: str | None = None
    synopsis: str | None = None
    page_count: int | None = None
    publish_year: int | None = None
    status: BookStatus
    added_by_id: int
    added_at: datetime


class RatingRecord(_Record):
    id: int
    user_id: int
    book_id: int
    rating: float
    created_at: datetime
    updated_at: datetime


class VoteRecord(_Record):
    id: int
    user_id: int
    book_id: int
    created_at: datetime


class InviteCodeRecord(_Record):
    id: int
    code: str
    created_by_id: int
    used_by_id: int | None = None
    used_at: datetime | None = None
    redeemed: bool
    created_at: datetime

    @model_validator(mode="before")
    @classmethod
    def _default_redeemed(cls, data):
        # Without the flag, a code counts as redeemed when it has a redeemer
        if isinstance(data, dict) and "redeemed" not in data:
            data = {**data, "redeemed": data.get("used_by_id") is not None}
        return data


class DiscussionQuestionRecord(_Record):
    id: int
    book_id: int
    user_id: int | None = None
    question: str
    sort_order: int
    created_at: datetime
    updated_at: datetime


class AnnouncementRecord(_Record):
    id: int
    title: str
    location: str
    date_time: datetime
    time_zone: str
    notes: str | None = None
    is_active: bool
    created_at: datetime


class SiteSettingRecord(_Record):
    key: str
    value: str
    updated_at: datetime


class BookNoteRecord(_Record):
    id: int
    user_id: int
    book_id: int
    content: str
    created_at: datetime
    updated_at: datetime


class BackupData(BaseModel):
    users: list[UserRecord] = Field(default_factory=list)
    books: list[BookRecord] = Field(default_factory=list)
    ratings: list[RatingRecord] = Field(default_factory=list)
    votes: list[VoteRecord] = Field(default_factory=list)
    invite_codes: list[InviteCodeRecord] = Field(default_factory=list, alias="inviteCodes")
    discussion_questions: list[DiscussionQuestionRecord] = Field(
        default_factory=list, alias="discussionQuestions"
    )
    announcements: list[AnnouncementRecord] = Field(default_factory=list)
    site_settings: list[SiteSettingRecord] = Field(default_factory=list, alias="siteSettings")
    book_notes: list[BookNoteRecord] = Field(default_factory=list, alias="bookNotes")

    class Config:
        populate_by_name = True


class BackupDocument(BaseModel):
    version: int = Field(..., ge=1)
    exported_at: datetime | None = Field(None, alias="exportedAt")
    data: BackupData

    class Config:
        populate_by_name = True
