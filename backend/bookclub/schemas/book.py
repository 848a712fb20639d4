from datetime import datetime

from pydantic import BaseModel, Field

from bookclub.models.book import BookStatus
from bookclub.schemas.auth import UserSummary
from bookclub.schemas.question import QuestionResponse


class BookCreate(BaseModel):
    title: str = Field(..., max_length=500)
    author: str = Field(..., max_length=255)
    isbn: str | None = Field(None, max_length=10)
    isbn13: str | None = Field(None, max_length=13)
    cover_url: str | None = Field(None, max_length=500)
    synopsis: str | None = None
    open_library_key: str | None = Field(None, max_length=50)
    page_count: int | None = Field(None, ge=0)
    publish_year: int | None = None
    status: BookStatus = BookStatus.SUGGESTION


class BookUpdate(BaseModel):
    status: BookStatus | None = None
    synopsis: str | None = None


class BookSummary(BaseModel):
    id: int
    title: str
    author: str

    class Config:
        from_attributes = True


class BookResponse(BaseModel):
    id: int
    title: str
    author: str
    isbn: str | None
    isbn13: str | None
    open_library_key: str | None
    cover_url: str | None
    synopsis: str | None
    page_count: int | None
    publish_year: int | None
    status: BookStatus
    added_at: datetime
    added_by: UserSummary | None

    average_rating: float | None = None
    rating_count: int = 0

    class Config:
        from_attributes = True


class BookRating(BaseModel):
    id: int
    rating: float
    created_at: datetime
    user: UserSummary

    class Config:
        from_attributes = True


class BookDetail(BookResponse):
    ratings: list[BookRating]
    questions: list[QuestionResponse]


class CatalogSearchResult(BaseModel):
    """A candidate book from the Open Library catalog."""

    open_library_key: str
    title: str
    author: str
    isbn: str | None = None
    isbn13: str | None = None
    cover_url: str | None = None
    publish_year: int | None = None
    page_count: int | None = None


class EnglishEdition(BaseModel):
    isbn13: str | None = None
    isbn10: str | None = None
    cover_id: int | None = None
