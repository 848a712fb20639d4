from datetime import datetime

from pydantic import BaseModel, Field, computed_field

from bookclub.services.spoilers import parse_spoilers


class QuestionCreate(BaseModel):
    question: str


class QuestionUpdate(BaseModel):
    question: str | None = None
    sort_order: int | None = None


class QuestionReorder(BaseModel):
    question_ids: list[int] = Field(..., min_length=1)


class SpoilerSegment(BaseModel):
    text: str
    spoiler: bool = False


class QuestionResponse(BaseModel):
    id: int
    book_id: int
    user_id: int | None
    question: str
    sort_order: int
    created_at: datetime

    class Config:
        from_attributes = True

    @computed_field
    @property
    def segments(self) -> list[SpoilerSegment]:
        return [
            SpoilerSegment(text=text, spoiler=spoiler)
            for text, spoiler in parse_spoilers(self.question)
        ]
