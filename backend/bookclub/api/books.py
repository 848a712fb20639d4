from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from bookclub.core.database import get_db
from bookclub.core.exceptions import NotFound
from bookclub.models.book import BookStatus
from bookclub.models.user import User
from bookclub.schemas.book import (
    BookCreate,
    BookDetail,
    BookResponse,
    BookUpdate,
    CatalogSearchResult,
    EnglishEdition,
)
from bookclub.schemas.question import QuestionCreate, QuestionReorder, QuestionResponse
from bookclub.schemas.site import CurrentNote, NoteUpdate
from bookclub.services import auth_service, book_service, question_service, site_service
from bookclub.services.external_apis import OpenLibraryClient, get_open_library_client

router = APIRouter()


@router.get("/", response_model=list[BookResponse])
async def list_books(
    book_status: BookStatus | None = Query(None, alias="status", description="Only books with this status"),
    current_user: User = Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    """All books, newest first, with rating averages."""
    return book_service.list_books(db, status=book_status)


@router.post("/", response_model=BookResponse, status_code=status.HTTP_201_CREATED)
async def create_book(
    data: BookCreate,
    current_user: User = Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    """Add a book. Members' books always start as suggestions."""
    book = book_service.create_book(db, data, current_user)
    return book_service.get_book_response(db, book.id)


@router.get("/search", response_model=list[CatalogSearchResult])
async def search_catalog(
    q: str = Query(..., min_length=2, description="Title, author or ISBN"),
    current_user: User = Depends(auth_service.get_current_user),
    metadata: OpenLibraryClient = Depends(get_open_library_client),
):
    """Search Open Library for a book to add."""
    return await metadata.search_books(q)


@router.get("/english-edition", response_model=EnglishEdition)
async def english_edition(
    work_key: str = Query(..., min_length=1),
    current_user: User = Depends(auth_service.get_current_user),
    metadata: OpenLibraryClient = Depends(get_open_library_client),
):
    """ISBNs and cover of a work's English edition."""
    edition = await metadata.get_english_edition(work_key)
    if edition is None:
        raise NotFound("No edition with an ISBN found")
    return edition


@router.get("/{book_id}", response_model=BookDetail)
async def get_book(
    book_id: int,
    current_user: User = Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
    metadata: OpenLibraryClient = Depends(get_open_library_client),
):
    return await book_service.get_book_detail(db, book_id, metadata)


@router.patch("/{book_id}", response_model=BookResponse)
async def update_book(
    book_id: int,
    data: BookUpdate,
    current_user: User = Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    """
    Update status or synopsis.

    Status changes are admin-only. Making a book the current read clears
    every member's vote.
    """
    book_service.update_book(db, book_id, data, current_user)
    return book_service.get_book_response(db, book_id)


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_book(
    book_id: int,
    current_user: User = Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    book_service.delete_book(db, book_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============== Private notes ==============


@router.get("/{book_id}/notes", response_model=CurrentNote)
async def get_note(
    book_id: int,
    current_user: User = Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    return {"note": site_service.get_note(db, current_user, book_id)}


@router.put("/{book_id}/notes", response_model=CurrentNote)
async def save_note(
    book_id: int,
    data: NoteUpdate,
    current_user: User = Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    """Save the member's note. Empty content deletes it."""
    return {"note": site_service.save_note(db, current_user, book_id, data.content)}


# ============== Discussion questions ==============


@router.get("/{book_id}/questions", response_model=list[QuestionResponse])
async def list_questions(
    book_id: int,
    current_user: User = Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    return question_service.list_questions(db, book_id)


@router.post(
    "/{book_id}/questions",
    response_model=QuestionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_question(
    book_id: int,
    data: QuestionCreate,
    admin: User = Depends(auth_service.get_current_admin),
    db: Session = Depends(get_db),
):
    return question_service.create_question(db, book_id, data.question, admin)


@router.put("/{book_id}/questions/reorder", response_model=list[QuestionResponse])
async def reorder_questions(
    book_id: int,
    data: QuestionReorder,
    admin: User = Depends(auth_service.get_current_admin),
    db: Session = Depends(get_db),
):
    """Set the order of all of a book's questions at once."""
    return question_service.reorder_questions(db, book_id, data.question_ids)
