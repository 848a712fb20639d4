"""
Discussion questions and their manual ordering.
"""

from sqlalchemy import func
from sqlalchemy.orm import Session

from bookclub.core.exceptions import Forbidden, NotFound, PartialSetError, ValidationError
from bookclub.models.book import Book, DiscussionQuestion
from bookclub.models.user import User


def list_questions(db: Session, book_id: int) -> list[DiscussionQuestion]:
    return (
        db.query(DiscussionQuestion)
        .filter(DiscussionQuestion.book_id == book_id)
        .order_by(DiscussionQuestion.sort_order.asc(), DiscussionQuestion.id.asc())
        .all()
    )


def _clean_text(text: str) -> str:
    text = text.strip()
    if not text:
        raise ValidationError("Question is required")
    return text


def next_sort_order(db: Session, book_id: int) -> int:
    """One past the book's highest sort order, or 0 for its first question."""
    highest = (
        db.query(func.max(DiscussionQuestion.sort_order))
        .filter(DiscussionQuestion.book_id == book_id)
        .scalar()
    )
    return 0 if highest is None else highest + 1


def create_question(db: Session, book_id: int, text: str, author: User) -> DiscussionQuestion:
    text = _clean_text(text)

    if not db.query(Book.id).filter(Book.id == book_id).first():
        raise NotFound("Book not found")

    question = DiscussionQuestion(
        book_id=book_id,
        user_id=author.id,
        question=text,
        sort_order=next_sort_order(db, book_id),
    )
    db.add(question)
    db.commit()
    db.refresh(question)
    return question


def _get_editable(db: Session, question_id: int, user: User) -> DiscussionQuestion:
    question = db.query(DiscussionQuestion).filter(DiscussionQuestion.id == question_id).first()
    if not question:
        raise NotFound("Question not found")
    if not user.is_admin and question.user_id != user.id:
        raise Forbidden("You can only change your own questions")
    return question


def update_question(
    db: Session,
    question_id: int,
    user: User,
    text: str | None = None,
    sort_order: int | None = None,
) -> DiscussionQuestion:
    question = _get_editable(db, question_id, user)

    if text is not None:
        question.question = _clean_text(text)
    if sort_order is not None:
        question.sort_order = sort_order

    db.commit()
    db.refresh(question)
    return question


def delete_question(db: Session, question_id: int, user: User) -> None:
    question = _get_editable(db, question_id, user)
    db.delete(question)
    db.commit()


def reorder_questions(db: Session, book_id: int, question_ids: list[int]) -> list[DiscussionQuestion]:
    """
    Apply a full manual ordering to a book's questions.

    ``question_ids`` must name every question of the book exactly once and
    nothing else; otherwise nothing is changed.

    Raises:
        NotFound: No such book
        PartialSetError: The ids are a subset, contain duplicates, or
            include questions from another book
    """
    if not db.query(Book.id).filter(Book.id == book_id).first():
        raise NotFound("Book not found")

    questions = list_questions(db, book_id)
    by_id = {q.id: q for q in questions}

    if len(question_ids) != len(set(question_ids)) or set(question_ids) != set(by_id):
        raise PartialSetError(
            "Question ids must list every question of this book exactly once"
        )

    for index, question_id in enumerate(question_ids):
        by_id[question_id].sort_order = index

    db.commit()
    return list_questions(db, book_id)
