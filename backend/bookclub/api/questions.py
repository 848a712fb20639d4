from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from bookclub.core.database import get_db
from bookclub.models.user import User
from bookclub.schemas.question import QuestionResponse, QuestionUpdate
from bookclub.services import auth_service, question_service

router = APIRouter()


@router.patch("/{question_id}", response_model=QuestionResponse)
async def update_question(
    question_id: int,
    data: QuestionUpdate,
    current_user: User = Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    """Edit a question's text or position. Author or admin only."""
    return question_service.update_question(
        db, question_id, current_user, text=data.question, sort_order=data.sort_order
    )


@router.delete("/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_question(
    question_id: int,
    current_user: User = Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
):
    question_service.delete_question(db, question_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
