from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.schemas.response import APIResponse
from app.utils import deps
from app.schemas.question import (
    Question,
    QuestionBulkCreate,
    QuestionCreate,
    QuestionForStudent,
    QuestionUpdate,
)
from app.schemas.user import UserContext
from app.services.question import question_service

router = APIRouter()

@router.get("/exam/{exam_id}", response_model=APIResponse[List[Question]])
async def get_exam_questions(
    *,
    db: Session = Depends(deps.get_db),
    exam_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    questions = question_service.get_questions_by_exam(db, exam_id=exam_id, current_user_context=context)
    return APIResponse(message="Questions retrieved successfully", data=[Question.model_validate(q) for q in questions])


@router.post("/", response_model=APIResponse[Question], status_code=status.HTTP_201_CREATED)
async def create_question(
    *,
    db: Session = Depends(deps.get_transactional_db),
    question_in: QuestionCreate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    new_question = question_service.create_question(db, question_in=question_in, current_user_context=context)
    return APIResponse(message="Question created successfully", data=Question.model_validate(new_question))


@router.post("/bulk", response_model=APIResponse[List[Question]], status_code=status.HTTP_201_CREATED)
async def create_questions(
    *,
    db: Session = Depends(deps.get_transactional_db),
    bulk_in: QuestionBulkCreate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    questions = question_service.create_questions(db, bulk_in=bulk_in, current_user_context=context)
    return APIResponse(message=f"{len(questions)} questions created successfully", data=[Question.model_validate(q) for q in questions])


@router.get("/{question_id}/student", response_model=APIResponse[QuestionForStudent])
async def get_question_for_student(
    *,
    db: Session = Depends(deps.get_db),
    question_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    question = question_service.get_question_for_student(db, question_id=question_id, current_user_context=context)
    return APIResponse(message="Question retrieved successfully", data=QuestionForStudent.model_validate(question))


@router.get("/{question_id}", response_model=APIResponse[Question])
async def get_question(
    *,
    db: Session = Depends(deps.get_db),
    question_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    question = question_service.get_question(db, question_id=question_id, current_user_context=context)
    return APIResponse(message="Question retrieved successfully", data=Question.model_validate(question))


@router.put("/{question_id}", response_model=APIResponse[Question])
async def update_question(
    *,
    db: Session = Depends(deps.get_transactional_db),
    question_id: int,
    question_in: QuestionUpdate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    updated_question = question_service.update_question(db, question_id=question_id, question_in=question_in, current_user_context=context)
    return APIResponse(message="Question updated successfully", data=Question.model_validate(updated_question))


@router.delete("/{question_id}", response_model=APIResponse[Question])
async def delete_question(
    *,
    db: Session = Depends(deps.get_transactional_db),
    question_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    deleted_question = question_service.delete_question(db, question_id=question_id, current_user_context=context)
    return APIResponse(message="Question deleted successfully", data=deleted_question)
