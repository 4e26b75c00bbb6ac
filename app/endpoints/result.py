from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.schemas.response import APIResponse
from app.utils import deps
from app.schemas.exam_attempt import (
    AnswerSave,
    AttemptSubmit,
    DashboardStatistics,
    ExamAttempt,
    ExamAttemptDetails,
    ExamResultRow,
)
from app.schemas.user import UserContext
from app.services.exam_attempt import exam_attempt_service
from app.services.report import report_service

router = APIRouter()

# --- Attempt ---

@router.post("/exams/{exam_id}/start", response_model=APIResponse[ExamAttempt], status_code=status.HTTP_201_CREATED)
async def start_exam_attempt(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    attempt = exam_attempt_service.start_attempt(db, exam_id=exam_id, current_user_context=context)
    return APIResponse(message="Exam started successfully", data=ExamAttempt.model_validate(attempt))


@router.post("/exams/{exam_id}/answers", response_model=APIResponse[ExamAttempt])
async def save_answer(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_id: int,
    answer_in: AnswerSave,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    attempt = exam_attempt_service.save_answer(
        db,
        exam_id=exam_id,
        question_id=answer_in.question_id,
        selected_answer=answer_in.selected_answer,
        current_user_context=context,
    )
    return APIResponse(message="Answer saved successfully", data=ExamAttempt.model_validate(attempt))


@router.post("/exams/{exam_id}/submit", response_model=APIResponse[ExamAttempt])
async def submit_exam_attempt(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_id: int,
    submit_in: AttemptSubmit,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    attempt = exam_attempt_service.submit_attempt(
        db, exam_id=exam_id, total_time_spent=submit_in.total_time_spent, current_user_context=context
    )
    return APIResponse(message="Exam submitted successfully", data=ExamAttempt.model_validate(attempt))


# --- Reports ---

@router.get("/exams/{exam_id}/me", response_model=APIResponse[ExamAttemptDetails])
async def get_my_exam_result(
    *,
    db: Session = Depends(deps.get_db),
    exam_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    result = report_service.get_my_result(db, exam_id=exam_id, current_user_context=context)
    return APIResponse(message="Result retrieved successfully", data=result)


@router.get("/me", response_model=APIResponse[List[ExamAttempt]])
async def get_my_results(
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    attempts = report_service.get_my_results(db, current_user_context=context)
    return APIResponse(message="Results retrieved successfully", data=[ExamAttempt.model_validate(a) for a in attempts])


@router.get("/dashboard", response_model=APIResponse[DashboardStatistics])
async def get_dashboard_statistics(
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    stats = report_service.get_dashboard_statistics(db, current_user_context=context)
    return APIResponse(message="Dashboard statistics retrieved successfully", data=stats)


@router.get("/exams/{exam_id}", response_model=APIResponse[List[ExamResultRow]])
async def get_exam_results(
    *,
    db: Session = Depends(deps.get_db),
    exam_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    rows = report_service.get_exam_results(db, exam_id=exam_id, current_user_context=context)
    return APIResponse(message="Exam results retrieved successfully", data=rows)


@router.get("/exams/{exam_id}/students/{student_id}", response_model=APIResponse[ExamAttemptDetails])
async def get_student_result_details(
    *,
    db: Session = Depends(deps.get_db),
    exam_id: int,
    student_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    details = report_service.get_student_result_details(
        db, exam_id=exam_id, student_id=student_id, current_user_context=context
    )
    return APIResponse(message="Result details retrieved successfully", data=details)
