from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.schemas.response import APIResponse
from app.utils import deps
from app.schemas.exam import (
    Exam,
    ExamAccessRequest,
    ExamAccessView,
    ExamCodeInfo,
    ExamCreate,
    ExamSchedule,
    ExamStatistics,
    ExamUpdate,
    StudentAssignment,
)
from app.schemas.user import UserContext
from app.services.exam import exam_service
from app.services.exam_lifecycle import exam_lifecycle_service

router = APIRouter()

@router.post("/", response_model=APIResponse[Exam], status_code=status.HTTP_201_CREATED)
async def create_exam(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_in: ExamCreate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    new_exam = exam_service.create_exam(db, exam_in=exam_in, current_user_context=context)
    return APIResponse(message="Exam created successfully", data=Exam.model_validate(new_exam))


@router.get("/", response_model=APIResponse[List[Exam]])
async def get_all_exams(
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(deps.get_current_user_with_context),
    skip: int = 0,
    limit: int = 100
):
    exams = exam_service.get_all_exams(db, current_user_context=context, skip=skip, limit=limit)
    return APIResponse(message="Exams retrieved successfully", data=[Exam.model_validate(e) for e in exams])


@router.get("/assigned", response_model=APIResponse[List[Exam]])
async def get_assigned_exams(
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    exams = exam_service.get_assigned_exams(db, current_user_context=context)
    return APIResponse(message="Assigned exams retrieved successfully", data=[Exam.model_validate(e) for e in exams])


@router.post("/validate-access", response_model=APIResponse[ExamAccessView])
async def validate_exam_access(
    *,
    db: Session = Depends(deps.get_db),
    access_in: ExamAccessRequest,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    exam = exam_lifecycle_service.validate_exam_access(db, exam_code=access_in.exam_code, current_user_context=context)
    return APIResponse(message="Access granted", data=exam)


@router.get("/{exam_id}", response_model=APIResponse[Exam])
async def get_exam(
    *,
    db: Session = Depends(deps.get_db),
    exam_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    exam = exam_service.get_exam(db, exam_id=exam_id, current_user_context=context)
    return APIResponse(message="Exam retrieved successfully", data=Exam.model_validate(exam))


@router.put("/{exam_id}", response_model=APIResponse[Exam])
async def update_exam(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_id: int,
    exam_in: ExamUpdate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    updated_exam = exam_service.update_exam(db, exam_id=exam_id, exam_in=exam_in, current_user_context=context)
    return APIResponse(message="Exam updated successfully", data=Exam.model_validate(updated_exam))


@router.delete("/{exam_id}", response_model=APIResponse[Exam])
async def delete_exam(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    deleted_exam = exam_service.delete_exam(db, exam_id=exam_id, current_user_context=context)
    return APIResponse(message="Exam deleted successfully", data=deleted_exam)


@router.post("/{exam_id}/assign", response_model=APIResponse[Exam])
async def assign_students(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_id: int,
    assignment: StudentAssignment,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    exam = exam_service.assign_students(db, exam_id=exam_id, student_ids=assignment.student_ids, current_user_context=context)
    return APIResponse(message="Students assigned successfully", data=Exam.model_validate(exam))


@router.post("/{exam_id}/unassign", response_model=APIResponse[Exam])
async def unassign_students(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_id: int,
    assignment: StudentAssignment,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    exam = exam_service.unassign_students(db, exam_id=exam_id, student_ids=assignment.student_ids, current_user_context=context)
    return APIResponse(message="Students unassigned successfully", data=Exam.model_validate(exam))


# --- Lifecycle ---

@router.post("/{exam_id}/schedule", response_model=APIResponse[Exam])
async def schedule_exam(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_id: int,
    schedule_in: ExamSchedule,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    exam = exam_lifecycle_service.schedule_exam(
        db,
        exam_id=exam_id,
        scheduled_start_time=schedule_in.scheduled_start_time,
        scheduled_end_time=schedule_in.scheduled_end_time,
        current_user_context=context,
    )
    return APIResponse(message="Exam scheduled successfully", data=Exam.model_validate(exam))


@router.post("/{exam_id}/generate-code", response_model=APIResponse[ExamCodeInfo])
async def generate_exam_code(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    code_info = exam_lifecycle_service.generate_exam_code(db, exam_id=exam_id, current_user_context=context)
    return APIResponse(message="Exam code generated successfully", data=code_info)


@router.post("/{exam_id}/start", response_model=APIResponse[Exam])
async def start_exam(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    exam = exam_lifecycle_service.start_exam(db, exam_id=exam_id, current_user_context=context)
    return APIResponse(message="Exam started successfully", data=Exam.model_validate(exam))


@router.post("/{exam_id}/end", response_model=APIResponse[Exam])
async def end_exam(
    *,
    db: Session = Depends(deps.get_transactional_db),
    exam_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    exam = exam_lifecycle_service.end_exam(db, exam_id=exam_id, current_user_context=context)
    return APIResponse(message="Exam ended successfully", data=Exam.model_validate(exam))


@router.get("/{exam_id}/statistics", response_model=APIResponse[ExamStatistics])
async def get_exam_statistics(
    *,
    db: Session = Depends(deps.get_db),
    exam_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    stats = exam_service.get_exam_statistics(db, exam_id=exam_id, current_user_context=context)
    return APIResponse(message="Exam statistics retrieved successfully", data=stats)
