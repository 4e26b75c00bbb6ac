from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.schemas.response import APIResponse
from app.utils import deps
from app.schemas.user import StudentCreate, StudentUpdate, User, UserContext
from app.services.user import student_service

router = APIRouter()

@router.get("/", response_model=APIResponse[List[User]])
async def get_students(
    db: Session = Depends(deps.get_db),
    context: UserContext = Depends(deps.get_current_user_with_context),
    skip: int = 0,
    limit: int = 100
):
    students = student_service.get_students(db, current_user_context=context, skip=skip, limit=limit)
    return APIResponse(message="Students retrieved successfully", data=[User.model_validate(s) for s in students])


@router.post("/", response_model=APIResponse[User], status_code=status.HTTP_201_CREATED)
async def create_student(
    *,
    db: Session = Depends(deps.get_transactional_db),
    student_in: StudentCreate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    student = student_service.create_student(db, student_in=student_in, current_user_context=context)
    return APIResponse(message="Student created successfully", data=User.model_validate(student))


@router.get("/{student_id}", response_model=APIResponse[User])
async def get_student(
    *,
    db: Session = Depends(deps.get_db),
    student_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    student = student_service.get_student(db, student_id=student_id, current_user_context=context)
    return APIResponse(message="Student retrieved successfully", data=User.model_validate(student))


@router.put("/{student_id}", response_model=APIResponse[User])
async def update_student(
    *,
    db: Session = Depends(deps.get_transactional_db),
    student_id: int,
    student_in: StudentUpdate,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    student = student_service.update_student(db, student_id=student_id, student_in=student_in, current_user_context=context)
    return APIResponse(message="Student updated successfully", data=User.model_validate(student))


@router.delete("/{student_id}", response_model=APIResponse[User])
async def delete_student(
    *,
    db: Session = Depends(deps.get_transactional_db),
    student_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    deleted = student_service.delete_student(db, student_id=student_id, current_user_context=context)
    return APIResponse(message="Student deleted successfully", data=deleted)


@router.post("/{student_id}/activate", response_model=APIResponse[User])
async def activate_student(
    *,
    db: Session = Depends(deps.get_transactional_db),
    student_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    student = student_service.set_active(db, student_id=student_id, is_active=True, current_user_context=context)
    return APIResponse(message="Student activated successfully", data=User.model_validate(student))


@router.post("/{student_id}/deactivate", response_model=APIResponse[User])
async def deactivate_student(
    *,
    db: Session = Depends(deps.get_transactional_db),
    student_id: int,
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    student = student_service.set_active(db, student_id=student_id, is_active=False, current_user_context=context)
    return APIResponse(message="Student deactivated successfully", data=User.model_validate(student))
