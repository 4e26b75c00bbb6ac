from fastapi import HTTPException, status

from app.core.constants import RoleEnum
from app.core.exceptions import NotAuthorizedError
from app.models.exam import Exam
from app.models.user import User
from app.schemas.user import UserContext


class PermissionHelper:
    @staticmethod
    def is_admin(context: UserContext) -> bool:
        return context.role == RoleEnum.ADMIN

    @staticmethod
    def is_conductor(context: UserContext) -> bool:
        return context.role == RoleEnum.CONDUCTOR

    @staticmethod
    def is_student(context: UserContext) -> bool:
        return context.role == RoleEnum.STUDENT

    @staticmethod
    def is_exam_owner(context: UserContext, exam: Exam) -> bool:
        return exam.created_by == context.user.id

    @staticmethod
    def can_manage_exam(context: UserContext, exam: Exam) -> bool:
        return PermissionHelper.is_exam_owner(context, exam) or PermissionHelper.is_admin(context)

    @staticmethod
    def require_exam_owner_or_admin(context: UserContext, exam: Exam,
                                    error_message: str = "Not authorized to manage this exam."):
        if not PermissionHelper.can_manage_exam(context, exam):
            raise NotAuthorizedError(error_message)

    @staticmethod
    def require_not_student(context: UserContext, error_message: str = "Students cannot perform this action."):
        if PermissionHelper.is_student(context):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=error_message)

    @staticmethod
    def require_student(context: UserContext, error_message: str = "Only students can perform this action."):
        if not PermissionHelper.is_student(context):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=error_message)

    @staticmethod
    def require_admin(context: UserContext, error_message: str = "Only administrators can perform this action."):
        if not PermissionHelper.is_admin(context):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=error_message)

    @staticmethod
    def can_manage_student(context: UserContext, student: User) -> bool:
        if PermissionHelper.is_admin(context):
            return True
        return PermissionHelper.is_conductor(context) and student.examiner_id == context.user.id

    @staticmethod
    def is_same_examiner(student: User, exam: Exam) -> bool:
        """Students with no examiner may join any exam they are assigned to."""
        return student.examiner_id is None or student.examiner_id == exam.created_by
