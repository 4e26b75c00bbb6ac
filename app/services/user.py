import logging
from typing import List

from sqlalchemy.orm import Session

from app.core.constants import RoleEnum
from app.core.exceptions import ConflictError, NotAuthorizedError, NotFoundError
from app.core.security import get_password_hash
from app.crud.user import user as crud_user
from app.models.user import User
from app.schemas.user import StudentCreate, StudentUpdate, User as UserSchema
from app.schemas.user import UserContext
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)


class StudentService:

    def _get_managed_student(self, db: Session, student_id: int, current_user_context: UserContext) -> User:
        permission_helper.require_not_student(current_user_context, "Students cannot manage students.")
        student = crud_user.get(db, id=student_id)
        if not student or student.role != RoleEnum.STUDENT:
            raise NotFoundError("Student not found")
        if not permission_helper.can_manage_student(current_user_context, student):
            raise NotAuthorizedError("You do not manage this student.")
        return student

    def get_students(self, db: Session, current_user_context: UserContext,
                     skip: int = 0, limit: int = 100) -> List[User]:
        permission_helper.require_not_student(current_user_context, "Students cannot list students.")
        examiner_id = None if permission_helper.is_admin(current_user_context) else current_user_context.user.id
        return crud_user.get_students(db, examiner_id=examiner_id, skip=skip, limit=limit)

    def get_student(self, db: Session, student_id: int, current_user_context: UserContext) -> User:
        return self._get_managed_student(db, student_id, current_user_context)

    def create_student(self, db: Session, student_in: StudentCreate, current_user_context: UserContext) -> User:
        permission_helper.require_not_student(current_user_context, "Students cannot create students.")

        if crud_user.get_by_email(db, email=student_in.email):
            raise ConflictError("Email already in use")
        if crud_user.get_by_registration_number(db, registration_number=student_in.registration_number):
            raise ConflictError("Registration number already exists")

        examiner_id = current_user_context.user.id if permission_helper.is_conductor(current_user_context) else None
        student = User(
            full_name=student_in.full_name,
            email=student_in.email,
            hashed_password=get_password_hash(student_in.password),
            role=RoleEnum.STUDENT,
            registration_number=student_in.registration_number,
            department=student_in.department,
            semester=student_in.semester,
            examiner_id=examiner_id,
        )
        student = crud_user.save(db, db_obj=student)
        logger.info(f"Student {student.id} created by user {current_user_context.user.id}")
        return student

    def update_student(self, db: Session, student_id: int, student_in: StudentUpdate,
                       current_user_context: UserContext) -> User:
        student = self._get_managed_student(db, student_id, current_user_context)

        if student_in.email and student_in.email != student.email:
            if crud_user.get_by_email(db, email=student_in.email):
                raise ConflictError("Email already in use")

        return crud_user.update(db, db_obj=student, obj_in=student_in.model_dump(exclude_unset=True, exclude_none=True))

    def delete_student(self, db: Session, student_id: int, current_user_context: UserContext) -> UserSchema:
        student = self._get_managed_student(db, student_id, current_user_context)
        deleted = UserSchema.model_validate(student)
        db.delete(student)
        db.commit()
        logger.info(f"Student {student_id} deleted by user {current_user_context.user.id}")
        return deleted

    def set_active(self, db: Session, student_id: int, is_active: bool,
                   current_user_context: UserContext) -> User:
        student = self._get_managed_student(db, student_id, current_user_context)
        return crud_user.update(db, db_obj=student, obj_in={"is_active": is_active})


student_service = StudentService()
