import logging
from typing import List

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.crud.exam import exam as crud_exam
from app.crud.exam_attempt import exam_attempt as crud_exam_attempt
from app.crud.user import user as crud_user
from app.models.exam import Exam
from app.models.user import User
from app.schemas.exam import Exam as ExamSchema
from app.schemas.exam import ExamCreate, ExamUpdate, ExamStatistics
from app.schemas.user import UserContext
from app.services.grading import percentage_of
from app.utils.permission import PermissionHelper as permission_helper
from app.core.constants import ExamAttemptStatusEnum

logger = logging.getLogger(__name__)


class ExamService:

    def _get_exam_or_404(self, db: Session, exam_id: int) -> Exam:
        exam = crud_exam.get(db, id=exam_id)
        if not exam:
            raise NotFoundError("Exam not found.")
        return exam

    def _resolve_students(self, db: Session, student_ids: List[int]) -> List[User]:
        unique_ids = list(dict.fromkeys(student_ids))
        students = crud_user.get_students_by_ids(db, ids=unique_ids)
        missing = sorted(set(unique_ids) - {s.id for s in students})
        if missing:
            raise NotFoundError(f"Student(s) not found: {missing}", details={"student_ids": missing})
        return students

    def create_exam(self, db: Session, exam_in: ExamCreate, current_user_context: UserContext) -> Exam:
        permission_helper.require_not_student(current_user_context, "Students cannot create exams.")

        exam_data = exam_in.model_dump(exclude={"assigned_to"})
        exam = Exam(**exam_data, created_by=current_user_context.user.id)
        exam.assigned_students = self._resolve_students(db, exam_in.assigned_to)

        exam = crud_exam.save(db, db_obj=exam)
        logger.info(f"Exam {exam.id} created by user {current_user_context.user.id}")
        return exam

    def get_exam(self, db: Session, exam_id: int, current_user_context: UserContext) -> Exam:
        exam = self._get_exam_or_404(db, exam_id)
        if permission_helper.is_student(current_user_context):
            if not exam.is_assigned(current_user_context.user.id):
                raise NotFoundError("Exam not found.")
        return exam

    def get_all_exams(self, db: Session, current_user_context: UserContext,
                      skip: int = 0, limit: int = 100) -> List[Exam]:
        permission_helper.require_not_student(current_user_context, "Students can only list assigned exams.")
        if permission_helper.is_admin(current_user_context):
            return crud_exam.get_multi(db, skip=skip, limit=limit)
        return crud_exam.get_by_creator(db, user_id=current_user_context.user.id, skip=skip, limit=limit)

    def get_assigned_exams(self, db: Session, current_user_context: UserContext) -> List[Exam]:
        permission_helper.require_student(current_user_context)
        return crud_exam.get_assigned_to_student(db, student_id=current_user_context.user.id)

    def update_exam(self, db: Session, exam_id: int, exam_in: ExamUpdate,
                    current_user_context: UserContext) -> Exam:
        exam = crud_exam.get_for_update(db, id=exam_id)
        if not exam:
            raise NotFoundError("Exam not found.")

        permission_helper.require_exam_owner_or_admin(
            current_user_context, exam, "Not authorized to update this exam."
        )

        update_data = exam_in.model_dump(exclude_unset=True, exclude_none=True)
        assigned_to = update_data.pop("assigned_to", None)
        if assigned_to is not None:
            exam.assigned_students = self._resolve_students(db, assigned_to)

        return crud_exam.update(db, db_obj=exam, obj_in=update_data)

    def delete_exam(self, db: Session, exam_id: int, current_user_context: UserContext) -> ExamSchema:
        exam = self._get_exam_or_404(db, exam_id)
        permission_helper.require_exam_owner_or_admin(
            current_user_context, exam, "Not authorized to delete this exam."
        )

        deleted = ExamSchema.model_validate(exam)
        # Questions, attempts and assignments go with the exam
        db.delete(exam)
        db.commit()
        logger.info(f"Exam {exam_id} deleted by user {current_user_context.user.id}")
        return deleted

    def assign_students(self, db: Session, exam_id: int, student_ids: List[int],
                        current_user_context: UserContext) -> Exam:
        exam = self._get_exam_or_404(db, exam_id)
        permission_helper.require_exam_owner_or_admin(current_user_context, exam)

        assigned = set(exam.assigned_to)
        for student in self._resolve_students(db, student_ids):
            if student.id not in assigned:
                exam.assigned_students.append(student)
                assigned.add(student.id)

        return crud_exam.save(db, db_obj=exam)

    def unassign_students(self, db: Session, exam_id: int, student_ids: List[int],
                          current_user_context: UserContext) -> Exam:
        exam = self._get_exam_or_404(db, exam_id)
        permission_helper.require_exam_owner_or_admin(current_user_context, exam)

        removed = set(student_ids)
        exam.assigned_students = [s for s in exam.assigned_students if s.id not in removed]
        return crud_exam.save(db, db_obj=exam)

    def get_exam_statistics(self, db: Session, exam_id: int,
                            current_user_context: UserContext) -> ExamStatistics:
        exam = self._get_exam_or_404(db, exam_id)
        permission_helper.require_exam_owner_or_admin(current_user_context, exam)

        attempts = crud_exam_attempt.get_all_by_exam(db, exam_id=exam_id)
        submitted = [a for a in attempts if a.status == ExamAttemptStatusEnum.SUBMITTED]
        total_attempted = len(submitted)
        total_passed = len([a for a in submitted if a.is_passed])

        average_score = 0.0
        if total_attempted:
            average_score = round(sum(a.total_obtained_marks or 0 for a in submitted) / total_attempted, 2)

        highest_score = max((a.total_obtained_marks or 0 for a in submitted), default=0.0)

        return ExamStatistics(
            exam_title=exam.title,
            total_assigned=len(exam.assigned_to),
            total_attempted=total_attempted,
            total_passed=total_passed,
            pass_percentage=percentage_of(total_passed, total_attempted),
            average_score=average_score,
            highest_score=highest_score,
            total_questions=exam.total_questions,
            total_marks=exam.total_marks,
        )


exam_service = ExamService()
