import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.core.constants import ExamAttemptStatusEnum
from app.core.exceptions import InvalidStateError, NotAuthorizedError, NotFoundError
from app.crud.exam import exam as crud_exam
from app.crud.exam_attempt import exam_attempt as crud_exam_attempt
from app.crud.question import question as crud_question
from app.crud.question_response import question_response as crud_question_response
from app.models.exam_attempt import ExamAttempt
from app.models.question_response import QuestionResponse
from app.schemas.user import UserContext
from app.services.grading import calculate_score
from app.utils.permission import PermissionHelper as permission_helper
from app.utils.time import utcnow

logger = logging.getLogger(__name__)


class ExamAttemptService:

    def _get_open_attempt(self, db: Session, exam_id: int, student_id: int) -> ExamAttempt:
        attempt = crud_exam_attempt.get_by_exam_and_student(
            db, exam_id=exam_id, student_id=student_id, for_update=True
        )
        if not attempt:
            raise NotFoundError("Exam not started.")

        if attempt.status == ExamAttemptStatusEnum.SUBMITTED:
            raise InvalidStateError("Exam already submitted.")

        return attempt

    def start_attempt(self, db: Session, exam_id: int, current_user_context: UserContext,
                      now: Optional[datetime] = None) -> ExamAttempt:
        permission_helper.require_student(current_user_context, "Only students can start exam attempts.")
        student_id = current_user_context.user.id

        exam = crud_exam.get(db, id=exam_id)
        if not exam:
            raise NotFoundError("Exam not found.")

        if not exam.is_assigned(student_id):
            raise NotAuthorizedError("This exam is not assigned to you.")

        attempt = crud_exam_attempt.get_by_exam_and_student(
            db, exam_id=exam_id, student_id=student_id, for_update=True
        )

        if attempt and attempt.status != ExamAttemptStatusEnum.NOT_STARTED:
            raise InvalidStateError("You have already started this exam.")

        if not attempt:
            attempt = ExamAttempt(exam_id=exam_id, student_id=student_id)

        attempt.status = ExamAttemptStatusEnum.IN_PROGRESS
        attempt.started_at = now or utcnow()
        attempt = crud_exam_attempt.save(db, db_obj=attempt)

        logger.info(f"Student {student_id} started exam {exam_id} (attempt {attempt.id})")
        return attempt

    def save_answer(self, db: Session, exam_id: int, question_id: int, selected_answer: str,
                    current_user_context: UserContext) -> ExamAttempt:
        attempt = self._get_open_attempt(db, exam_id, current_user_context.user.id)

        existing_response = crud_question_response.get_by_attempt_and_question(
            db, attempt_id=attempt.id, question_id=question_id
        )

        if existing_response:
            existing_response.selected_answer = selected_answer
            db.add(existing_response)
        else:
            attempt.responses.append(
                QuestionResponse(question_id=question_id, selected_answer=selected_answer, time_spent=0)
            )

        return crud_exam_attempt.save(db, db_obj=attempt)

    def submit_attempt(self, db: Session, exam_id: int, current_user_context: UserContext,
                       total_time_spent: Optional[int] = None,
                       now: Optional[datetime] = None) -> ExamAttempt:
        attempt = self._get_open_attempt(db, exam_id, current_user_context.user.id)

        exam = crud_exam.get(db, id=exam_id)
        if not exam:
            raise NotFoundError("Exam not found for this attempt.")

        attempt.status = ExamAttemptStatusEnum.SUBMITTED
        attempt.submitted_at = now or utcnow()
        attempt.total_time_spent = total_time_spent or 0

        questions = crud_question.get_by_exam(db, exam_id=exam.id)
        summary = calculate_score(attempt.responses, questions, exam)
        for field, value in summary.model_dump().items():
            setattr(attempt, field, value)

        attempt = crud_exam_attempt.save(db, db_obj=attempt)

        logger.info(
            f"Attempt {attempt.id} submitted: {summary.total_obtained_marks}/{summary.total_score} "
            f"({summary.percentage}%), passed={summary.is_passed}"
        )
        return attempt


exam_attempt_service = ExamAttemptService()
