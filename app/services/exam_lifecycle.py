import logging
import secrets
import string
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import ExamStatusEnum
from app.core.exceptions import (
    InvalidStateError,
    NotAuthorizedError,
    NotFoundError,
    PreconditionFailedError,
)
from app.crud.exam import exam as crud_exam
from app.crud.user import user as crud_user
from app.models.exam import Exam
from app.schemas.exam import ExamAccessView, ExamCodeInfo
from app.schemas.user import UserContext
from app.utils.permission import PermissionHelper as permission_helper
from app.utils.time import to_utc_naive, utcnow, whole_minutes_between

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
SCHEDULABLE_STATUSES = (ExamStatusEnum.CREATED, ExamStatusEnum.SCHEDULED)
CODE_LOCKED_STATUSES = (ExamStatusEnum.ACTIVE, ExamStatusEnum.COMPLETED)


class ExamLifecycleService:
    """Time-gated transitions of an exam: schedule, code, start, end, join."""

    def _get_managed_exam(self, db: Session, exam_id: int, current_user_context: UserContext) -> Exam:
        exam = crud_exam.get_for_update(db, id=exam_id)
        if not exam:
            raise NotFoundError("Exam not found.")
        permission_helper.require_exam_owner_or_admin(current_user_context, exam)
        return exam

    def _new_code(self) -> str:
        return "".join(secrets.choice(CODE_ALPHABET) for _ in range(settings.EXAM_CODE_LENGTH))

    def generate_unique_code(self, db: Session) -> str:
        code = self._new_code()
        while crud_exam.code_exists(db, exam_code=code):
            logger.info("Exam code collision, regenerating")
            code = self._new_code()
        return code

    def schedule_exam(self, db: Session, exam_id: int, scheduled_start_time: datetime,
                      current_user_context: UserContext,
                      scheduled_end_time: Optional[datetime] = None,
                      now: Optional[datetime] = None) -> Exam:
        exam = self._get_managed_exam(db, exam_id, current_user_context)
        now = now or utcnow()
        start = to_utc_naive(scheduled_start_time)
        end = to_utc_naive(scheduled_end_time)

        if exam.exam_status not in SCHEDULABLE_STATUSES:
            raise InvalidStateError(f"Cannot schedule an exam that is {exam.exam_status.value}.")

        if start <= now:
            raise PreconditionFailedError("Scheduled start time must be in the future.")

        if end is not None and end <= start:
            raise PreconditionFailedError("End time must be after start time.")

        exam.scheduled_start_time = start
        if end is not None:
            exam.scheduled_end_time = end
        elif exam.scheduled_end_time is not None and exam.scheduled_end_time <= start:
            logger.info(f"Exam {exam.id} rescheduled past its end time, clearing scheduled end")
            exam.scheduled_end_time = None
        exam.exam_status = ExamStatusEnum.SCHEDULED

        exam = crud_exam.save(db, db_obj=exam)
        logger.info(f"Exam {exam.id} scheduled for {start.isoformat()}")
        return exam

    def generate_exam_code(self, db: Session, exam_id: int, current_user_context: UserContext,
                           now: Optional[datetime] = None) -> ExamCodeInfo:
        exam = self._get_managed_exam(db, exam_id, current_user_context)
        now = now or utcnow()

        if exam.exam_status in CODE_LOCKED_STATUSES:
            raise InvalidStateError("Cannot generate code for active or completed exam.")

        if not exam.scheduled_start_time:
            raise PreconditionFailedError("Please schedule the exam first.")

        minutes_until_start = whole_minutes_between(now, exam.scheduled_start_time)
        lead_minutes = settings.EXAM_CODE_LEAD_MINUTES
        if minutes_until_start < lead_minutes:
            raise PreconditionFailedError(
                f"Exam code must be generated at least {lead_minutes} minutes before scheduled start time.",
                details={
                    "minutes_until_start": minutes_until_start,
                    "required_lead_minutes": lead_minutes,
                },
            )

        exam.exam_code = self.generate_unique_code(db)
        exam.code_generated_at = now
        exam.exam_status = ExamStatusEnum.SCHEDULED
        exam = crud_exam.save(db, db_obj=exam)

        logger.info(f"Exam code generated for exam {exam.id}, {minutes_until_start} minutes before start")
        return ExamCodeInfo(
            exam_code=exam.exam_code,
            exam_id=exam.id,
            scheduled_start_time=exam.scheduled_start_time,
            minutes_until_start=minutes_until_start,
        )

    def start_exam(self, db: Session, exam_id: int, current_user_context: UserContext,
                   now: Optional[datetime] = None) -> Exam:
        exam = self._get_managed_exam(db, exam_id, current_user_context)
        now = now or utcnow()

        if exam.scheduled_start_time and now < exam.scheduled_start_time:
            raise PreconditionFailedError("Cannot start exam before scheduled time.")

        if not exam.exam_code:
            raise PreconditionFailedError("Please generate exam code first.")

        if exam.exam_status == ExamStatusEnum.ACTIVE:
            raise InvalidStateError("Exam is already active.")

        exam.exam_status = ExamStatusEnum.ACTIVE
        exam.actual_start_time = now
        exam.can_students_join = True
        exam = crud_exam.save(db, db_obj=exam)

        logger.info(f"Exam {exam.id} started")
        return exam

    def end_exam(self, db: Session, exam_id: int, current_user_context: UserContext,
                 now: Optional[datetime] = None) -> Exam:
        exam = self._get_managed_exam(db, exam_id, current_user_context)
        return self._close(db, exam, now or utcnow())

    def _close(self, db: Session, exam: Exam, now: datetime) -> Exam:
        exam.exam_status = ExamStatusEnum.COMPLETED
        exam.actual_end_time = now
        exam.can_students_join = False
        exam = crud_exam.save(db, db_obj=exam)

        logger.info(f"Exam {exam.id} ended")
        return exam

    def validate_exam_access(self, db: Session, exam_code: str,
                             current_user_context: UserContext) -> ExamAccessView:
        exam = crud_exam.get_by_code(db, exam_code=exam_code)
        if not exam:
            raise NotFoundError("Invalid exam code.")

        student_id = current_user_context.user.id
        if not exam.is_assigned(student_id):
            raise NotAuthorizedError("You are not assigned to this exam.")

        student = crud_user.get(db, id=student_id)
        if not permission_helper.is_same_examiner(student, exam):
            raise NotAuthorizedError("This exam is not from your examiner.")

        if exam.exam_status != ExamStatusEnum.ACTIVE:
            raise InvalidStateError("Exam is not active yet. Please wait for the conductor to start it.")

        if not exam.can_students_join:
            raise InvalidStateError("Students cannot join at this time.")

        return ExamAccessView.model_validate(exam)

    def close_overdue_exams(self, db: Session, now: Optional[datetime] = None) -> List[int]:
        """End every active exam whose scheduled end time has passed."""
        now = now or utcnow()
        closed = []
        for exam in crud_exam.get_overdue_active(db, now=now):
            self._close(db, exam, now)
            closed.append(exam.id)
        if closed:
            logger.info(f"Closed {len(closed)} overdue exam(s): {closed}")
        return closed


exam_lifecycle_service = ExamLifecycleService()
