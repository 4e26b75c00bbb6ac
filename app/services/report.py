from typing import List

from sqlalchemy.orm import Session

from app.core.constants import ExamAttemptStatusEnum
from app.core.exceptions import NotAuthorizedError, NotFoundError
from app.crud.exam import exam as crud_exam
from app.crud.exam_attempt import exam_attempt as crud_exam_attempt
from app.crud.question import question as crud_question
from app.crud.user import user as crud_user
from app.models.exam_attempt import ExamAttempt
from app.schemas.exam_attempt import (
    DashboardStatistics,
    ExamAttempt as ExamAttemptSchema,
    ExamAttemptDetails,
    ExamResultRow,
    ReviewedResponse,
)
from app.schemas.question import Question as QuestionSchema
from app.schemas.user import UserContext
from app.utils.permission import PermissionHelper as permission_helper


class ReportService:
    """Read-only views over attempts. Nothing here writes."""

    def _build_details(self, db: Session, attempt: ExamAttempt, reveal_answers: bool) -> ExamAttemptDetails:
        exam = attempt.exam
        questions = {q.id: q for q in crud_question.get_by_exam(db, exam_id=exam.id)}

        responses = []
        for response in attempt.responses:
            question = questions.get(response.question_id)
            question_view = None
            if question is not None:
                question_view = QuestionSchema.model_validate(question)
                if not reveal_answers:
                    question_view = question_view.model_copy(update={"correct_answer": None, "explanation": None})
            responses.append(
                ReviewedResponse.model_validate(response).model_copy(update={"question": question_view})
            )

        base = ExamAttemptSchema.model_validate(attempt).model_dump(exclude={"responses"})
        return ExamAttemptDetails(
            **base,
            exam_title=exam.title,
            passing_marks=exam.passing_marks,
            student_name=attempt.student.full_name if attempt.student else None,
            registration_number=attempt.student.registration_number if attempt.student else None,
            responses=responses,
        )

    def _student_may_review(self, attempt: ExamAttempt) -> bool:
        return attempt.status == ExamAttemptStatusEnum.SUBMITTED and attempt.exam.allow_review_after_submission

    def get_my_result(self, db: Session, exam_id: int, current_user_context: UserContext) -> ExamAttemptDetails:
        attempt = crud_exam_attempt.get_by_exam_and_student(
            db, exam_id=exam_id, student_id=current_user_context.user.id
        )
        if not attempt:
            raise NotFoundError("Result not found.")
        return self._build_details(db, attempt, reveal_answers=self._student_may_review(attempt))

    def get_my_results(self, db: Session, current_user_context: UserContext) -> List[ExamAttempt]:
        return crud_exam_attempt.get_submitted_by_student(db, student_id=current_user_context.user.id)

    def get_exam_results(self, db: Session, exam_id: int, current_user_context: UserContext) -> List[ExamResultRow]:
        exam = crud_exam.get(db, id=exam_id)
        if not exam:
            raise NotFoundError("Exam not found.")
        permission_helper.require_exam_owner_or_admin(current_user_context, exam)

        rows = []
        for attempt in crud_exam_attempt.get_submitted_by_exam(db, exam_id=exam_id):
            base = ExamAttemptSchema.model_validate(attempt).model_dump()
            rows.append(ExamResultRow(
                **base,
                student_name=attempt.student.full_name,
                email=attempt.student.email,
                registration_number=attempt.student.registration_number,
            ))
        return rows

    def get_student_result_details(self, db: Session, exam_id: int, student_id: int,
                                   current_user_context: UserContext) -> ExamAttemptDetails:
        attempt = crud_exam_attempt.get_by_exam_and_student(db, exam_id=exam_id, student_id=student_id)
        if not attempt:
            raise NotFoundError("Result not found.")

        if permission_helper.is_student(current_user_context):
            if attempt.student_id != current_user_context.user.id:
                raise NotAuthorizedError("Not authorized to view this result.")
            return self._build_details(db, attempt, reveal_answers=self._student_may_review(attempt))

        permission_helper.require_exam_owner_or_admin(
            current_user_context, attempt.exam, "Not authorized to view this result."
        )
        return self._build_details(db, attempt, reveal_answers=True)

    def get_dashboard_statistics(self, db: Session, current_user_context: UserContext) -> DashboardStatistics:
        permission_helper.require_not_student(current_user_context)
        total_results, average_score, highest_score = crud_exam_attempt.get_submitted_marks_summary(db)
        return DashboardStatistics(
            total_students=crud_user.count_active_students(db),
            total_exams=crud_exam.count_active(db),
            total_results_conducted=total_results,
            average_score=average_score,
            highest_score=highest_score,
        )


report_service = ReportService()
