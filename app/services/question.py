import logging
from typing import List

from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.crud.exam import exam as crud_exam
from app.crud.question import question as crud_question
from app.models.exam import Exam
from app.models.question import Question
from app.schemas.question import Question as QuestionSchema
from app.schemas.question import QuestionBase, QuestionBulkCreate, QuestionCreate, QuestionUpdate
from app.schemas.user import UserContext
from app.utils.permission import PermissionHelper as permission_helper

logger = logging.getLogger(__name__)


class QuestionService:

    def _get_managed_exam(self, db: Session, exam_id: int, current_user_context: UserContext) -> Exam:
        exam = crud_exam.get_for_update(db, id=exam_id)
        if not exam:
            raise NotFoundError("Exam not found.")
        permission_helper.require_exam_owner_or_admin(current_user_context, exam)
        return exam

    def _get_question_or_404(self, db: Session, question_id: int) -> Question:
        question = crud_question.get(db, id=question_id)
        if not question:
            raise NotFoundError("Question not found.")
        return question

    def _next_question_number(self, db: Session, exam: Exam) -> int:
        highest = max(exam.last_question_number or 0,
                      crud_question.get_max_question_number(db, exam_id=exam.id))
        exam.last_question_number = highest + 1
        return exam.last_question_number

    def _build_question(self, db: Session, exam: Exam, question_in: QuestionBase) -> Question:
        data = question_in.model_dump(exclude={"exam_id"})
        # Marks are copied from the exam once; later exam edits do not touch them
        if data["marks"] is None:
            data["marks"] = exam.per_question_marks
        if data["negative_marks"] is None:
            data["negative_marks"] = exam.negative_marking
        return Question(
            **data,
            exam_id=exam.id,
            question_number=self._next_question_number(db, exam),
        )

    def get_questions_by_exam(self, db: Session, exam_id: int,
                              current_user_context: UserContext) -> List[Question]:
        exam = crud_exam.get(db, id=exam_id)
        if not exam:
            raise NotFoundError("Exam not found.")
        permission_helper.require_exam_owner_or_admin(current_user_context, exam)
        return crud_question.get_by_exam(db, exam_id=exam_id)

    def get_question(self, db: Session, question_id: int, current_user_context: UserContext) -> Question:
        question = self._get_question_or_404(db, question_id)
        permission_helper.require_exam_owner_or_admin(current_user_context, question.exam)
        return question

    def get_question_for_student(self, db: Session, question_id: int,
                                 current_user_context: UserContext) -> Question:
        question = self._get_question_or_404(db, question_id)
        if permission_helper.is_student(current_user_context):
            if not question.exam.is_assigned(current_user_context.user.id):
                raise NotFoundError("Question not found.")
        return question

    def create_question(self, db: Session, question_in: QuestionCreate,
                        current_user_context: UserContext) -> Question:
        exam = self._get_managed_exam(db, question_in.exam_id, current_user_context)

        question = self._build_question(db, exam, question_in)
        db.add(question)
        db.add(exam)
        question = crud_question.save(db, db_obj=question)

        logger.info(f"Question {question.id} added to exam {exam.id} as #{question.question_number}")
        return question

    def create_questions(self, db: Session, bulk_in: QuestionBulkCreate,
                         current_user_context: UserContext) -> List[Question]:
        exam = self._get_managed_exam(db, bulk_in.exam_id, current_user_context)

        questions = [self._build_question(db, exam, question_in) for question_in in bulk_in.questions]
        db.add_all(questions)
        db.add(exam)
        crud_question.flush(db)
        db.commit()
        for question in questions:
            db.refresh(question)

        logger.info(f"{len(questions)} questions added to exam {exam.id}")
        return questions

    def update_question(self, db: Session, question_id: int, question_in: QuestionUpdate,
                        current_user_context: UserContext) -> Question:
        question = self._get_question_or_404(db, question_id)
        permission_helper.require_exam_owner_or_admin(current_user_context, question.exam)

        update_data = question_in.model_dump(exclude_unset=True, exclude_none=True)
        try:
            QuestionBase.model_validate({
                "question_text": question.question_text,
                "question_type": question.question_type,
                "options": question.options or [],
                "correct_answer": question.correct_answer,
                **update_data,
            })
        except ValidationError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="; ".join(error["msg"] for error in exc.errors()),
            )
        return crud_question.update(db, db_obj=question, obj_in=update_data)

    def delete_question(self, db: Session, question_id: int, current_user_context: UserContext) -> QuestionSchema:
        question = self._get_question_or_404(db, question_id)
        permission_helper.require_exam_owner_or_admin(current_user_context, question.exam)

        deleted = QuestionSchema.model_validate(question)
        crud_question.delete(db, id=question_id)
        logger.info(f"Question {question_id} removed from exam {deleted.exam_id}")
        return deleted


question_service = QuestionService()
