import pytest
from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.core.constants import QuestionTypeEnum, RoleEnum
from app.core.exceptions import NotAuthorizedError, NotFoundError
from app.schemas.question import QuestionBulkCreate, QuestionCreate, QuestionUpdate
from app.services.exam import exam_service
from app.schemas.exam import ExamUpdate
from app.services.question import question_service


def _mcq(exam_id=None, **overrides):
    data = {
        "question_text": "Which structure is LIFO?",
        "options": [{"letter": "A", "text": "Stack"}, {"letter": "B", "text": "Queue"}],
        "correct_answer": "A",
    }
    if exam_id is not None:
        data["exam_id"] = exam_id
    data.update(overrides)
    return data


@pytest.fixture
def conductor(user_factory):
    return user_factory(role=RoleEnum.CONDUCTOR)


class TestCreateQuestion:
    def test_marks_default_from_exam(self, db_session: Session, conductor, exam_factory, context_for):
        exam = exam_factory(conductor, per_question_marks=2, negative_marking=0.5)

        question = question_service.create_question(
            db_session, question_in=QuestionCreate(**_mcq(exam.id)), current_user_context=context_for(conductor),
        )

        assert question.marks == 2
        assert question.negative_marks == 0.5
        assert question.question_number == 1

    def test_explicit_marks_win(self, db_session: Session, conductor, exam_factory, context_for):
        exam = exam_factory(conductor)
        question = question_service.create_question(
            db_session, question_in=QuestionCreate(**_mcq(exam.id, marks=4, negative_marks=0)),
            current_user_context=context_for(conductor),
        )
        assert question.marks == 4
        assert question.negative_marks == 0

    def test_marks_are_a_snapshot(self, db_session: Session, conductor, exam_factory, context_for):
        exam = exam_factory(conductor, per_question_marks=2)
        context = context_for(conductor)
        question = question_service.create_question(
            db_session, question_in=QuestionCreate(**_mcq(exam.id)), current_user_context=context,
        )

        exam_service.update_exam(db_session, exam_id=exam.id, exam_in=ExamUpdate(per_question_marks=5),
                                 current_user_context=context)
        db_session.refresh(question)

        assert question.marks == 2

    def test_numbers_are_never_reused(self, db_session: Session, conductor, exam_factory, context_for):
        exam = exam_factory(conductor)
        context = context_for(conductor)
        first = question_service.create_question(db_session, question_in=QuestionCreate(**_mcq(exam.id)),
                                                 current_user_context=context)
        second = question_service.create_question(db_session, question_in=QuestionCreate(**_mcq(exam.id)),
                                                  current_user_context=context)
        question_service.delete_question(db_session, question_id=second.id, current_user_context=context)

        third = question_service.create_question(db_session, question_in=QuestionCreate(**_mcq(exam.id)),
                                                 current_user_context=context)

        assert (first.question_number, third.question_number) == (1, 3)

    def test_bulk_create_numbers_in_order(self, db_session: Session, conductor, exam_factory, context_for):
        exam = exam_factory(conductor)
        bulk_in = QuestionBulkCreate(exam_id=exam.id, questions=[
            _mcq(),
            _mcq(question_type=QuestionTypeEnum.TRUE_FALSE, options=[], correct_answer="true"),
            _mcq(),
        ])

        questions = question_service.create_questions(db_session, bulk_in=bulk_in,
                                                      current_user_context=context_for(conductor))

        assert [q.question_number for q in questions] == [1, 2, 3]
        assert questions[1].correct_answer == "true"

    def test_other_conductor_rejected(self, db_session: Session, conductor, user_factory, exam_factory, context_for):
        exam = exam_factory(conductor)
        other = user_factory(role=RoleEnum.CONDUCTOR)
        with pytest.raises(NotAuthorizedError):
            question_service.create_question(db_session, question_in=QuestionCreate(**_mcq(exam.id)),
                                             current_user_context=context_for(other))


class TestQuestionValidation:
    def test_mcq_answer_must_be_an_option(self):
        with pytest.raises(ValueError):
            QuestionCreate(**_mcq(1, correct_answer="C"))

    def test_mcq_needs_two_options(self):
        with pytest.raises(ValueError):
            QuestionCreate(**_mcq(1, options=[{"letter": "A", "text": "Stack"}]))

    def test_true_false_answer(self):
        with pytest.raises(ValueError):
            QuestionCreate(**_mcq(1, question_type="true_false", options=[], correct_answer="yes"))

    def test_update_revalidates_merged_question(self, db_session: Session, conductor, exam_factory,
                                                question_factory, context_for):
        exam = exam_factory(conductor)
        question = question_factory(exam)
        with pytest.raises(HTTPException) as exc_info:
            question_service.update_question(db_session, question_id=question.id,
                                             question_in=QuestionUpdate(correct_answer="D"),
                                             current_user_context=context_for(conductor))
        assert exc_info.value.status_code == 422

    def test_update_applies(self, db_session: Session, conductor, exam_factory, question_factory, context_for):
        exam = exam_factory(conductor)
        question = question_factory(exam)
        updated = question_service.update_question(db_session, question_id=question.id,
                                                   question_in=QuestionUpdate(correct_answer="B", marks=3),
                                                   current_user_context=context_for(conductor))
        assert updated.correct_answer == "B"
        assert updated.marks == 3


class TestStudentQuestionView:
    def test_assigned_student_can_read(self, db_session: Session, conductor, user_factory, exam_factory,
                                       question_factory, context_for):
        student = user_factory(role=RoleEnum.STUDENT)
        exam = exam_factory(conductor, students=[student])
        question = question_factory(exam)
        found = question_service.get_question_for_student(db_session, question_id=question.id,
                                                          current_user_context=context_for(student))
        assert found.id == question.id

    def test_unassigned_student_gets_not_found(self, db_session: Session, conductor, user_factory,
                                               exam_factory, question_factory, context_for):
        student = user_factory(role=RoleEnum.STUDENT)
        exam = exam_factory(conductor)
        question = question_factory(exam)
        with pytest.raises(NotFoundError):
            question_service.get_question_for_student(db_session, question_id=question.id,
                                                      current_user_context=context_for(student))
