"""Deterministic scoring of a submitted attempt.

``calculate_score`` is a pure function of the attempt's responses, the exam's
question set and the exam configuration. It marks every matched response
(``is_correct`` / ``marks_awarded``) and returns the aggregates that the
attempt service writes onto the attempt.
"""
from typing import Iterable, Protocol

from app.schemas.exam_attempt import ScoreSummary


class GradableResponse(Protocol):
    question_id: int
    selected_answer: str
    is_correct: bool
    marks_awarded: float


class GradableQuestion(Protocol):
    id: int
    correct_answer: str
    marks: float
    negative_marks: float


class GradableExam(Protocol):
    total_marks: float
    total_questions: int
    passing_marks: float


def percentage_of(obtained: float, total: float) -> float:
    if not total:
        return 0.0
    return round(obtained / total * 100, 2)


def calculate_score(
    responses: Iterable[GradableResponse],
    questions: Iterable[GradableQuestion],
    exam: GradableExam,
) -> ScoreSummary:
    questions_by_id = {question.id: question for question in questions}

    marks = 0.0
    correct_count = 0
    incorrect_count = 0

    for response in responses:
        question = questions_by_id.get(response.question_id)
        if question is None:
            # The question was deleted after it was answered
            continue

        if response.selected_answer == question.correct_answer:
            response.is_correct = True
            response.marks_awarded = question.marks
            marks += question.marks
            correct_count += 1
        else:
            response.is_correct = False
            response.marks_awarded = -question.negative_marks
            marks -= question.negative_marks
            incorrect_count += 1

    total_obtained_marks = max(0.0, marks)
    total_score = exam.total_marks or 0

    return ScoreSummary(
        total_obtained_marks=total_obtained_marks,
        total_score=total_score,
        percentage=percentage_of(total_obtained_marks, total_score),
        correct_answers=correct_count,
        incorrect_answers=incorrect_count,
        unattempted_questions=exam.total_questions - (correct_count + incorrect_count),
        is_passed=total_obtained_marks >= (exam.passing_marks or 0),
    )
