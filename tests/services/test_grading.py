from types import SimpleNamespace

import pytest

from app.services.grading import calculate_score, percentage_of


def _question(id, correct_answer="A", marks=1, negative_marks=0.5):
    return SimpleNamespace(id=id, correct_answer=correct_answer, marks=marks, negative_marks=negative_marks)

def _response(question_id, selected_answer):
    return SimpleNamespace(question_id=question_id, selected_answer=selected_answer,
                           is_correct=None, marks_awarded=None)

def _exam(total_marks=2, total_questions=2, passing_marks=1):
    return SimpleNamespace(total_marks=total_marks, total_questions=total_questions, passing_marks=passing_marks)


class TestCalculateScore:
    def test_one_right_one_wrong(self):
        questions = [_question(1, "A"), _question(2, "B")]
        responses = [_response(1, "A"), _response(2, "C")]

        summary = calculate_score(responses, questions, _exam())

        assert summary.total_obtained_marks == 0.5
        assert summary.total_score == 2
        assert summary.correct_answers == 1
        assert summary.incorrect_answers == 1
        assert summary.unattempted_questions == 0
        assert summary.percentage == 25.0
        assert summary.is_passed is False

    def test_marks_each_response(self):
        questions = [_question(1, "A"), _question(2, "B")]
        responses = [_response(1, "A"), _response(2, "C")]

        calculate_score(responses, questions, _exam())

        assert responses[0].is_correct is True
        assert responses[0].marks_awarded == 1
        assert responses[1].is_correct is False
        assert responses[1].marks_awarded == -0.5

    def test_negative_total_is_floored_at_zero(self):
        questions = [_question(1, "A", marks=1, negative_marks=5)]
        responses = [_response(1, "B")]

        summary = calculate_score(responses, questions, _exam(total_marks=1, total_questions=1, passing_marks=0))

        assert summary.total_obtained_marks == 0
        assert summary.percentage == 0.0
        # Floored marks still meet a zero pass mark
        assert summary.is_passed is True
        # The individual response keeps its negative award
        assert responses[0].marks_awarded == -5

    def test_response_for_deleted_question_is_skipped(self):
        questions = [_question(1, "A")]
        responses = [_response(1, "A"), _response(99, "A")]

        summary = calculate_score(responses, questions, _exam(total_questions=2))

        assert summary.correct_answers == 1
        assert summary.incorrect_answers == 0
        assert summary.unattempted_questions == 1
        assert responses[1].is_correct is None
        assert responses[1].marks_awarded is None

    def test_no_responses(self):
        summary = calculate_score([], [_question(1), _question(2)], _exam())

        assert summary.total_obtained_marks == 0
        assert summary.unattempted_questions == 2
        assert summary.is_passed is False

    def test_unattempted_can_go_negative(self):
        questions = [_question(1, "A"), _question(2, "A"), _question(3, "A")]
        responses = [_response(1, "A"), _response(2, "A"), _response(3, "A")]

        summary = calculate_score(responses, questions, _exam(total_marks=3, total_questions=2))

        assert summary.correct_answers == 3
        assert summary.unattempted_questions == -1

    def test_comparison_is_exact(self):
        questions = [_question(1, "true")]
        responses = [_response(1, "True")]

        summary = calculate_score(responses, questions, _exam(total_questions=1))

        assert summary.correct_answers == 0
        assert summary.incorrect_answers == 1

    def test_zero_total_marks_gives_zero_percentage(self):
        questions = [_question(1, "A")]
        responses = [_response(1, "A")]

        summary = calculate_score(responses, questions, _exam(total_marks=0, total_questions=1))

        assert summary.total_obtained_marks == 1
        assert summary.percentage == 0.0


@pytest.mark.parametrize("obtained,total,expected", [
    (1, 3, 33.33),
    (2, 3, 66.67),
    (5, 0, 0.0),
    (10, 10, 100.0),
])
def test_percentage_of(obtained, total, expected):
    assert percentage_of(obtained, total) == expected
