from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

from app.core.constants import ExamAttemptStatusEnum
from app.schemas.question import Question

class QuestionResponse(BaseModel):
    id: int
    question_id: int
    selected_answer: Optional[str] = None
    is_correct: Optional[bool] = None
    marks_awarded: Optional[float] = None
    time_spent: int = 0

    model_config = ConfigDict(from_attributes=True)

class AnswerSave(BaseModel):
    question_id: int
    selected_answer: str

class AttemptSubmit(BaseModel):
    total_time_spent: Optional[int] = Field(default=None, ge=0)

class ScoreSummary(BaseModel):
    """Output of the grading algorithm, before it is written onto an attempt."""
    total_obtained_marks: float
    total_score: float
    percentage: float
    correct_answers: int
    incorrect_answers: int
    unattempted_questions: int
    is_passed: bool

class ExamAttempt(BaseModel):
    id: int
    exam_id: int
    student_id: int
    status: ExamAttemptStatusEnum
    started_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    total_time_spent: int = 0
    total_score: float = 0
    total_obtained_marks: float = 0
    percentage: float = 0
    correct_answers: int = 0
    incorrect_answers: int = 0
    unattempted_questions: int = 0
    is_passed: bool = False
    responses: List[QuestionResponse] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class ReviewedResponse(QuestionResponse):
    question: Optional[Question] = None

class ExamAttemptDetails(ExamAttempt):
    exam_title: str
    passing_marks: float
    student_name: Optional[str] = None
    registration_number: Optional[str] = None
    responses: List[ReviewedResponse] = []

class ExamResultRow(ExamAttempt):
    student_name: str
    email: str
    registration_number: Optional[str] = None

class DashboardStatistics(BaseModel):
    total_students: int
    total_exams: int
    total_results_conducted: int
    average_score: float
    highest_score: float
