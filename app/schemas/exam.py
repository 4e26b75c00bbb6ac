from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional, List
from datetime import datetime

from app.core.constants import ExamStatusEnum, DEFAULT_EXAM_INSTRUCTIONS

class ExamBase(BaseModel):
    title: str = Field(..., min_length=3)
    description: Optional[str] = ""
    duration_minutes: int = Field(..., ge=1)
    total_marks: float = Field(..., ge=0)
    per_question_marks: float = Field(..., ge=0)
    negative_marking: float = Field(default=0, ge=0)
    total_questions: int = Field(..., ge=1)
    passing_marks: float = Field(default=0, ge=0)
    instructions: str = DEFAULT_EXAM_INSTRUCTIONS
    show_results_after_submission: bool = True
    allow_review_after_submission: bool = True
    is_active: bool = True

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Data Structures Midterm",
                "description": "Units 1 to 4",
                "duration_minutes": 60,
                "total_marks": 50,
                "per_question_marks": 1,
                "negative_marking": 0.25,
                "total_questions": 50,
                "passing_marks": 20,
            }
        }
    )

class ExamCreate(ExamBase):
    assigned_to: List[int] = []

class ExamUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=3)
    description: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, ge=1)
    total_marks: Optional[float] = Field(default=None, ge=0)
    per_question_marks: Optional[float] = Field(default=None, ge=0)
    negative_marking: Optional[float] = Field(default=None, ge=0)
    total_questions: Optional[int] = Field(default=None, ge=1)
    passing_marks: Optional[float] = Field(default=None, ge=0)
    instructions: Optional[str] = None
    show_results_after_submission: Optional[bool] = None
    allow_review_after_submission: Optional[bool] = None
    is_active: Optional[bool] = None
    assigned_to: Optional[List[int]] = None

class Exam(ExamBase):
    id: int
    created_by: int
    exam_status: ExamStatusEnum
    scheduled_start_time: Optional[datetime] = None
    scheduled_end_time: Optional[datetime] = None
    actual_start_time: Optional[datetime] = None
    actual_end_time: Optional[datetime] = None
    exam_code: Optional[str] = None
    code_generated_at: Optional[datetime] = None
    can_students_join: bool
    assigned_to: List[int] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class ExamSchedule(BaseModel):
    scheduled_start_time: datetime
    scheduled_end_time: Optional[datetime] = None

class ExamCodeInfo(BaseModel):
    exam_code: str
    exam_id: int
    scheduled_start_time: datetime
    minutes_until_start: int

class ExamAccessRequest(BaseModel):
    exam_code: str = Field(..., min_length=1)

class ExamAccessView(BaseModel):
    """What a student sees of an exam before starting it."""
    id: int
    title: str
    description: Optional[str] = ""
    duration_minutes: int
    total_marks: float
    total_questions: int
    instructions: str

    model_config = ConfigDict(from_attributes=True)

class StudentAssignment(BaseModel):
    student_ids: List[int] = Field(..., min_length=1)

class ExamStatistics(BaseModel):
    exam_title: str
    total_assigned: int
    total_attempted: int
    total_passed: int
    pass_percentage: float
    average_score: float
    highest_score: float
    total_questions: int
    total_marks: float

