from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime

from app.core.constants import QuestionTypeEnum, DifficultyEnum, OPTION_LETTERS, BOOLEAN_ANSWERS

class QuestionOption(BaseModel):
    letter: str
    text: str

    @field_validator("letter")
    @classmethod
    def validate_letter(cls, v):
        if v not in OPTION_LETTERS:
            raise ValueError(f"Option letter must be one of {', '.join(OPTION_LETTERS)}")
        return v

class QuestionBase(BaseModel):
    question_text: str = Field(..., min_length=5)
    question_type: QuestionTypeEnum = QuestionTypeEnum.MCQ
    options: List[QuestionOption] = []
    correct_answer: str
    explanation: Optional[str] = ""
    marks: Optional[float] = Field(default=None, ge=0)
    negative_marks: Optional[float] = Field(default=None, ge=0)
    difficulty: DifficultyEnum = DifficultyEnum.MEDIUM

    @model_validator(mode="after")
    def validate_answer_shape(self):
        if self.question_type == QuestionTypeEnum.MCQ:
            if len(self.options) < 2:
                raise ValueError("At least 2 options are required")
            letters = [option.letter for option in self.options]
            if len(letters) != len(set(letters)):
                raise ValueError("Option letters must be unique")
            if self.correct_answer not in letters:
                raise ValueError("Correct answer must be one of the option letters")
        elif self.question_type == QuestionTypeEnum.TRUE_FALSE:
            if self.correct_answer not in BOOLEAN_ANSWERS:
                raise ValueError("Correct answer must be 'true' or 'false'")
        return self

class QuestionCreate(QuestionBase):
    exam_id: int

class QuestionBulkCreate(BaseModel):
    exam_id: int
    questions: List[QuestionBase] = Field(..., min_length=1)

class QuestionUpdate(BaseModel):
    question_text: Optional[str] = Field(default=None, min_length=5)
    question_type: Optional[QuestionTypeEnum] = None
    options: Optional[List[QuestionOption]] = None
    correct_answer: Optional[str] = None
    explanation: Optional[str] = None
    marks: Optional[float] = Field(default=None, ge=0)
    negative_marks: Optional[float] = Field(default=None, ge=0)
    difficulty: Optional[DifficultyEnum] = None

class QuestionForStudent(BaseModel):
    """A question as shown to a student: no answer key, no explanation."""
    id: int
    exam_id: int
    question_number: int
    question_text: str
    question_type: QuestionTypeEnum
    options: List[QuestionOption] = []
    marks: float
    negative_marks: float

    model_config = ConfigDict(from_attributes=True)

class Question(QuestionForStudent):
    correct_answer: Optional[str] = None
    explanation: Optional[str] = ""
    difficulty: DifficultyEnum
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
