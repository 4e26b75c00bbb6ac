from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum, Float, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.constants import QuestionTypeEnum, DifficultyEnum

class Question(Base):
    __tablename__ = "questions"
    __table_args__ = (
        UniqueConstraint("exam_id", "question_number", name="uq_questions_exam_number"),
    )

    id = Column(Integer, primary_key=True, index=True)
    exam_id = Column(Integer, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False, index=True)
    question_text = Column(String, nullable=False)
    question_type = Column(Enum(QuestionTypeEnum), nullable=False, default=QuestionTypeEnum.MCQ)
    options = Column(JSON, nullable=True)  # [{"letter": "A", "text": "..."}]
    correct_answer = Column(String, nullable=False)  # A-D, or "true"/"false"
    explanation = Column(String, nullable=True, default="")
    marks = Column(Float, nullable=False, default=1)
    negative_marks = Column(Float, nullable=False, default=0)
    difficulty = Column(Enum(DifficultyEnum), nullable=False, default=DifficultyEnum.MEDIUM)
    question_number = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    exam = relationship("Exam", back_populates="questions")
