from sqlalchemy import Column, Integer, DateTime, ForeignKey, Float, Boolean, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.constants import ExamAttemptStatusEnum

class ExamAttempt(Base):
    """One student's sitting of one exam, with the graded aggregates."""
    __tablename__ = "exam_attempts"
    __table_args__ = (
        UniqueConstraint("exam_id", "student_id", name="uq_exam_attempts_exam_student"),
    )

    id = Column(Integer, primary_key=True, index=True)
    exam_id = Column(Integer, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(Enum(ExamAttemptStatusEnum), nullable=False, default=ExamAttemptStatusEnum.NOT_STARTED)

    started_at = Column(DateTime, nullable=True)
    submitted_at = Column(DateTime, nullable=True)
    total_time_spent = Column(Integer, nullable=False, default=0)  # seconds, client reported

    total_score = Column(Float, nullable=False, default=0)
    total_obtained_marks = Column(Float, nullable=False, default=0)
    percentage = Column(Float, nullable=False, default=0)
    correct_answers = Column(Integer, nullable=False, default=0)
    incorrect_answers = Column(Integer, nullable=False, default=0)
    unattempted_questions = Column(Integer, nullable=False, default=0)
    is_passed = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    exam = relationship("Exam", back_populates="attempts")
    student = relationship("User", back_populates="exam_attempts")
    responses = relationship(
        "QuestionResponse",
        back_populates="attempt",
        cascade="all, delete-orphan",
        order_by="QuestionResponse.id",
    )
