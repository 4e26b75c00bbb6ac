from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Float, Enum, Table
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.constants import ExamStatusEnum, DEFAULT_EXAM_INSTRUCTIONS

exam_assignments = Table(
    "exam_assignments",
    Base.metadata,
    Column("exam_id", Integer, ForeignKey("exams.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)

class Exam(Base):
    __tablename__ = "exams"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, index=True, nullable=False)
    description = Column(String, nullable=True, default="")
    duration_minutes = Column(Integer, nullable=False)
    total_marks = Column(Float, nullable=False)
    per_question_marks = Column(Float, nullable=False)
    negative_marking = Column(Float, nullable=False, default=0)
    total_questions = Column(Integer, nullable=False)
    passing_marks = Column(Float, nullable=False, default=0)
    instructions = Column(String, nullable=False, default=DEFAULT_EXAM_INSTRUCTIONS)
    show_results_after_submission = Column(Boolean, default=True)
    allow_review_after_submission = Column(Boolean, default=True)
    is_active = Column(Boolean, default=True)

    exam_status = Column(Enum(ExamStatusEnum), nullable=False, default=ExamStatusEnum.CREATED)
    scheduled_start_time = Column(DateTime, nullable=True)
    scheduled_end_time = Column(DateTime, nullable=True)
    actual_start_time = Column(DateTime, nullable=True)
    actual_end_time = Column(DateTime, nullable=True)
    exam_code = Column(String(16), unique=True, index=True, nullable=True)
    code_generated_at = Column(DateTime, nullable=True)
    can_students_join = Column(Boolean, nullable=False, default=False)

    # Highest question number ever issued for this exam
    last_question_number = Column(Integer, nullable=False, default=0)

    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    creator = relationship("User", back_populates="created_exams")
    questions = relationship(
        "Question",
        back_populates="exam",
        cascade="all, delete-orphan",
        order_by="Question.question_number",
    )
    assigned_students = relationship("User", secondary=exam_assignments, back_populates="assigned_exams")
    attempts = relationship("ExamAttempt", back_populates="exam", cascade="all, delete-orphan")

    @property
    def assigned_to(self):
        return [student.id for student in self.assigned_students]

    def is_assigned(self, user_id: int) -> bool:
        return user_id in self.assigned_to
