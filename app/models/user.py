from sqlalchemy import Boolean, Column, String, Integer, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.constants import RoleEnum

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=True)
    role = Column(Enum(RoleEnum), nullable=False, default=RoleEnum.STUDENT)
    registration_number = Column(String, unique=True, index=True, nullable=True)
    department = Column(String, nullable=True)
    semester = Column(String, nullable=True)
    # Conductor that onboarded this student; exams from other conductors are off limits
    examiner_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    is_active = Column(Boolean(), default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    examiner = relationship("User", remote_side=[id])
    created_exams = relationship("Exam", back_populates="creator")
    assigned_exams = relationship("Exam", secondary="exam_assignments", back_populates="assigned_students")
    exam_attempts = relationship("ExamAttempt", back_populates="student", cascade="all, delete-orphan")
