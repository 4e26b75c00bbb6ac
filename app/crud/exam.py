from sqlalchemy.orm import Session, selectinload
from typing import List, Optional

from app.crud.base import CRUDBase
from app.models.exam import Exam
from app.models.user import User
from app.core.constants import ExamStatusEnum
from app.schemas.exam import ExamCreate, ExamUpdate


class CRUDExam(CRUDBase[Exam, ExamCreate, ExamUpdate]):

    def _query_with_relationships(self, db: Session):
        return db.query(Exam).options(
            selectinload(Exam.questions),
            selectinload(Exam.assigned_students),
        )

    def get(self, db: Session, id: int) -> Optional[Exam]:
        return self._query_with_relationships(db).filter(Exam.id == id).first()

    def get_multi(self, db: Session, skip: int = 0, limit: int = 100) -> List[Exam]:
        return (
            self._query_with_relationships(db)
            .order_by(Exam.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_by_code(self, db: Session, *, exam_code: str) -> Optional[Exam]:
        return self._query_with_relationships(db).filter(Exam.exam_code == exam_code).first()

    def code_exists(self, db: Session, *, exam_code: str) -> bool:
        return db.query(Exam.id).filter(Exam.exam_code == exam_code).first() is not None

    def get_by_creator(self, db: Session, *, user_id: int, skip: int = 0, limit: int = 100) -> List[Exam]:
        return (
            self._query_with_relationships(db)
            .filter(Exam.created_by == user_id)
            .order_by(Exam.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_assigned_to_student(self, db: Session, *, student_id: int) -> List[Exam]:
        return (
            self._query_with_relationships(db)
            .filter(Exam.assigned_students.any(User.id == student_id))
            .filter(Exam.is_active == True)
            .order_by(Exam.id)
            .all()
        )

    def get_overdue_active(self, db: Session, *, now) -> List[Exam]:
        return (
            db.query(Exam)
            .filter(Exam.exam_status == ExamStatusEnum.ACTIVE)
            .filter(Exam.scheduled_end_time.isnot(None))
            .filter(Exam.scheduled_end_time <= now)
            .all()
        )

    def count_active(self, db: Session) -> int:
        return db.query(Exam).filter(Exam.is_active == True).count()


exam = CRUDExam(Exam)
