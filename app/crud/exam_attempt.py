from sqlalchemy.orm import Session, selectinload
from typing import List, Optional
from sqlalchemy import func

from app.core.constants import ExamAttemptStatusEnum
from app.crud.base import CRUDBase
from app.models.exam_attempt import ExamAttempt
from app.schemas.exam_attempt import ExamAttempt as ExamAttemptSchema

class CRUDExamAttempt(CRUDBase[ExamAttempt, ExamAttemptSchema, ExamAttemptSchema]):

    def _query_with_relationships(self, db: Session):
        return db.query(ExamAttempt).options(
            selectinload(ExamAttempt.exam),
            selectinload(ExamAttempt.student),
            selectinload(ExamAttempt.responses)
        )

    def get(self, db: Session, id: int) -> Optional[ExamAttempt]:
        return self._query_with_relationships(db).filter(ExamAttempt.id == id).first()

    def get_by_exam_and_student(self, db: Session, *, exam_id: int, student_id: int,
                                for_update: bool = False) -> Optional[ExamAttempt]:
        query = (
            self._query_with_relationships(db)
            .filter(ExamAttempt.exam_id == exam_id)
            .filter(ExamAttempt.student_id == student_id)
        )
        if for_update:
            query = query.with_for_update().populate_existing()
        return query.first()

    def get_submitted_by_exam(self, db: Session, *, exam_id: int) -> List[ExamAttempt]:
        return (
            self._query_with_relationships(db)
            .filter(ExamAttempt.exam_id == exam_id)
            .filter(ExamAttempt.status == ExamAttemptStatusEnum.SUBMITTED)
            .order_by(ExamAttempt.submitted_at.desc())
            .all()
        )

    def get_all_by_exam(self, db: Session, *, exam_id: int) -> List[ExamAttempt]:
        return (
            self._query_with_relationships(db)
            .filter(ExamAttempt.exam_id == exam_id)
            .all()
        )

    def get_submitted_by_student(self, db: Session, *, student_id: int) -> List[ExamAttempt]:
        return (
            self._query_with_relationships(db)
            .filter(ExamAttempt.student_id == student_id)
            .filter(ExamAttempt.status == ExamAttemptStatusEnum.SUBMITTED)
            .order_by(ExamAttempt.submitted_at.desc())
            .all()
        )

    def get_submitted_marks_summary(self, db: Session) -> tuple[int, float, float]:
        count, average, highest = (
            db.query(
                func.count(ExamAttempt.id),
                func.avg(ExamAttempt.total_obtained_marks),
                func.max(ExamAttempt.total_obtained_marks),
            )
            .filter(ExamAttempt.status == ExamAttemptStatusEnum.SUBMITTED)
            .one()
        )
        return count or 0, round(average, 2) if average else 0.0, highest or 0.0


exam_attempt = CRUDExamAttempt(ExamAttempt)
