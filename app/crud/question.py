from typing import List
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.question import Question
from app.schemas.question import QuestionCreate, QuestionUpdate

class CRUDQuestion(CRUDBase[Question, QuestionCreate, QuestionUpdate]):
    def get_by_exam(self, db: Session, *, exam_id: int) -> List[Question]:
        return (
            db.query(self.model)
            .filter(self.model.exam_id == exam_id)
            .order_by(self.model.question_number)
            .all()
        )

    def get_max_question_number(self, db: Session, *, exam_id: int) -> int:
        result = (
            db.query(func.max(self.model.question_number))
            .filter(self.model.exam_id == exam_id)
            .scalar()
        )
        return result or 0

question = CRUDQuestion(Question)
