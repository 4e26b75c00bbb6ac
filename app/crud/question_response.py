from sqlalchemy.orm import Session
from typing import Optional

from app.crud.base import CRUDBase
from app.models.question_response import QuestionResponse
from app.schemas.exam_attempt import QuestionResponse as QuestionResponseSchema


class CRUDQuestionResponse(CRUDBase[QuestionResponse, QuestionResponseSchema, QuestionResponseSchema]):

    def get_by_attempt_and_question(self, db: Session, *, attempt_id: int,
                                    question_id: int) -> Optional[QuestionResponse]:
        return (
            db.query(QuestionResponse)
            .filter(QuestionResponse.attempt_id == attempt_id)
            .filter(QuestionResponse.question_id == question_id)
            .first()
        )


question_response = CRUDQuestionResponse(QuestionResponse)
