from typing import List, Optional
from sqlalchemy.orm import Session

from app.core.constants import RoleEnum
from app.crud.base import CRUDBase
from app.models.user import User
from app.schemas.user import UserCreate, StudentUpdate


class CRUDUser(CRUDBase[User, UserCreate, StudentUpdate]):
    def get_by_email(self, db: Session, *, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email).first()

    def get_by_registration_number(self, db: Session, *, registration_number: str) -> Optional[User]:
        return db.query(User).filter(User.registration_number == registration_number).first()

    def get_students(self, db: Session, *, examiner_id: Optional[int] = None,
                     skip: int = 0, limit: int = 100) -> List[User]:
        query = db.query(User).filter(User.role == RoleEnum.STUDENT)
        if examiner_id is not None:
            query = query.filter(User.examiner_id == examiner_id)
        return query.order_by(User.id).offset(skip).limit(limit).all()

    def get_students_by_ids(self, db: Session, *, ids: List[int]) -> List[User]:
        if not ids:
            return []
        return (
            db.query(User)
            .filter(User.id.in_(ids))
            .filter(User.role == RoleEnum.STUDENT)
            .all()
        )

    def count_active_students(self, db: Session) -> int:
        return (
            db.query(User)
            .filter(User.role == RoleEnum.STUDENT, User.is_active == True)
            .count()
        )


user = CRUDUser(User)
