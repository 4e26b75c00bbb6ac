import logging

from sqlalchemy.orm import Session
from fastapi import HTTPException, status

from app.core.constants import RoleEnum
from app.core.exceptions import ConflictError
from app.core.security import create_access_token, get_password_hash, verify_password
from app.crud.user import user as crud_user
from app.models.user import User
from app.schemas.token import LoginResponse, Token
from app.schemas.user import User as UserSchema, UserCreate

logger = logging.getLogger(__name__)


class AuthService:
    def _issue_token(self, user: User) -> LoginResponse:
        access_token = create_access_token(data={"user_id": user.id, "role": user.role.value})
        return LoginResponse(
            token=Token(access_token=access_token, token_type="bearer"),
            user=UserSchema.model_validate(user),
        )

    def register(self, db: Session, *, user_in: UserCreate) -> LoginResponse:
        if crud_user.get_by_email(db, email=user_in.email):
            raise ConflictError("Email already in use")

        registration_number = None
        if user_in.role == RoleEnum.STUDENT:
            registration_number = user_in.registration_number.strip()
            if crud_user.get_by_registration_number(db, registration_number=registration_number):
                raise ConflictError("Registration number already exists")

        user = User(
            full_name=user_in.full_name,
            email=user_in.email,
            hashed_password=get_password_hash(user_in.password),
            role=user_in.role,
            registration_number=registration_number,
            department=user_in.department if user_in.role == RoleEnum.STUDENT else None,
            semester=user_in.semester if user_in.role == RoleEnum.STUDENT else None,
        )
        user = crud_user.save(db, db_obj=user)
        logger.info(f"Registered {user.role.value} {user.id}")
        return self._issue_token(user)

    def login(self, db: Session, *, email: str, password: str) -> LoginResponse:
        user = crud_user.get_by_email(db, email=email)
        if not user or not verify_password(password, user.hashed_password):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Incorrect email or password",
            )

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="User is inactive",
            )

        return self._issue_token(user)


auth_service = AuthService()
