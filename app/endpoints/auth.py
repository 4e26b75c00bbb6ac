from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.schemas.response import APIResponse
from app.schemas.token import LoginRequest, LoginResponse
from app.schemas.user import User, UserContext, UserCreate
from app.services.auth import auth_service
from app.utils import deps

router = APIRouter()


@router.post("/register", response_model=APIResponse[LoginResponse], status_code=status.HTTP_201_CREATED)
def register(
    *,
    db: Session = Depends(deps.get_transactional_db),
    user_in: UserCreate
):
    """Self-registration for students and conductors."""
    result = auth_service.register(db, user_in=user_in)
    return APIResponse(message="Registration successful", data=result)


@router.post("/login", response_model=APIResponse[LoginResponse])
def login_for_access_token(
    request: LoginRequest,
    db: Session = Depends(deps.get_db)
):
    result = auth_service.login(db, email=request.email, password=request.password)
    return APIResponse(message="Login successful", data=result)


@router.get("/me", response_model=APIResponse[User])
def read_current_user(
    context: UserContext = Depends(deps.get_current_user_with_context)
):
    return APIResponse(message="Current user retrieved successfully", data=context.user)
