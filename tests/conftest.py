import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("TESTING", "true")
os.environ.setdefault("LOG_DIR", "./logs")

import pytest
import uuid
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

import main
from app.core.database import Base
from app.core.config import settings
from app.core.constants import RoleEnum
from app.core.security import get_password_hash
from app.utils import deps as deps_utils
from app.models.user import User
from app.models.exam import Exam
# Imported so every mapper is registered before create_all
from app.models.question import Question
from app.models.exam_attempt import ExamAttempt
from app.models.question_response import QuestionResponse
from app.schemas.user import User as UserSchema, UserContext

test_db_url = settings.TEST_DATABASE_URL or "sqlite:///./test.db"

@pytest.fixture(scope="session")
def database_engine():
    if test_db_url.startswith("sqlite"):
        engine = create_engine(test_db_url, connect_args={"check_same_thread": False})
    else:
        engine = create_engine(test_db_url)
    yield engine
    engine.dispose()
    if test_db_url == "sqlite:///./test.db" and os.path.exists("./test.db"):
        os.remove("./test.db")

@pytest.fixture(scope="function")
def db_session(database_engine):
    # Services commit, so every test gets freshly created tables
    Base.metadata.create_all(bind=database_engine)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=database_engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()
        Base.metadata.drop_all(bind=database_engine)

@pytest.fixture(scope="function")
def client(db_session):
    main.app.dependency_overrides[deps_utils.get_db] = lambda: db_session
    main.app.dependency_overrides[deps_utils.get_transactional_db] = lambda: db_session
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()


@pytest.fixture
def user_factory(db_session):
    def _user_factory(role: RoleEnum = RoleEnum.STUDENT, email=None, password="testpass123",
                      is_active=True, examiner_id=None, full_name=None):
        suffix = uuid.uuid4().hex[:8]
        user = User(
            full_name=full_name or f"Test {role.value}",
            email=email or f"{role.value}-{suffix}@example.com",
            hashed_password=get_password_hash(password),
            role=role,
            registration_number=f"REG-{suffix}" if role == RoleEnum.STUDENT else None,
            examiner_id=examiner_id,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _user_factory

@pytest.fixture
def context_for():
    """Build the authenticated-caller context the services expect."""
    def _context_for(user: User) -> UserContext:
        return UserContext(user=UserSchema.model_validate(user), role=user.role)
    return _context_for

@pytest.fixture
def exam_factory(db_session):
    def _exam_factory(creator: User, students=(), **overrides):
        data = {
            "title": "Data Structures Midterm",
            "description": "Units 1 to 4",
            "duration_minutes": 60,
            "total_marks": 10,
            "per_question_marks": 2,
            "negative_marking": 0.5,
            "total_questions": 5,
            "passing_marks": 4,
        }
        data.update(overrides)
        exam = Exam(**data, created_by=creator.id)
        exam.assigned_students = list(students)
        db_session.add(exam)
        db_session.commit()
        db_session.refresh(exam)
        return exam
    return _exam_factory

@pytest.fixture
def question_factory(db_session):
    def _question_factory(exam: Exam, correct_answer="A", marks=None, negative_marks=None, **overrides):
        exam.last_question_number = (exam.last_question_number or 0) + 1
        data = {
            "question_text": f"Question number {exam.last_question_number}?",
            "options": [{"letter": "A", "text": "first"}, {"letter": "B", "text": "second"}],
            "correct_answer": correct_answer,
            "marks": exam.per_question_marks if marks is None else marks,
            "negative_marks": exam.negative_marking if negative_marks is None else negative_marks,
            "question_number": exam.last_question_number,
        }
        data.update(overrides)
        question = Question(exam_id=exam.id, **data)
        db_session.add(question)
        db_session.add(exam)
        db_session.commit()
        db_session.refresh(question)
        return question
    return _question_factory

@pytest.fixture
def login(client):
    def _login(email: str, password: str = "testpass123") -> dict:
        response = client.post("/auth/login", json={"email": email, "password": password})
        body = response.json()
        token = body.get("data", {}).get("token", {}).get("access_token")
        assert token, f"Login failed or token missing: {body}"
        return {"Authorization": f"Bearer {token}"}
    return _login

@pytest.fixture
def token_for_role(client, user_factory):
    """Log in a fresh user per role and cache the token for the test."""
    tokens = {}

    def _create_token_for_role(role_name: str):
        if role_name in tokens:
            return tokens[role_name]

        user = user_factory(role=RoleEnum(role_name))
        response = client.post("/auth/login", json={"email": user.email, "password": "testpass123"})
        body = response.json()
        token = body.get("data", {}).get("token", {}).get("access_token")
        assert token, f"Login failed or token missing: {body}"
        tokens[role_name] = token
        return token

    return _create_token_for_role
