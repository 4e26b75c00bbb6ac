from pydantic_settings import BaseSettings
from typing import Optional, List

class Settings(BaseSettings):
    PROJECT_NAME: str = "Online Examination API"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 1 day

    # CORS
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:3001",
        "http://127.0.0.1:3000",
    ]

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./exam_platform.db"
    TEST_DATABASE_URL: Optional[str] = None

    # Exam lifecycle
    EXAM_CODE_LEAD_MINUTES: int = 30
    EXAM_CODE_LENGTH: int = 8

    # Background sweep that ends exams past their scheduled end time
    EXAM_SWEEP_ENABLED: bool = False
    EXAM_SWEEP_INTERVAL_SECONDS: int = 60

    LOG_DIR: str = "logs"

    class Config:
        env_file = ".env"

settings = Settings()
