from enum import Enum


DEFAULT_EXAM_INSTRUCTIONS = (
    "Please read all instructions carefully. Do not switch tabs or windows during the exam."
)

class RoleEnum(str, Enum):
    ADMIN = "admin"
    CONDUCTOR = "conductor"
    STUDENT = "student"

class ExamStatusEnum(str, Enum):
    CREATED = "created"
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class QuestionTypeEnum(str, Enum):
    MCQ = "mcq"
    TRUE_FALSE = "true_false"
    SHORT_ANSWER = "short_answer"

class DifficultyEnum(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

class ExamAttemptStatusEnum(str, Enum):
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    SUBMITTED = "submitted"
    EVALUATED = "evaluated"

OPTION_LETTERS = ("A", "B", "C", "D")
BOOLEAN_ANSWERS = ("true", "false")
