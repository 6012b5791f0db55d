from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


class Role(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class SessionStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class MessageRole(str, Enum):
    USER = "user"
    AI = "ai"


@dataclass(frozen=True)
class TrainingMode:
    id: str
    name: str


@dataclass(frozen=True)
class ScoringDimension:
    key: str
    name: str
    icon: str
    weight: int


# Placeholder values: the backend does not publish mode ids or dimension
# weights, so these are local display defaults, not server data.
TRAINING_MODES: tuple[TrainingMode, ...] = (
    TrainingMode(id="learning", name="学习模式"),
    TrainingMode(id="practice", name="实战演练模式"),
    TrainingMode(id="exam", name="考核模式"),
)

SCORING_DIMENSIONS: tuple[ScoringDimension, ...] = (
    ScoringDimension(key="inquiry", name="问诊能力", icon="💬", weight=25),
    ScoringDimension(key="physical_exam", name="体格检查", icon="🩺", weight=15),
    ScoringDimension(key="auxiliary_exam", name="辅助检查", icon="🔬", weight=15),
    ScoringDimension(key="diagnosis", name="诊断准确性", icon="🎯", weight=30),
    ScoringDimension(key="clinical_reasoning", name="临床思维", icon="🧠", weight=15),
)

DIFFICULTIES: tuple[str, ...] = ("简单", "中等", "困难")
DEFAULT_DIFFICULTY = "中等"


def find_training_mode(mode_id: str | None) -> Optional[TrainingMode]:
    for mode in TRAINING_MODES:
        if mode.id == mode_id:
            return mode
    return None


@dataclass(frozen=True)
class PatientInfo:
    age: Optional[int]
    gender: Gender


@dataclass
class Case:
    id: Optional[int] = None
    title: str = ""
    description: str = ""
    difficulty: str = DEFAULT_DIFFICULTY
    diagnosis: str = ""
    patient_info: Optional[PatientInfo] = None
    symptoms: list[str] = field(default_factory=list)
    questions: list[str] = field(default_factory=list)
    answers: list[str] = field(default_factory=list)


@dataclass
class Dialogue:
    session_id: int
    role: MessageRole
    message: str
    timestamp: Optional[str] = None
    id: Optional[int] = None


@dataclass
class ChatMessage:
    role: MessageRole
    content: str
    timestamp: Optional[str] = None


@dataclass
class Session:
    id: int
    case: Case
    mode: Optional[str] = None
    status: SessionStatus = SessionStatus.IN_PROGRESS
    score: Optional[int] = None
    student_diagnosis: Optional[str] = None
    started_at: Optional[str] = None

    @property
    def is_completed(self) -> bool:
        return self.status == SessionStatus.COMPLETED


@dataclass
class User:
    id: int
    username: str
    full_name: Optional[str] = None
    role: Role = Role.STUDENT


@dataclass
class ClassRoom:
    id: int
    name: str
    students: list[User] = field(default_factory=list)
    created_at: Optional[str] = None

    def has_student(self, student_id: int) -> bool:
        return any(student.id == student_id for student in self.students)
