from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from .models import (
    DEFAULT_DIFFICULTY,
    Case,
    ClassRoom,
    Dialogue,
    Gender,
    MessageRole,
    PatientInfo,
    Role,
    Session,
    SessionStatus,
    User,
)


GenderValue = Literal["male", "female"]
RoleValue = Literal["student", "teacher", "admin"]
MessageRoleValue = Literal["user", "ai"]


class PatientInfoPayload(BaseModel):
    age: int | None = None
    gender: GenderValue = "male"

    def to_model(self) -> PatientInfo:
        return PatientInfo(age=self.age, gender=Gender(self.gender))


class CasePayload(BaseModel):
    id: int | None = None
    title: str = ""
    description: str = ""
    difficulty: str = DEFAULT_DIFFICULTY
    diagnosis: str = ""
    patient_info: PatientInfoPayload | None = None
    symptoms: list[str] = Field(default_factory=list)
    questions: list[str] = Field(default_factory=list)
    answers: list[str] = Field(default_factory=list)

    def to_model(self) -> Case:
        return Case(
            id=self.id,
            title=self.title,
            description=self.description,
            difficulty=self.difficulty,
            diagnosis=self.diagnosis,
            patient_info=self.patient_info.to_model() if self.patient_info else None,
            symptoms=list(self.symptoms),
            questions=list(self.questions),
            answers=list(self.answers),
        )


class SessionPayload(BaseModel):
    id: int
    case: CasePayload = Field(default_factory=CasePayload)
    mode: str | None = None
    status: Literal["in_progress", "completed"] = "in_progress"
    score: int | None = None
    student_diagnosis: str | None = None
    started_at: str | None = None

    def to_model(self) -> Session:
        return Session(
            id=self.id,
            case=self.case.to_model(),
            mode=self.mode,
            status=SessionStatus(self.status),
            score=self.score,
            student_diagnosis=self.student_diagnosis,
            started_at=self.started_at,
        )


class DialoguePayload(BaseModel):
    id: int | None = None
    session_id: int
    role: MessageRoleValue
    message: str
    timestamp: str | None = None

    def to_model(self) -> Dialogue:
        return Dialogue(
            id=self.id,
            session_id=self.session_id,
            role=MessageRole(self.role),
            message=self.message,
            timestamp=self.timestamp,
        )


class UserPayload(BaseModel):
    id: int
    username: str
    full_name: str | None = None
    role: RoleValue = "student"

    def to_model(self) -> User:
        return User(
            id=self.id,
            username=self.username,
            full_name=self.full_name,
            role=Role(self.role),
        )


class ClassRoomPayload(BaseModel):
    id: int
    name: str
    students: list[UserPayload] = Field(default_factory=list)
    created_at: str | None = None

    def to_model(self) -> ClassRoom:
        return ClassRoom(
            id=self.id,
            name=self.name,
            students=[student.to_model() for student in self.students],
            created_at=self.created_at,
        )


class DialogueCreateRequest(BaseModel):
    session_id: int
    message: str = Field(min_length=1)
    role: MessageRoleValue


class DiagnosisSubmitRequest(BaseModel):
    diagnosis: str = Field(min_length=1)


class DiagnosisResultResponse(BaseModel):
    score: int


class PatientInfoWrite(BaseModel):
    age: int | None = None
    gender: GenderValue = "male"


class CaseWriteRequest(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    difficulty: str = DEFAULT_DIFFICULTY
    diagnosis: str = Field(min_length=1)
    patient_info: PatientInfoWrite
    symptoms: list[str] = Field(default_factory=list)
    questions: list[str] = Field(default_factory=list)
    answers: list[str] = Field(default_factory=list)


class ClassCreateRequest(BaseModel):
    name: str = Field(min_length=1)


class ClassStudentAddRequest(BaseModel):
    student_id: int
