from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request, Response, status
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

from case_trainer.api_client import ApiClient
from case_trainer.schemas import (
    CaseWriteRequest,
    ClassCreateRequest,
    ClassStudentAddRequest,
    DiagnosisSubmitRequest,
    DialogueCreateRequest,
)
from case_trainer.session_context import AuthContext

TEST_TOKEN = "test-token"


def sample_case(case_id: int = 1) -> dict[str, Any]:
    return {
        "id": case_id,
        "title": "急性胸痛",
        "description": "患者，男，58岁，突发胸骨后压榨样疼痛2小时，伴大汗。",
        "difficulty": "中等",
        "diagnosis": "急性心肌梗死",
        "patient_info": {"age": 58, "gender": "male"},
        "symptoms": ["胸痛", "大汗", "乏力"],
        "questions": ["吸烟情况如何", "家族里有心脏病吗", "疼痛放射到哪里"],
        "answers": ["吸烟三十年，每天一包。", "父亲有冠心病。", "放射到左肩。"],
    }


@dataclass
class FakeBackend:
    cases: dict[int, dict[str, Any]] = field(default_factory=dict)
    sessions: dict[int, dict[str, Any]] = field(default_factory=dict)
    dialogues: list[dict[str, Any]] = field(default_factory=list)
    classes: dict[int, dict[str, Any]] = field(default_factory=dict)
    users: dict[int, dict[str, Any]] = field(default_factory=dict)
    requests: list[tuple[str, str, str | None]] = field(default_factory=list)
    failures: set[tuple[str, str]] = field(default_factory=set)
    next_id: int = 100

    def new_id(self) -> int:
        self.next_id += 1
        return self.next_id

    def fail(self, method: str, path: str) -> None:
        self.failures.add((method, path))

    def seed(self) -> None:
        self.cases[1] = sample_case(1)
        self.sessions[1] = {
            "id": 1,
            "case": self.cases[1],
            "mode": "practice",
            "status": "in_progress",
            "score": None,
            "student_diagnosis": None,
            "started_at": "2026-03-02T08:30:00Z",
        }
        self.sessions[2] = {
            "id": 2,
            "case": self.cases[1],
            "mode": "exam",
            "status": "completed",
            "score": 80,
            "student_diagnosis": "急性心肌梗死",
            "started_at": "2026-03-01T09:00:00Z",
        }
        self.dialogues.append(
            {
                "id": 1,
                "session_id": 1,
                "role": "user",
                "message": "您好",
                "timestamp": "2026-03-02T08:31:00Z",
            }
        )
        self.users[11] = {"id": 11, "username": "s11", "full_name": "王小明", "role": "student"}
        self.users[12] = {"id": 12, "username": "s12", "full_name": "李华", "role": "student"}
        self.users[20] = {"id": 20, "username": "t20", "full_name": "张老师", "role": "teacher"}
        self.classes[5] = {
            "id": 5,
            "name": "临床一班",
            "students": [self.users[11]],
            "created_at": "2026-02-01T00:00:00Z",
        }


def _build_app(backend: FakeBackend) -> FastAPI:
    def require_token(request: Request) -> None:
        if request.headers.get("authorization") != f"Bearer {TEST_TOKEN}":
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated.")

    router = APIRouter(dependencies=[Depends(require_token)])

    def _session_or_404(session_id: int) -> dict[str, Any]:
        session = backend.sessions.get(session_id)
        if not session:
            raise HTTPException(status_code=404, detail="Session not found.")
        return session

    @router.get("/sessions")
    def list_sessions() -> list[dict[str, Any]]:
        return list(backend.sessions.values())

    @router.get("/sessions/{session_id}")
    def get_session(session_id: int) -> dict[str, Any]:
        return _session_or_404(session_id)

    @router.get("/sessions/{session_id}/dialogues")
    def list_dialogues(session_id: int) -> list[dict[str, Any]]:
        _session_or_404(session_id)
        return [item for item in backend.dialogues if item["session_id"] == session_id]

    @router.post("/dialogues", status_code=status.HTTP_201_CREATED)
    def create_dialogue(payload: DialogueCreateRequest) -> dict[str, Any]:
        item = {**payload.model_dump(), "id": backend.new_id(), "timestamp": "2026-03-02T09:00:00Z"}
        backend.dialogues.append(item)
        return item

    @router.post("/sessions/{session_id}/diagnosis")
    def submit_diagnosis(session_id: int, payload: DiagnosisSubmitRequest) -> dict[str, Any]:
        session = _session_or_404(session_id)
        score = 90 if payload.diagnosis == session["case"]["diagnosis"] else 40
        session.update(status="completed", score=score, student_diagnosis=payload.diagnosis)
        return {"score": score}

    @router.get("/cases")
    def list_cases() -> list[dict[str, Any]]:
        return list(backend.cases.values())

    @router.post("/cases", status_code=status.HTTP_201_CREATED)
    def create_case(payload: CaseWriteRequest) -> dict[str, Any]:
        case_id = backend.new_id()
        backend.cases[case_id] = {**payload.model_dump(), "id": case_id}
        return backend.cases[case_id]

    @router.put("/cases/{case_id}")
    def update_case(case_id: int, payload: CaseWriteRequest) -> dict[str, Any]:
        if case_id not in backend.cases:
            raise HTTPException(status_code=404, detail="Case not found.")
        backend.cases[case_id] = {**payload.model_dump(), "id": case_id}
        return backend.cases[case_id]

    @router.delete("/cases/{case_id}")
    def delete_case(case_id: int) -> Response:
        if backend.cases.pop(case_id, None) is None:
            raise HTTPException(status_code=404, detail="Case not found.")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @router.get("/classes")
    def list_classes() -> list[dict[str, Any]]:
        return list(backend.classes.values())

    @router.post("/classes", status_code=status.HTTP_201_CREATED)
    def create_class(payload: ClassCreateRequest) -> dict[str, Any]:
        class_id = backend.new_id()
        backend.classes[class_id] = {"id": class_id, "name": payload.name, "students": []}
        return backend.classes[class_id]

    @router.delete("/classes/{class_id}")
    def delete_class(class_id: int) -> Response:
        if backend.classes.pop(class_id, None) is None:
            raise HTTPException(status_code=404, detail="Class not found.")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @router.post("/classes/{class_id}/students")
    def add_student(class_id: int, payload: ClassStudentAddRequest) -> dict[str, Any]:
        classroom = backend.classes.get(class_id)
        student = backend.users.get(payload.student_id)
        if not classroom or not student:
            raise HTTPException(status_code=404, detail="Class or student not found.")
        classroom["students"].append(student)
        return classroom

    @router.delete("/classes/{class_id}/students/{student_id}")
    def remove_student(class_id: int, student_id: int) -> Response:
        classroom = backend.classes.get(class_id)
        if not classroom:
            raise HTTPException(status_code=404, detail="Class not found.")
        classroom["students"] = [s for s in classroom["students"] if s["id"] != student_id]
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @router.get("/users")
    def list_users(role: str | None = Query(default=None)) -> list[dict[str, Any]]:
        return [u for u in backend.users.values() if role is None or u["role"] == role]

    app = FastAPI(title="Fake Case Trainer API")

    @app.middleware("http")
    async def record_and_inject(request: Request, call_next):
        backend.requests.append(
            (request.method, request.url.path, request.headers.get("authorization"))
        )
        if (request.method, request.url.path) in backend.failures:
            return JSONResponse(status_code=500, content={"detail": "Injected failure."})
        return await call_next(request)

    app.include_router(router)
    return app


class SpyPrompter:
    label = "spy"

    def __init__(self, confirm_answer: bool = True) -> None:
        self.confirm_answer = confirm_answer
        self.alerts: list[str] = []
        self.confirms: list[str] = []

    def alert(self, message: str) -> None:
        self.alerts.append(message)

    def confirm(self, message: str) -> bool:
        self.confirms.append(message)
        return self.confirm_answer


@pytest.fixture
def backend() -> FakeBackend:
    state = FakeBackend()
    state.seed()
    return state


@pytest.fixture
def api(backend: FakeBackend) -> ApiClient:
    client = ApiClient(http_client=TestClient(_build_app(backend)))
    yield client
    client.close()


@pytest.fixture
def auth() -> AuthContext:
    return AuthContext(token=TEST_TOKEN)


@pytest.fixture
def prompter() -> SpyPrompter:
    return SpyPrompter()


@pytest.fixture
def declining_prompter() -> SpyPrompter:
    return SpyPrompter(confirm_answer=False)
