from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from pydantic import ValidationError

from .api_client import ApiRequestError
from .models import ChatMessage, Gender, MessageRole, Session, find_training_mode
from .responder import ScriptedPatientResponder
from .responder_protocol import PatientResponder
from .schemas import (
    DiagnosisResultResponse,
    DiagnosisSubmitRequest,
    DialogueCreateRequest,
    DialoguePayload,
    SessionPayload,
)
from .view_state import Screen

logger = logging.getLogger(__name__)

TRAINING_TABS: tuple[str, ...] = ("chat", "physical", "auxiliary", "diagnosis")
DEFAULT_MODE_NAME = "实战演练模式"
COMPLAINT_PREVIEW_LENGTH = 50


@dataclass
class TrainingScreen(Screen):
    session_id: int
    responder: PatientResponder = field(default_factory=ScriptedPatientResponder)
    session: Optional[Session] = field(init=False, default=None)
    messages: list[ChatMessage] = field(init=False, default_factory=list)
    active_tab: str = field(init=False, default="chat")

    def load(self) -> None:
        def _fetch() -> tuple[Session, list[ChatMessage]]:
            raw_session = self.api.get(f"/sessions/{self.session_id}", self.auth)
            session = SessionPayload.model_validate(raw_session).to_model()
            raw_dialogues = self.api.get(f"/sessions/{self.session_id}/dialogues", self.auth)
            history = [
                DialoguePayload.model_validate(item).to_model() for item in raw_dialogues or []
            ]
            messages = [
                ChatMessage(role=item.role, content=item.message, timestamp=item.timestamp)
                for item in history
            ]
            return session, messages

        loaded = self._load(_fetch, failure_alert="加载会话失败")
        if loaded is not None:
            self.session, self.messages = loaded

    def select_tab(self, tab: str) -> None:
        if tab not in TRAINING_TABS:
            raise ValueError(f"Unknown training tab: {tab}")
        self.active_tab = tab

    def send_message(self, text: str) -> Optional[str]:
        """Post the student's question, answer it as the patient and post the answer.

        Returns the patient's reply, or None when nothing was sent or a request failed.
        Failures are logged only; the chat keeps whatever was already appended.
        """
        if not text.strip():
            return None
        if self.session is None:
            logger.warning("send_message called before session %s loaded", self.session_id)
            return None

        self.messages.append(ChatMessage(role=MessageRole.USER, content=text))
        try:
            self._save_dialogue(text, MessageRole.USER)
            reply = self.responder.respond(text, self.session.case)
            self.messages.append(ChatMessage(role=MessageRole.AI, content=reply))
            self._save_dialogue(reply, MessageRole.AI)
        except (ApiRequestError, ValidationError) as exc:
            logger.error("Failed to record dialogue for session %s: %s", self.session_id, exc)
            return None
        return reply

    def submit_diagnosis(self, diagnosis: str) -> Optional[str]:
        """Submit the final diagnosis; returns the report route on success."""
        if not diagnosis.strip():
            self.prompter.alert("请输入诊断")
            return None
        if not self.prompter.confirm("确定提交诊断吗？提交后将无法修改。"):
            return None

        def _submit() -> DiagnosisResultResponse:
            body = DiagnosisSubmitRequest(diagnosis=diagnosis)
            raw = self.api.post(
                f"/sessions/{self.session_id}/diagnosis",
                body.model_dump(),
                self.auth,
            )
            return DiagnosisResultResponse.model_validate(raw)

        ok, result = self._mutate(_submit, failure_alert="提交失败")
        if not ok or result is None:
            return None
        self.prompter.alert(f"诊断提交成功！\n得分：{result.score}分")
        return f"/report/{self.session_id}"

    @property
    def header(self) -> dict[str, str]:
        if self.session is None:
            return {"title": "", "mode": DEFAULT_MODE_NAME, "difficulty": ""}
        mode = find_training_mode(self.session.mode)
        return {
            "title": self.session.case.title,
            "mode": mode.name if mode else DEFAULT_MODE_NAME,
            "difficulty": self.session.case.difficulty,
        }

    @property
    def patient_panel(self) -> list[str]:
        if self.session is None:
            return []
        case = self.session.case
        patient = case.patient_info
        age = patient.age if patient and patient.age is not None else ""
        gender = "男" if patient and patient.gender == Gender.MALE else "女"
        return [
            f"年龄：{age}岁",
            f"性别：{gender}",
            f"主诉：{case.description[:COMPLAINT_PREVIEW_LENGTH]}...",
        ]

    def _save_dialogue(self, message: str, role: MessageRole) -> None:
        body = DialogueCreateRequest(session_id=self.session_id, message=message, role=role.value)
        self.api.post("/dialogues", body.model_dump(), self.auth)
