from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .models import Session, find_training_mode
from .schemas import SessionPayload
from .view_state import Screen

DEFAULT_MODE_LABEL = "实战演练"


@dataclass(frozen=True)
class HistoryRow:
    session_id: int
    case_title: str
    mode: str
    status: str
    score: str
    started_on: str
    action: str
    route: str


def _started_on(value: str | None) -> str:
    if not value:
        return ""
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        return value


def history_row(session: Session) -> HistoryRow:
    mode = find_training_mode(session.mode)
    if session.is_completed:
        action, route = "查看报告", f"/report/{session.id}"
    else:
        action, route = "继续训练", f"/training/{session.id}"
    return HistoryRow(
        session_id=session.id,
        case_title=session.case.title,
        mode=mode.name if mode else DEFAULT_MODE_LABEL,
        status="已完成" if session.is_completed else "进行中",
        score=f"{session.score}分" if session.score is not None else "-",
        started_on=_started_on(session.started_at),
        action=action,
        route=route,
    )


@dataclass
class HistoryScreen(Screen):
    sessions: list[Session] = field(init=False, default_factory=list)

    def load(self) -> None:
        def _fetch() -> list[Session]:
            raw = self.api.get("/sessions", self.auth)
            return [SessionPayload.model_validate(item).to_model() for item in raw or []]

        loaded = self._load(_fetch)
        if loaded is not None:
            self.sessions = loaded

    def rows(self) -> list[HistoryRow]:
        return [history_row(session) for session in self.sessions]
