from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

from .models import SCORING_DIMENSIONS, ScoringDimension, Session
from .schemas import SessionPayload
from .view_state import Screen


@dataclass(frozen=True)
class DimensionScore:
    dimension: ScoringDimension
    points: int

    @property
    def label(self) -> str:
        return f"{self.dimension.icon} {self.dimension.name}"

    @property
    def summary(self) -> str:
        return f"{self.points}/{self.dimension.weight}分"


def dimension_breakdown(
    score: int,
    dimensions: tuple[ScoringDimension, ...] = SCORING_DIMENSIONS,
) -> list[DimensionScore]:
    # Rounded half up, not to even.
    return [
        DimensionScore(dimension=dim, points=math.floor(score * dim.weight / 100 + 0.5))
        for dim in dimensions
    ]


@dataclass
class ReportScreen(Screen):
    session_id: int
    pass_score: int = 60
    session: Optional[Session] = field(init=False, default=None)

    def load(self) -> None:
        def _fetch() -> Session:
            raw = self.api.get(f"/sessions/{self.session_id}", self.auth)
            return SessionPayload.model_validate(raw).to_model()

        self.session = self._load(_fetch)

    @property
    def score(self) -> int:
        if self.session is None or self.session.score is None:
            return 0
        return self.session.score

    @property
    def is_pass(self) -> bool:
        return self.score >= self.pass_score

    @property
    def headline(self) -> str:
        return "恭喜！诊断正确" if self.is_pass else "继续加油，诊断有误"

    @property
    def student_diagnosis(self) -> str:
        if self.session is None:
            return ""
        return self.session.student_diagnosis or ""

    @property
    def correct_diagnosis(self) -> str:
        if self.session is None:
            return ""
        return self.session.case.diagnosis

    def breakdown(self) -> list[DimensionScore]:
        return dimension_breakdown(self.score)
