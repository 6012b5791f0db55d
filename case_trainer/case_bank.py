from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from .models import DEFAULT_DIFFICULTY, Case, Gender
from .schemas import CasePayload, CaseWriteRequest, PatientInfoWrite
from .view_state import Screen

logger = logging.getLogger(__name__)

LIST_FIELDS: tuple[str, ...] = ("symptoms", "questions", "answers")
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def parse_age(raw: str | int | None) -> int | None:
    """Read a form age the lenient way: leading digits count, anything else is None."""
    if raw is None:
        return None
    if isinstance(raw, int):
        return raw
    match = _LEADING_INT_RE.match(raw)
    return int(match.group(1)) if match else None


def _list_or_blank(values: list[str]) -> list[str]:
    return list(values) if values else [""]


@dataclass
class CaseForm:
    title: str = ""
    description: str = ""
    difficulty: str = DEFAULT_DIFFICULTY
    diagnosis: str = ""
    patient_age: str = ""
    patient_gender: str = Gender.MALE.value
    symptoms: list[str] = field(default_factory=lambda: [""])
    questions: list[str] = field(default_factory=lambda: [""])
    answers: list[str] = field(default_factory=lambda: [""])

    @classmethod
    def from_case(cls, case: Case) -> "CaseForm":
        patient = case.patient_info
        return cls(
            title=case.title,
            description=case.description,
            difficulty=case.difficulty,
            diagnosis=case.diagnosis,
            patient_age=str(patient.age) if patient and patient.age is not None else "",
            patient_gender=patient.gender.value if patient else Gender.MALE.value,
            symptoms=_list_or_blank(case.symptoms),
            questions=_list_or_blank(case.questions),
            answers=_list_or_blank(case.answers),
        )

    def _items(self, name: str) -> list[str]:
        if name not in LIST_FIELDS:
            raise ValueError(f"Unknown list field: {name}")
        return getattr(self, name)

    def add_item(self, name: str) -> None:
        self._items(name).append("")

    def update_item(self, name: str, index: int, value: str) -> None:
        items = self._items(name)
        while len(items) <= index:
            items.append("")
        items[index] = value

    def remove_item(self, name: str, index: int) -> None:
        remaining = [item for i, item in enumerate(self._items(name)) if i != index]
        setattr(self, name, remaining or [""])

    def add_qa_pair(self) -> None:
        self.add_item("questions")
        self.add_item("answers")

    def remove_qa_pair(self, index: int) -> None:
        self.remove_item("questions", index)
        self.remove_item("answers", index)

    def to_request(self) -> CaseWriteRequest:
        # Each list drops its blanks independently, so Q&A pairs can shift.
        return CaseWriteRequest(
            title=self.title,
            description=self.description,
            difficulty=self.difficulty,
            diagnosis=self.diagnosis,
            patient_info=PatientInfoWrite(
                age=parse_age(self.patient_age),
                gender=self.patient_gender,
            ),
            symptoms=[item for item in self.symptoms if item],
            questions=[item for item in self.questions if item],
            answers=[item for item in self.answers if item],
        )


@dataclass
class CaseBankScreen(Screen):
    cases: list[Case] = field(init=False, default_factory=list)
    form: Optional[CaseForm] = field(init=False, default=None)
    editing_case: Optional[Case] = field(init=False, default=None)

    def load(self) -> None:
        def _fetch() -> list[Case]:
            raw = self.api.get("/cases", self.auth)
            return [CasePayload.model_validate(item).to_model() for item in raw or []]

        loaded = self._load(_fetch)
        if loaded is not None:
            self.cases = loaded

    @property
    def form_open(self) -> bool:
        return self.form is not None

    def open_create(self) -> CaseForm:
        self.editing_case = None
        self.form = CaseForm()
        return self.form

    def open_edit(self, case: Case) -> CaseForm:
        self.editing_case = case
        self.form = CaseForm.from_case(case)
        return self.form

    def close_form(self) -> None:
        self.form = None
        self.editing_case = None

    def submit(self) -> bool:
        if self.form is None:
            raise RuntimeError("No case form is open.")
        form = self.form
        editing = self.editing_case

        def _save() -> None:
            body = form.to_request().model_dump()
            if editing is not None and editing.id is not None:
                self.api.put(f"/cases/{editing.id}", body, self.auth)
            else:
                self.api.post("/cases", body, self.auth)

        ok, _ = self._mutate(_save, failure_alert="保存失败")
        if not ok:
            return False
        logger.info("Saved case %s", editing.id if editing else "(new)")
        self.close_form()
        self.load()
        return True

    def delete(self, case_id: int) -> bool:
        if not self.prompter.confirm("确定删除该病例吗？"):
            return False
        ok, _ = self._mutate(
            lambda: self.api.delete(f"/cases/{case_id}", self.auth),
            failure_alert="删除失败",
        )
        if ok:
            self.load()
        return ok
