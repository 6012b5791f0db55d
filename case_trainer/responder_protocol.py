from __future__ import annotations

from typing import Protocol

from .models import Case


class PatientResponder(Protocol):
    def respond(self, query: str, case: Case) -> str:
        ...
