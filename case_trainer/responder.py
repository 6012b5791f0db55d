from __future__ import annotations

from dataclasses import dataclass

from .models import Case, Gender


@dataclass
class ScriptedPatientResponder:
    """Deterministic simulated patient that answers from static case fields.

    Keyword groups are checked in a fixed order and the first hit wins:
    age, gender, symptoms, pain, history, then the case's scripted questions.
    """

    age_terms: tuple[str, ...] = ("年龄", "多大")
    gender_terms: tuple[str, ...] = ("性别", "男女")
    symptom_terms: tuple[str, ...] = ("症状", "不舒服")
    pain_terms: tuple[str, ...] = ("疼痛", "疼")
    history_terms: tuple[str, ...] = ("病史", "以前")
    pain_marker: str = "痛"
    question_prefix_length: int = 4
    symptom_separator: str = "、"
    unknown_age: str = "未知"
    pain_fallback: str = "患者有疼痛症状。"
    history_reply: str = "患者有一些既往病史，需要具体询问。"
    missing_answer_reply: str = "需要进一步检查确认。"
    fallback_reply: str = "请继续询问更多细节，或根据已有信息进行诊断。"

    def respond(self, query: str, case: Case) -> str:
        normalized = query.lower()
        patient = case.patient_info

        if self._mentions(normalized, self.age_terms):
            age = self.unknown_age
            if patient is not None and patient.age is not None:
                age = patient.age
            return f"患者{age}岁。"
        if self._mentions(normalized, self.gender_terms):
            is_male = patient is not None and patient.gender == Gender.MALE
            return f"患者是{'男性' if is_male else '女性'}。"
        if self._mentions(normalized, self.symptom_terms):
            return f"患者主要症状有：{self.symptom_separator.join(case.symptoms)}。"
        if self._mentions(normalized, self.pain_terms):
            return self._pain_reply(case.symptoms)
        if self._mentions(normalized, self.history_terms):
            return self.history_reply
        scripted = self._scripted_reply(normalized, case)
        if scripted is not None:
            return scripted
        return self.fallback_reply

    @staticmethod
    def _mentions(normalized: str, terms: tuple[str, ...]) -> bool:
        return any(term in normalized for term in terms)

    def _pain_reply(self, symptoms: list[str]) -> str:
        for symptom in symptoms:
            if self.pain_marker in symptom:
                return symptom
        return self.pain_fallback

    def _scripted_reply(self, normalized: str, case: Case) -> str | None:
        # Only the leading characters of each scripted question are matched.
        for index, question in enumerate(case.questions):
            if question[: self.question_prefix_length] in normalized:
                if index < len(case.answers) and case.answers[index]:
                    return case.answers[index]
                return self.missing_answer_reply
        return None


_DEFAULT_RESPONDER = ScriptedPatientResponder()


def respond(query: str, case: Case) -> str:
    return _DEFAULT_RESPONDER.respond(query, case)
