from .api_client import ApiClient, ApiRequestError
from .case_bank import CaseBankScreen, CaseForm
from .class_roster import ClassRosterScreen
from .config import TrainerConfig
from .history import HistoryScreen
from .prompts import AutoPrompter, ConsolePrompter, build_prompter
from .report import ReportScreen
from .responder import ScriptedPatientResponder, respond
from .session_context import AuthContext, TokenStore
from .training import TrainingScreen

__all__ = [
    "ApiClient",
    "ApiRequestError",
    "AuthContext",
    "AutoPrompter",
    "CaseBankScreen",
    "CaseForm",
    "ClassRosterScreen",
    "ConsolePrompter",
    "HistoryScreen",
    "ReportScreen",
    "ScriptedPatientResponder",
    "TokenStore",
    "TrainerConfig",
    "TrainingScreen",
    "build_prompter",
    "respond",
]
