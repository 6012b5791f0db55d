from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, TypeVar

from pydantic import ValidationError

from .api_client import ApiClient, ApiRequestError
from .prompts import PrompterProtocol
from .session_context import AuthContext

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LoadState(str, Enum):
    IDLE = "IDLE"
    LOADING = "LOADING"
    READY = "READY"
    FAILED = "FAILED"


@dataclass
class ViewState:
    load_state: LoadState = LoadState.IDLE
    error: Optional[str] = None

    @property
    def loading(self) -> bool:
        return self.load_state in {LoadState.IDLE, LoadState.LOADING}

    def begin(self) -> None:
        self.load_state = LoadState.LOADING
        self.error = None

    def ready(self) -> None:
        self.load_state = LoadState.READY
        self.error = None

    def fail(self, error: str) -> None:
        self.load_state = LoadState.FAILED
        self.error = error


@dataclass
class Screen:
    """Shared wiring for one screen: API client, auth context and prompter.

    Loads leave the screen in READY or FAILED. Mutations report failures
    through the prompter and never roll back local state.
    """

    api: ApiClient
    auth: AuthContext
    prompter: PrompterProtocol
    state: ViewState = field(init=False, default_factory=ViewState)

    def _load(
        self,
        loader: Callable[[], T],
        *,
        failure_alert: str | None = None,
    ) -> T | None:
        self.state.begin()
        try:
            result = loader()
        except (ApiRequestError, ValidationError) as exc:
            logger.error("%s load failed: %s", type(self).__name__, exc)
            self.state.fail(str(exc))
            if failure_alert:
                self.prompter.alert(failure_alert)
            return None
        self.state.ready()
        return result

    def _mutate(
        self,
        action: Callable[[], T],
        *,
        failure_alert: str,
    ) -> tuple[bool, T | None]:
        try:
            return True, action()
        except (ApiRequestError, ValidationError) as exc:
            logger.error("%s mutation failed: %s", type(self).__name__, exc)
            self.prompter.alert(failure_alert)
            return False, None
