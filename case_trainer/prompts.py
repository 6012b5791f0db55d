from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Protocol

from .config import TrainerConfig

logger = logging.getLogger(__name__)


class PrompterProtocol(Protocol):
    label: str

    def alert(self, message: str) -> None:
        ...

    def confirm(self, message: str) -> bool:
        ...


@dataclass
class AutoPrompter:
    """Non-interactive prompter: alerts go to the log, confirms get a fixed answer."""

    label: str = "auto"
    confirm_answer: bool = True

    def alert(self, message: str) -> None:
        logger.warning("Alert: %s", message)

    def confirm(self, message: str) -> bool:
        logger.info("Confirm auto-answered %s: %s", self.confirm_answer, message)
        return self.confirm_answer


@dataclass
class ConsolePrompter:
    label: str = "console"
    input_fn: Callable[[str], str] = input
    output_fn: Callable[[str], None] = print
    yes_answers: frozenset[str] = field(
        default_factory=lambda: frozenset({"y", "yes", "是", "确定"})
    )

    def alert(self, message: str) -> None:
        self.output_fn(f"[!] {message}")

    def confirm(self, message: str) -> bool:
        try:
            answer = self.input_fn(f"{message} [y/N] ")
        except EOFError:
            return False
        return answer.strip().lower() in self.yes_answers


def build_prompter(config: TrainerConfig) -> PrompterProtocol:
    if not config.interactive:
        return AutoPrompter(label="auto")
    return ConsolePrompter(label="console")
