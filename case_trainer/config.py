from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip()
    return value if value else default


def _default_token_path() -> str:
    return str(Path.home() / ".case_trainer" / "token.json")


@dataclass
class TrainerConfig:
    api_base_url: str = field(
        default_factory=lambda: os.getenv("CASE_TRAINER_API_URL", "http://localhost:8000/api")
    )
    request_timeout_seconds: float = 10.0
    token_path: str = field(
        default_factory=lambda: os.getenv("CASE_TRAINER_TOKEN_PATH", _default_token_path())
    )
    pass_score: int = 60
    log_level: str = "INFO"
    interactive: bool = True

    @classmethod
    def from_env(cls) -> "TrainerConfig":
        cfg = cls()
        cfg.api_base_url = _env_str("CASE_TRAINER_API_URL", cfg.api_base_url).rstrip("/")
        cfg.request_timeout_seconds = _env_float(
            "CASE_TRAINER_TIMEOUT_SECONDS",
            cfg.request_timeout_seconds,
        )
        cfg.token_path = _env_str("CASE_TRAINER_TOKEN_PATH", cfg.token_path)
        cfg.pass_score = _env_int("CASE_TRAINER_PASS_SCORE", cfg.pass_score)
        cfg.log_level = _env_str("CASE_TRAINER_LOG_LEVEL", cfg.log_level).upper()
        cfg.interactive = _env_bool("CASE_TRAINER_INTERACTIVE", cfg.interactive)
        return cfg
