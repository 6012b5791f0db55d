from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthContext:
    """Bearer token carried explicitly into every API call."""

    token: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}


@dataclass
class TokenStore:
    """Local persisted storage for the auth token."""

    path: str

    def load(self) -> AuthContext:
        file_path = Path(self.path)
        if not file_path.exists():
            return AuthContext()
        try:
            payload = json.loads(file_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable token file %s: %s", file_path, exc)
            return AuthContext()
        token = payload.get("token") if isinstance(payload, dict) else None
        return AuthContext(token=token or None)

    def save(self, context: AuthContext) -> None:
        file_path = Path(self.path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(json.dumps({"token": context.token}), encoding="utf-8")
        logger.info("Saved auth token to %s", file_path)

    def clear(self) -> None:
        Path(self.path).unlink(missing_ok=True)
