from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from .config import TrainerConfig
from .session_context import AuthContext

logger = logging.getLogger(__name__)


class ApiRequestError(RuntimeError):
    """Single failure path for network errors, non-2xx responses and bad bodies."""

    def __init__(
        self,
        method: str,
        path: str,
        detail: str,
        status_code: int | None = None,
    ) -> None:
        self.method = method
        self.path = path
        self.detail = detail
        self.status_code = status_code
        status = f"HTTP {status_code}" if status_code is not None else "no response"
        super().__init__(f"{method} {path} failed ({status}): {detail}")


@dataclass
class ApiClient:
    base_url: str = "http://localhost:8000/api"
    timeout_seconds: float = 10.0
    http_client: httpx.Client | None = None

    def __post_init__(self) -> None:
        if self.http_client is None:
            self.http_client = httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout_seconds,
            )

    @classmethod
    def from_config(cls, config: TrainerConfig) -> "ApiClient":
        return cls(
            base_url=config.api_base_url,
            timeout_seconds=config.request_timeout_seconds,
        )

    def get(
        self,
        path: str,
        auth: AuthContext,
        *,
        params: dict[str, Any] | None = None,
    ) -> Any:
        return self._request("GET", path, auth=auth, params=params)

    def post(self, path: str, body: Any, auth: AuthContext) -> Any:
        return self._request("POST", path, auth=auth, body=body)

    def put(self, path: str, body: Any, auth: AuthContext) -> Any:
        return self._request("PUT", path, auth=auth, body=body)

    def delete(self, path: str, auth: AuthContext) -> Any:
        return self._request("DELETE", path, auth=auth)

    def close(self) -> None:
        if self.http_client is not None:
            self.http_client.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        auth: AuthContext,
        body: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        logger.debug("%s %s", method, path)
        try:
            response = self.http_client.request(
                method,
                path,
                json=body,
                params=params,
                headers=auth.headers(),
            )
        except httpx.HTTPError as exc:
            raise ApiRequestError(method, path, str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            raise ApiRequestError(
                method,
                path,
                _error_detail(response),
                status_code=response.status_code,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiRequestError(
                method,
                path,
                f"Malformed response body: {exc}",
                status_code=response.status_code,
            ) from exc


def _error_detail(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(payload, dict) and "detail" in payload:
        return str(payload["detail"])
    return str(payload)[:200]
