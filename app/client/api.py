# app/client/api.py
from __future__ import annotations

import logging
from typing import Any, Mapping
from uuid import UUID

import httpx
from pydantic import ValidationError as PydanticValidationError

from app.backend.core.errors import NetworkOrStorageError, error_for_status
from app.backend.models.task import TaskStatus
from app.backend.schemas.auth import UserRead
from app.backend.schemas.task import TaskRead
from app.backend.services.auth_service import AuthResult

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class ApiClient:
    """
    Async REST client for the task API.

    - one httpx.AsyncClient per call (no pooling across UI actions)
    - non-2xx → typed AppError rebuilt from the {"error": ...} body
    - transport errors / malformed JSON → NetworkOrStorageError
    - no retries
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self._transport = transport
        self._timeout = timeout
        self.auth = RemoteAuth(self)
        self.tasks = RemoteTasks(self)

    def with_token(self, token: str | None) -> "ApiClient":
        return ApiClient(self.base_url, token=token, transport=self._transport, timeout=self._timeout)

    async def request(self, method: str, path: str, *, json: Any = None) -> Any:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                transport=self._transport,
                timeout=self._timeout,
            ) as http:
                r = await http.request(method, path, json=json, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("API %s %s failed | %s", method, path, e)
            raise NetworkOrStorageError(f"Network error: {e.__class__.__name__}") from e

        if r.status_code == 204 or not r.content:
            if r.is_success:
                return None
            data: Any = {}
        else:
            try:
                data = r.json()
            except ValueError as e:
                logger.warning("API %s %s returned non-JSON body (status=%s)", method, path, r.status_code)
                if r.is_success:
                    raise NetworkOrStorageError("Malformed response from server") from e
                data = {}

        if not r.is_success:
            message = data.get("error") if isinstance(data, dict) else None
            logger.info("API %s %s -> %s | %s", method, path, r.status_code, message)
            raise error_for_status(r.status_code, message or f"Request failed ({r.status_code})")
        return data


def _parse(model, data: Any):
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise NetworkOrStorageError("Malformed response from server") from e


class RemoteAuth:
    """Auth gateway over POST /api/auth/*. Same call shape as AuthStore, but async."""

    def __init__(self, api: ApiClient) -> None:
        self._api = api

    def _result(self, data: Any) -> AuthResult:
        if not isinstance(data, dict) or "token" not in data:
            raise NetworkOrStorageError("Malformed response from server")
        return AuthResult(user=_parse(UserRead, data.get("user")), token=str(data["token"]))

    async def signup(self, email: str, password: str, name: str) -> AuthResult:
        data = await self._api.request(
            "POST", "/api/auth/signup", json={"email": email, "password": password, "name": name}
        )
        return self._result(data)

    async def login(self, email: str, password: str) -> AuthResult:
        data = await self._api.request(
            "POST", "/api/auth/login", json={"email": email, "password": password}
        )
        return self._result(data)

    def logout(self) -> None:
        # JWT는 stateless: 클라이언트 쪽 포인터만 지우면 됨 (SessionController가 처리)
        return None


class RemoteTasks:
    def __init__(self, api: ApiClient) -> None:
        self._api = api

    async def list_all(self) -> list[TaskRead]:
        data = await self._api.request("GET", "/api/tasks")
        if not isinstance(data, list):
            raise NetworkOrStorageError("Malformed response from server")
        return [_parse(TaskRead, item) for item in data]

    async def create(
        self,
        title: str,
        description: str,
        status: TaskStatus | str = TaskStatus.PENDING,
    ) -> TaskRead:
        body = {
            "title": title,
            "description": description,
            "status": status.value if isinstance(status, TaskStatus) else status,
        }
        return _parse(TaskRead, await self._api.request("POST", "/api/tasks", json=body))

    async def update(self, task_id: UUID | str, fields: Mapping[str, Any]) -> TaskRead:
        body = {k: (v.value if isinstance(v, TaskStatus) else v) for k, v in fields.items()}
        return _parse(TaskRead, await self._api.request("PUT", f"/api/tasks/{task_id}", json=body))

    async def delete(self, task_id: UUID | str) -> None:
        await self._api.request("DELETE", f"/api/tasks/{task_id}")
