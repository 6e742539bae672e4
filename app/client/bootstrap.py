# app/client/bootstrap.py

"""
Client composition root.

- CLIENT_MODE=remote: auth and tasks go through the REST API (ApiClient)
- CLIENT_MODE=local:  auth and tasks run in-process over the configured
  persistence backend (local key-value file by default)

Either way the session pointer lives in CLIENT_STORAGE_PATH and the task
gateway is always built from an explicit, authenticated SessionState.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping
from uuid import UUID

import httpx

from app.backend.core.config import Settings, get_settings
from app.backend.core.errors import InvalidCredentialsError
from app.backend.dependencies.stores import build_backend
from app.backend.models.task import TaskStatus
from app.backend.schemas.task import TaskRead
from app.backend.services.auth_service import AuthStore
from app.backend.services.task_service import TaskStore
from app.client.api import ApiClient
from app.client.session import SessionController, SessionState
from app.db.local_store import LocalKeyValueStore, SessionPointerStore

logger = logging.getLogger(__name__)


class LocalTasks:
    """In-process task gateway with the same async call shape as RemoteTasks."""

    def __init__(self, store: TaskStore) -> None:
        self._store = store

    async def list_all(self) -> list[TaskRead]:
        return [TaskRead.model_validate(t) for t in self._store.list_all()]

    async def create(
        self,
        title: str,
        description: str,
        status: TaskStatus | str = TaskStatus.PENDING,
    ) -> TaskRead:
        return TaskRead.model_validate(self._store.create(title, description, status))

    async def update(self, task_id: UUID | str, fields: Mapping[str, Any]) -> TaskRead:
        return TaskRead.model_validate(self._store.update(task_id, fields))

    async def delete(self, task_id: UUID | str) -> None:
        self._store.delete(task_id)


class ClientApp:
    def __init__(self, session: SessionController, task_factory: Callable[[SessionState], Any]) -> None:
        self.session = session
        self._task_factory = task_factory

    def tasks(self):
        """Task gateway scoped to the current session's owner."""
        state = self.session.state
        if not state.is_authenticated or state.user is None:
            raise InvalidCredentialsError("Not authenticated")
        return self._task_factory(state)


def create_client(
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    pointer_store: LocalKeyValueStore | None = None,
) -> ClientApp:
    if settings is None:
        settings = get_settings()

    pointers = SessionPointerStore(
        pointer_store
        or LocalKeyValueStore(settings.client_storage_path, namespace=settings.local_store_namespace)
    )

    mode = settings.client_mode
    if mode == "local":
        backend = build_backend(settings)
        auth: Any = AuthStore(backend)

        def task_factory(state: SessionState) -> LocalTasks:
            return LocalTasks(TaskStore(backend, state.user.id))

    elif mode == "remote":
        api = ApiClient(settings.api_url, transport=transport)
        auth = api.auth

        def task_factory(state: SessionState):
            return api.with_token(state.token).tasks

    else:
        raise RuntimeError("CLIENT_MODE must be one of local|remote")

    logger.info("client mode: %s", mode)
    controller = SessionController(auth, pointers)
    controller.start()
    return ClientApp(controller, task_factory)
