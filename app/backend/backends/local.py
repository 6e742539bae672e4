# app/backend/backends/local.py
from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError

from app.backend.core.errors import DuplicateEmailError, NetworkOrStorageError
from app.backend.models.task import Task
from app.backend.models.user import User
from app.db.local_store import LocalKeyValueStore

logger = logging.getLogger(__name__)

USERS_KEY = "users"


def tasks_key(owner_id: UUID | str) -> str:
    return f"tasks_{owner_id}"


class LocalBackend:
    """
    Backend over a LocalKeyValueStore.

    Layout:
    - "users"              → {user_id: user record}
    - "tasks_<owner id>"   → [task record, ...] newest first

    Records are plain JSON dicts; timestamps are ISO-8601 strings.
    """

    def __init__(self, store: LocalKeyValueStore) -> None:
        self._store = store

    # ---- (de)serialization ----

    @staticmethod
    def _dump(obj: User | Task) -> dict[str, Any]:
        return obj.model_dump(mode="json")

    @staticmethod
    def _load_user(raw: Any) -> User:
        try:
            return User.model_validate(raw)
        except PydanticValidationError as exc:
            logger.error("local users map holds a malformed record | %s", exc)
            raise NetworkOrStorageError("Local storage is corrupt") from exc

    @staticmethod
    def _load_task(raw: Any) -> Task:
        try:
            return Task.model_validate(raw)
        except PydanticValidationError as exc:
            logger.error("local task list holds a malformed record | %s", exc)
            raise NetworkOrStorageError("Local storage is corrupt") from exc

    def _users(self) -> dict[str, Any]:
        users = self._store.get(USERS_KEY) or {}
        if not isinstance(users, dict):
            raise NetworkOrStorageError("Local storage is corrupt")
        return users

    def _tasks(self, owner_id: UUID) -> list[dict[str, Any]]:
        tasks = self._store.get(tasks_key(owner_id)) or []
        if not isinstance(tasks, list) or not all(isinstance(r, dict) for r in tasks):
            logger.error("local task list for %s is malformed", owner_id)
            raise NetworkOrStorageError("Local storage is corrupt")
        return tasks

    # ---- users ----

    def find_user_by_email(self, email: str) -> User | None:
        for raw in self._users().values():
            if isinstance(raw, dict) and raw.get("email") == email:
                return self._load_user(raw)
        return None

    def find_user_by_id(self, user_id: UUID) -> User | None:
        raw = self._users().get(str(user_id))
        return self._load_user(raw) if raw is not None else None

    def insert_user(self, user: User) -> User:
        users = self._users()
        if any(isinstance(r, dict) and r.get("email") == user.email for r in users.values()):
            raise DuplicateEmailError()
        users = dict(users)
        users[str(user.id)] = self._dump(user)
        self._store.set(USERS_KEY, users)
        return user

    # ---- tasks ----

    def list_tasks_by_owner(self, owner_id: UUID) -> list[Task]:
        return [self._load_task(raw) for raw in self._tasks(owner_id)]

    def get_task(self, owner_id: UUID, task_id: UUID) -> Task | None:
        for raw in self._tasks(owner_id):
            if raw.get("id") == str(task_id):
                return self._load_task(raw)
        return None

    def insert_task(self, task: Task) -> Task:
        tasks = self._tasks(task.user_id)
        self._store.set(tasks_key(task.user_id), [self._dump(task), *tasks])
        return task

    def update_task_by_id(self, owner_id: UUID, task_id: UUID, fields: dict[str, Any]) -> Task | None:
        tasks = self._tasks(owner_id)
        for idx, raw in enumerate(tasks):
            if raw.get("id") != str(task_id):
                continue
            task = self._load_task(raw)
            for key, value in fields.items():
                setattr(task, key, value)
            tasks = list(tasks)
            tasks[idx] = self._dump(task)
            self._store.set(tasks_key(owner_id), tasks)
            return task
        return None

    def delete_task_by_id(self, owner_id: UUID, task_id: UUID) -> bool:
        tasks = self._tasks(owner_id)
        remaining = [raw for raw in tasks if raw.get("id") != str(task_id)]
        if len(remaining) == len(tasks):
            return False
        self._store.set(tasks_key(owner_id), remaining)
        return True
