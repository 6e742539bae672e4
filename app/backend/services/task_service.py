from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Mapping
from uuid import UUID

from app.backend.backends.base import PersistenceBackend
from app.backend.core.errors import NotFoundError, ValidationError
from app.backend.models.common import as_utc, utcnow
from app.backend.models.task import Task, TaskStatus

logger = logging.getLogger(__name__)

_UPDATABLE = ("title", "description", "status")


def _required_text(value: Any, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Please add a {field}")
    return value.strip()


def _status(value: Any) -> TaskStatus:
    try:
        return TaskStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in TaskStatus)
        raise ValidationError(f"status must be one of: {allowed}")


def _task_id(value: UUID | str) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        # 형식이 틀린 id는 "없는 과제"와 동일하게 취급
        raise NotFoundError("Task not found")


class TaskStore:
    """CRUD over one owner's tasks. The owner is fixed at construction."""

    def __init__(self, backend: PersistenceBackend, owner_id: UUID) -> None:
        self._backend = backend
        self.owner_id = owner_id

    def list_all(self) -> list[Task]:
        return self._backend.list_tasks_by_owner(self.owner_id)

    def get(self, task_id: UUID | str) -> Task:
        task = self._backend.get_task(self.owner_id, _task_id(task_id))
        if task is None:
            raise NotFoundError("Task not found")
        return task

    def create(
        self,
        title: str,
        description: str,
        status: TaskStatus | str = TaskStatus.PENDING,
    ) -> Task:
        now = utcnow()
        task = Task(
            user_id=self.owner_id,
            title=_required_text(title, "title"),
            description=_required_text(description, "description"),
            status=_status(status),
            created_at=now,
            updated_at=now,
        )
        task = self._backend.insert_task(task)
        logger.info("task created | owner=%s task_id=%s", self.owner_id, task.id)
        return task

    def update(self, task_id: UUID | str, fields: Mapping[str, Any]) -> Task:
        task_id = _task_id(task_id)
        current = self.get(task_id)

        changes: dict[str, Any] = {}
        for key in _UPDATABLE:
            if key not in fields:
                continue
            value = fields[key]
            if key == "status":
                changes[key] = _status(value)
            else:
                changes[key] = _required_text(value, key)

        # updated_at은 항상 이전 값보다 커야 함 (같은 마이크로초 안의 연속 수정 대비)
        now = utcnow()
        previous = as_utc(current.updated_at)
        if now <= previous:
            now = previous + timedelta(microseconds=1)
        changes["updated_at"] = now

        task = self._backend.update_task_by_id(self.owner_id, task_id, changes)
        if task is None:
            # deleted between get() and update
            raise NotFoundError("Task not found")
        logger.info("task updated | owner=%s task_id=%s fields=%s", self.owner_id, task_id, sorted(changes))
        return task

    def delete(self, task_id: UUID | str) -> None:
        task_id = _task_id(task_id)
        if not self._backend.delete_task_by_id(self.owner_id, task_id):
            raise NotFoundError("Task not found")
        logger.info("task deleted | owner=%s task_id=%s", self.owner_id, task_id)
