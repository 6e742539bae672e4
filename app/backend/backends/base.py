# app/backend/backends/base.py

from __future__ import annotations

"""
Persistence backend port.

Auth and task stores depend on this Protocol only; the concrete backend
(SQL database or local key-value file) is picked once at configuration time.
All task operations take the owner id explicitly: a task that belongs to
someone else is indistinguishable from a missing one.
"""

from typing import Any, Protocol
from uuid import UUID

from app.backend.models.task import Task
from app.backend.models.user import User


class PersistenceBackend(Protocol):
    def find_user_by_email(self, email: str) -> User | None: ...
    def find_user_by_id(self, user_id: UUID) -> User | None: ...

    def insert_user(self, user: User) -> User:
        """Raises DuplicateEmailError when the email is already registered."""
        ...

    def list_tasks_by_owner(self, owner_id: UUID) -> list[Task]:
        """Newest-created first."""
        ...

    def get_task(self, owner_id: UUID, task_id: UUID) -> Task | None: ...
    def insert_task(self, task: Task) -> Task: ...

    def update_task_by_id(
            self,
            owner_id: UUID,
            task_id: UUID,
            fields: dict[str, Any],
    ) -> Task | None:
        """Applies `fields` verbatim; returns None when the task is absent."""
        ...

    def delete_task_by_id(self, owner_id: UUID, task_id: UUID) -> bool: ...
